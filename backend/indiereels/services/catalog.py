"""Catalog service — developers' game profiles and their reels.

Handles: game CRUD (delete cascades to reels), reel CRUD with ordered display
and up to ``max_reel_tags`` mood tags per reel. Only the owning developer may
change a game or its reels.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from indiereels.config import settings
from indiereels.errors import NotFoundError, PermissionDeniedError, StoreError, ValidationError
from indiereels.models.tables import GameProfile, Reel, ReelTag
from indiereels.services.tags import TagSelector

logger = logging.getLogger(__name__)

GAME_FIELDS = ("game_title", "description", "itch_url", "thumbnail_url")


class CatalogService:
    """Game and reel management for a developer."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Games ────────────────────────────────────────────────────

    async def list_games(self, developer_id: uuid.UUID) -> list[GameProfile]:
        """The developer's games, newest first."""
        try:
            result = await self.db.execute(
                select(GameProfile)
                .where(GameProfile.developer_id == developer_id)
                .order_by(GameProfile.created_at.desc())
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load your games") from e
        return list(result.scalars())

    async def get_game(self, developer_id: uuid.UUID, game_id: uuid.UUID) -> GameProfile:
        return await self._owned_game(developer_id, game_id)

    async def create_game(
        self,
        developer_id: uuid.UUID,
        game_title: str,
        itch_url: str,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> GameProfile:
        fields = self._validate_game_fields({
            "game_title": game_title,
            "itch_url": itch_url,
            "description": description,
            "thumbnail_url": thumbnail_url,
        })
        game = GameProfile(developer_id=developer_id, **fields)
        self.db.add(game)
        await self._commit("Could not create the game")
        await self.db.refresh(game)

        logger.info("Developer %s created game %s (%s)", developer_id, game.id, game.game_title)
        return game

    async def update_game(
        self,
        developer_id: uuid.UUID,
        game_id: uuid.UUID,
        updates: dict,
    ) -> GameProfile:
        """Apply a partial update. Unknown fields are rejected."""
        unknown = set(updates) - set(GAME_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")
        fields = self._validate_game_fields(updates)

        game = await self._owned_game(developer_id, game_id)
        for key, value in fields.items():
            setattr(game, key, value)
        game.updated_at = datetime.now(timezone.utc)
        await self._commit("Could not update the game")
        await self.db.refresh(game)

        logger.info("Developer %s updated game %s", developer_id, game_id)
        return game

    async def delete_game(self, developer_id: uuid.UUID, game_id: uuid.UUID) -> None:
        """Delete a game; its reels (and their tags, swipes, saves) go with it."""
        await self._owned_game(developer_id, game_id)
        try:
            await self.db.execute(delete(GameProfile).where(GameProfile.id == game_id))
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Could not delete the game") from e
        await self._commit("Could not delete the game")
        logger.info("Developer %s deleted game %s", developer_id, game_id)

    # ── Reels ────────────────────────────────────────────────────

    async def list_reels(self, developer_id: uuid.UUID, game_id: uuid.UUID) -> list[Reel]:
        """A game's reels in display order, with tags."""
        await self._owned_game(developer_id, game_id)
        try:
            result = await self.db.execute(
                select(Reel)
                .where(Reel.game_profile_id == game_id)
                .options(selectinload(Reel.tags))
                .order_by(Reel.order_index.asc())
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load reels") from e
        return list(result.scalars())

    async def create_reel(
        self,
        developer_id: uuid.UUID,
        game_id: uuid.UUID,
        video_url: str,
        caption: Optional[str] = None,
        tag_ids: Sequence[uuid.UUID] = (),
    ) -> Reel:
        """Append a reel after the game's last one."""
        video_url = self._require_text(video_url, "Video URL is required")
        tag_ids = self._validate_tag_ids(tag_ids)
        await self._owned_game(developer_id, game_id)
        await self._require_known_tags(tag_ids)

        try:
            result = await self.db.execute(
                select(func.max(Reel.order_index)).where(Reel.game_profile_id == game_id)
            )
            last_index = result.scalar()
            reel = Reel(
                game_profile_id=game_id,
                video_url=video_url,
                caption=_clean(caption),
                order_index=0 if last_index is None else last_index + 1,
            )
            self.db.add(reel)
            await self.db.flush()
            self.db.add_all([ReelTag(reel_id=reel.id, tag_id=tag_id) for tag_id in tag_ids])
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Could not create the reel") from e
        await self._commit("Could not create the reel")

        logger.info("Reel %s added to game %s with %d tags", reel.id, game_id, len(tag_ids))
        return await self._reel_with_tags(reel.id)

    async def update_reel(
        self,
        developer_id: uuid.UUID,
        reel_id: uuid.UUID,
        video_url: Optional[str] = None,
        caption: Optional[str] = None,
        tag_ids: Optional[Sequence[uuid.UUID]] = None,
    ) -> Reel:
        """Update video/caption and, when *tag_ids* is given, replace the tags."""
        if video_url is not None:
            video_url = self._require_text(video_url, "Video URL is required")
        if tag_ids is not None:
            tag_ids = self._validate_tag_ids(tag_ids)
            await self._require_known_tags(tag_ids)

        reel = await self._owned_reel(developer_id, reel_id)
        try:
            if video_url is not None or caption is not None:
                if video_url is not None:
                    reel.video_url = video_url
                if caption is not None:
                    reel.caption = _clean(caption)
                reel.updated_at = datetime.now(timezone.utc)
            if tag_ids is not None:
                await self.db.execute(delete(ReelTag).where(ReelTag.reel_id == reel_id))
                self.db.add_all([ReelTag(reel_id=reel_id, tag_id=tag_id) for tag_id in tag_ids])
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Could not update the reel") from e
        await self._commit("Could not update the reel")

        logger.info("Reel %s updated", reel_id)
        return await self._reel_with_tags(reel_id)

    async def delete_reel(self, developer_id: uuid.UUID, reel_id: uuid.UUID) -> None:
        await self._owned_reel(developer_id, reel_id)
        try:
            await self.db.execute(delete(Reel).where(Reel.id == reel_id))
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Could not delete the reel") from e
        await self._commit("Could not delete the reel")
        logger.info("Reel %s deleted", reel_id)

    # ── Internal methods ─────────────────────────────────────────

    async def _owned_game(self, developer_id: uuid.UUID, game_id: uuid.UUID) -> GameProfile:
        try:
            game = await self.db.get(GameProfile, game_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load the game") from e
        if game is None:
            raise NotFoundError("Game not found")
        if game.developer_id != developer_id:
            raise PermissionDeniedError("This game belongs to another developer")
        return game

    async def _owned_reel(self, developer_id: uuid.UUID, reel_id: uuid.UUID) -> Reel:
        try:
            result = await self.db.execute(
                select(Reel).where(Reel.id == reel_id).options(selectinload(Reel.game))
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load the reel") from e
        reel = result.scalar_one_or_none()
        if reel is None:
            raise NotFoundError("Reel not found")
        if reel.game.developer_id != developer_id:
            raise PermissionDeniedError("This reel belongs to another developer")
        return reel

    async def _reel_with_tags(self, reel_id: uuid.UUID) -> Reel:
        try:
            result = await self.db.execute(
                select(Reel)
                .where(Reel.id == reel_id)
                .options(selectinload(Reel.tags))
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load the reel") from e
        return result.scalar_one()

    async def _commit(self, message: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(message)
            raise StoreError(message) from e

    def _validate_game_fields(self, fields: dict) -> dict:
        cleaned = {}
        if "game_title" in fields:
            title = self._require_text(fields["game_title"], "Game title is required")
            if len(title) > settings.max_title_length:
                raise ValidationError(
                    f"Game title must be at most {settings.max_title_length} characters"
                )
            cleaned["game_title"] = title
        if "itch_url" in fields:
            cleaned["itch_url"] = self._require_text(fields["itch_url"], "itch.io URL is required")
        if "description" in fields:
            description = _clean(fields["description"])
            if description and len(description) > settings.max_description_length:
                raise ValidationError(
                    f"Description must be at most {settings.max_description_length} characters"
                )
            cleaned["description"] = description
        if "thumbnail_url" in fields:
            cleaned["thumbnail_url"] = _clean(fields["thumbnail_url"])
        return cleaned

    def _validate_tag_ids(self, tag_ids: Sequence[uuid.UUID]) -> list[uuid.UUID]:
        unique_ids = list(dict.fromkeys(tag_ids))
        if len(unique_ids) > settings.max_reel_tags:
            raise ValidationError(f"A reel can have at most {settings.max_reel_tags} tags")
        return unique_ids

    async def _require_known_tags(self, tag_ids: Sequence[uuid.UUID]) -> None:
        if await TagSelector(self.db).missing_ids(tag_ids):
            raise ValidationError("One or more tags do not exist")

    @staticmethod
    def _require_text(value: Optional[str], message: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValidationError(message)
        return value


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip; empty strings become None."""
    if value is None:
        return None
    return value.strip() or None
