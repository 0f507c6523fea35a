"""Feed resolver — the gamer's swipe feed.

Candidates are the reels tagged with ANY of the user's mood tags, minus every
reel the user has already swiped, newest first. There is no ranking beyond
recency and no fallback when the user has no mood tags.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from indiereels.errors import StoreError
from indiereels.models.tables import Reel, ReelTag, Swipe, UserMoodTag

logger = logging.getLogger(__name__)


@dataclass
class FeedGame:
    """The parent game shown alongside a reel."""
    id: uuid.UUID
    game_title: str
    itch_url: str
    thumbnail_url: Optional[str]


@dataclass
class FeedTag:
    id: uuid.UUID
    name: str


@dataclass
class FeedReel:
    """A reel with its game and tags, as presented to a gamer."""
    id: uuid.UUID
    video_url: str
    caption: Optional[str]
    created_at: datetime
    game: FeedGame
    tags: list[FeedTag] = field(default_factory=list)
    saved_at: Optional[datetime] = None   # Set for library listings


def to_feed_reel(reel: Reel, saved_at: Optional[datetime] = None) -> FeedReel:
    """Convert a Reel row (game and tags loaded) to a FeedReel."""
    return FeedReel(
        id=reel.id,
        video_url=reel.video_url,
        caption=reel.caption,
        created_at=reel.created_at,
        game=FeedGame(
            id=reel.game.id,
            game_title=reel.game.game_title,
            itch_url=reel.game.itch_url,
            thumbnail_url=reel.game.thumbnail_url,
        ),
        tags=[FeedTag(id=t.id, name=t.name) for t in reel.tags],
        saved_at=saved_at,
    )


class FeedResolver:
    """Computes the set of reels a gamer has not evaluated yet."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, user_id: uuid.UUID) -> list[FeedReel]:
        """Resolve the feed for *user_id* from current state.

        Each call recomputes from scratch. Any failed lookup aborts the whole
        resolution with a single StoreError.
        """
        try:
            return await self._resolve(user_id)
        except SQLAlchemyError as e:
            logger.exception("Feed resolution failed for user %s", user_id)
            raise StoreError("Could not load your feed") from e

    async def _resolve(self, user_id: uuid.UUID) -> list[FeedReel]:
        tag_ids = await self._get_mood_tag_ids(user_id)
        if not tag_ids:
            return []

        swiped = await self._get_swiped_reel_ids(user_id)
        matching = await self._get_reel_ids_for_tags(tag_ids)

        candidates = matching - swiped
        logger.debug(
            "Feed for %s: tags=%d matching=%d swiped=%d candidates=%d",
            user_id, len(tag_ids), len(matching), len(swiped), len(candidates),
        )
        if not candidates:
            return []

        result = await self.db.execute(
            select(Reel)
            .where(Reel.id.in_(list(candidates)))
            .options(selectinload(Reel.game), selectinload(Reel.tags))
            .order_by(Reel.created_at.desc())
        )
        return [to_feed_reel(reel) for reel in result.scalars()]

    # ── Internal lookups ─────────────────────────────────────────

    async def _get_mood_tag_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        result = await self.db.execute(
            select(UserMoodTag.tag_id).where(UserMoodTag.user_id == user_id)
        )
        return {row[0] for row in result.all()}

    async def _get_swiped_reel_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        result = await self.db.execute(
            select(Swipe.reel_id).where(Swipe.user_id == user_id)
        )
        return {row[0] for row in result.all()}

    async def _get_reel_ids_for_tags(self, tag_ids: set[uuid.UUID]) -> set[uuid.UUID]:
        """Reels carrying any of *tag_ids*."""
        result = await self.db.execute(
            select(ReelTag.reel_id).where(ReelTag.tag_id.in_(list(tag_ids)))
        )
        return {row[0] for row in result.all()}
