"""Library service — reels a gamer saved by swiping right."""

import logging
import uuid

from sqlalchemy import select, delete, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from indiereels.errors import NotFoundError, StoreError
from indiereels.models.tables import LibraryEntry, Reel
from indiereels.services.feed import FeedReel, to_feed_reel

logger = logging.getLogger(__name__)


class LibraryService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_library(self, user_id: uuid.UUID) -> list[FeedReel]:
        """Saved reels with game and tags, most recently saved first."""
        try:
            result = await self.db.execute(
                select(LibraryEntry.saved_at, Reel)
                .join(Reel, Reel.id == LibraryEntry.reel_id)
                .where(LibraryEntry.user_id == user_id)
                .options(selectinload(Reel.game), selectinload(Reel.tags))
                .order_by(LibraryEntry.saved_at.desc())
            )
        except SQLAlchemyError as e:
            logger.exception("Loading library for %s failed", user_id)
            raise StoreError("Could not load your library") from e
        return [to_feed_reel(reel, saved_at=saved_at) for saved_at, reel in result.all()]

    async def remove(self, user_id: uuid.UUID, reel_id: uuid.UUID) -> None:
        """Remove a saved reel. The swipe stays, so it will not reappear in the feed."""
        try:
            result = await self.db.execute(
                delete(LibraryEntry).where(
                    and_(LibraryEntry.user_id == user_id, LibraryEntry.reel_id == reel_id)
                )
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Could not remove the reel from your library") from e

        if result.rowcount == 0:
            raise NotFoundError("Reel is not in your library")
        logger.info("User %s removed reel %s from library", user_id, reel_id)
