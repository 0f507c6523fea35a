"""Swipe recorder — persists a gamer's left/right decision on a reel.

A right swipe also saves the reel into the gamer's library. Both rows are
written in one transaction, and each (user, reel) pair holds exactly one
decision: repeating a swipe is a no-op that reports the decision already stored.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.errors import StoreError, ValidationError
from indiereels.models.tables import LibraryEntry, Swipe

logger = logging.getLogger(__name__)


class SwipeDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class SwipeResult:
    """Outcome of a swipe call."""
    swipe_id: uuid.UUID
    reel_id: uuid.UUID
    direction: SwipeDirection      # The stored decision, which wins over a repeat
    created: bool                  # False when the pair was already decided
    saved_to_library: bool


def parse_direction(direction: str | SwipeDirection) -> SwipeDirection:
    try:
        return SwipeDirection(direction)
    except ValueError:
        raise ValidationError(f"Swipe direction must be 'left' or 'right', got {direction!r}") from None


class SwipeRecorder:
    """Records swipes and applies the library side effect."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        user_id: uuid.UUID,
        reel_id: uuid.UUID,
        direction: str | SwipeDirection,
    ) -> SwipeResult:
        """Record one decision for (user, reel)."""
        direction = parse_direction(direction)

        try:
            existing = await self._find_swipe(user_id, reel_id)
            if existing:
                logger.warning("Duplicate swipe by %s on reel %s ignored", user_id, reel_id)
                return await self._as_existing(existing)

            swipe = Swipe(user_id=user_id, reel_id=reel_id, direction=direction.value)
            self.db.add(swipe)
            if direction is SwipeDirection.RIGHT:
                self.db.add(LibraryEntry(user_id=user_id, reel_id=reel_id))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # Lost a race against another session for the same pair, or the
            # reel/user does not exist.
            existing = await self._find_swipe_or_raise(user_id, reel_id, e)
            logger.warning("Concurrent swipe by %s on reel %s resolved to existing", user_id, reel_id)
            return await self._as_existing(existing)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Recording swipe by %s on reel %s failed", user_id, reel_id)
            raise StoreError("Could not record your swipe") from e

        logger.info("User %s swiped %s on reel %s", user_id, direction.value, reel_id)
        return SwipeResult(
            swipe_id=swipe.id,
            reel_id=reel_id,
            direction=direction,
            created=True,
            saved_to_library=direction is SwipeDirection.RIGHT,
        )

    async def _find_swipe(self, user_id: uuid.UUID, reel_id: uuid.UUID) -> Optional[Swipe]:
        result = await self.db.execute(
            select(Swipe).where(and_(Swipe.user_id == user_id, Swipe.reel_id == reel_id))
        )
        return result.scalar_one_or_none()

    async def _find_swipe_or_raise(
        self, user_id: uuid.UUID, reel_id: uuid.UUID, cause: Exception,
    ) -> Swipe:
        try:
            existing = await self._find_swipe(user_id, reel_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not record your swipe") from e
        if existing is None:
            logger.error("Swipe by %s on reel %s rejected: %s", user_id, reel_id, cause)
            raise StoreError("Could not record your swipe") from cause
        return existing

    async def _as_existing(self, swipe: Swipe) -> SwipeResult:
        try:
            result = await self.db.execute(
                select(LibraryEntry.id).where(
                    and_(LibraryEntry.user_id == swipe.user_id, LibraryEntry.reel_id == swipe.reel_id)
                )
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not record your swipe") from e
        return SwipeResult(
            swipe_id=swipe.id,
            reel_id=swipe.reel_id,
            direction=SwipeDirection(swipe.direction),
            created=False,
            saved_to_library=result.first() is not None,
        )
