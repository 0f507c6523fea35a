"""Discovery session — one gamer working through a resolved feed.

States::

    IDLE ──load──▶ PRESENTING(i) ──swipe──▶ SWIPING ──▶ PRESENTING(i+1)
                                                    └──▶ EXHAUSTED ──refresh──▶ …

A refresh re-resolves the feed from scratch and resets the index. Reels swiped
earlier stay out because the resolver excludes them.
"""

import logging
import uuid
from enum import Enum
from typing import Optional

from indiereels.errors import ValidationError
from indiereels.services.feed import FeedReel, FeedResolver
from indiereels.services.swipes import SwipeDirection, SwipeRecorder, SwipeResult, parse_direction

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    SWIPING = "swiping"
    EXHAUSTED = "exhausted"


class DiscoverySession:
    """Client-local swipe session bound to one user."""

    def __init__(self, user_id: uuid.UUID, resolver: FeedResolver, recorder: SwipeRecorder):
        self.user_id = user_id
        self.resolver = resolver
        self.recorder = recorder
        self.state = SessionState.IDLE
        self.index = 0
        self.reels: list[FeedReel] = []

    @property
    def current(self) -> Optional[FeedReel]:
        """The reel on screen, if any."""
        if self.state in (SessionState.PRESENTING, SessionState.SWIPING):
            return self.reels[self.index]
        return None

    @property
    def remaining(self) -> int:
        return max(len(self.reels) - self.index, 0)

    async def load(self) -> None:
        """Resolve the feed and present the first reel."""
        if self.state is SessionState.SWIPING:
            raise ValidationError("Wait for the current swipe to finish")
        self.reels = await self.resolver.resolve(self.user_id)
        self.index = 0
        self.state = SessionState.PRESENTING if self.reels else SessionState.EXHAUSTED
        logger.debug("Session for %s loaded %d reels", self.user_id, len(self.reels))

    async def refresh(self) -> None:
        await self.load()

    async def swipe(self, direction: str | SwipeDirection) -> SwipeResult:
        """Record a decision on the current reel and advance."""
        if self.state is SessionState.SWIPING:
            raise ValidationError("A swipe is already in progress")
        if self.state is not SessionState.PRESENTING:
            raise ValidationError("There is no reel to swipe")
        direction = parse_direction(direction)

        reel = self.reels[self.index]
        self.state = SessionState.SWIPING
        try:
            result = await self.recorder.record(self.user_id, reel.id, direction)
        except Exception:
            self.state = SessionState.PRESENTING
            raise

        self.index += 1
        self.state = SessionState.PRESENTING if self.index < len(self.reels) else SessionState.EXHAUSTED
        return result
