"""Re-export all SQLAlchemy models for import convenience."""

from indiereels.models.tables import (  # noqa: F401
    User, GameProfile, Tag, ReelTag, Reel,
    UserMoodTag, Swipe, LibraryEntry,
    USER_TYPES, SWIPE_DIRECTIONS, MOOD_TAG_TYPE,
)
