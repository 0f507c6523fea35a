"""SQLAlchemy ORM models — all database tables."""

import uuid
from datetime import datetime
from typing import Optional, List
from sqlalchemy import (
    String, Text, Integer, DateTime, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from indiereels.database import Base


USER_TYPES = ("developer", "gamer")
SWIPE_DIRECTIONS = ("left", "right")
MOOD_TAG_TYPE = "vibe"


# ── Users ────────────────────────────────────────────────────────

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)  # hosted auth user id
    email: Mapped[str] = mapped_column(String(300), unique=True, nullable=False)
    user_type: Mapped[str] = mapped_column(String(10), nullable=False)  # developer | gamer
    developer_name: Mapped[Optional[str]] = mapped_column(String(200))
    studio_name: Mapped[Optional[str]] = mapped_column(String(200))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ── Catalog ──────────────────────────────────────────────────────

class GameProfile(Base):
    __tablename__ = "game_profiles"
    __table_args__ = (
        Index("idx_game_profiles_developer", "developer_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    developer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    game_title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))
    itch_url: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(20), default=MOOD_TAG_TYPE)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class ReelTag(Base):
    __tablename__ = "reel_tags"

    reel_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("reels.id", ondelete="CASCADE"), primary_key=True)
    tag_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)


class Reel(Base):
    __tablename__ = "reels"
    __table_args__ = (
        UniqueConstraint("game_profile_id", "order_index"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    game_profile_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("game_profiles.id", ondelete="CASCADE"))
    video_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    caption: Mapped[Optional[str]] = mapped_column(Text)
    order_index: Mapped[int] = mapped_column(Integer, default=0)  # display order, never shown to gamers
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    game: Mapped[GameProfile] = relationship(lazy="raise")
    tags: Mapped[List[Tag]] = relationship(secondary="reel_tags", viewonly=True, lazy="raise", order_by=Tag.name)


# ── Discovery ────────────────────────────────────────────────────

class UserMoodTag(Base):
    __tablename__ = "user_mood_tags"
    __table_args__ = (
        Index("idx_user_mood_tags_user", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    tag_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Swipe(Base):
    __tablename__ = "swipes"
    __table_args__ = (
        UniqueConstraint("user_id", "reel_id", name="uq_swipes_user_reel"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    reel_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("reels.id", ondelete="CASCADE"))
    direction: Mapped[str] = mapped_column(String(5), nullable=False)  # left | right
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class LibraryEntry(Base):
    __tablename__ = "user_library"
    __table_args__ = (
        UniqueConstraint("user_id", "reel_id", name="uq_user_library_user_reel"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    reel_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("reels.id", ondelete="CASCADE"))
    saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
