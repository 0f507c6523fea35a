"""Shared pytest fixtures.

Every test gets a fresh SQLite database (foreign keys enforced, so ON DELETE
CASCADE behaves as in PostgreSQL) and in-memory stand-ins for the hosted
auth and storage APIs.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from indiereels.clients.base import AuthUser, IAuthProvider, IObjectStorage, StoredObject
from indiereels.database import Base, get_db
from indiereels.models.tables import GameProfile, Reel, ReelTag, Tag, User, UserMoodTag

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


# ── Database ─────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def engine(tmp_path):
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


# ── Seed data ────────────────────────────────────────────────────

@dataclass
class Catalog:
    """Users, tags, one game and three reels.

    Reel A is tagged Cozy, B Action, C Spooky+Action; created A < B < C.
    """
    developer: User
    gamer: User
    tags: dict[str, Tag]
    game: GameProfile
    reels: dict[str, Reel]


def make_user(user_type: str, email: Optional[str] = None, **fields) -> User:
    user_id = uuid.uuid4()
    return User(
        id=user_id,
        email=email or f"{user_type}-{user_id.hex[:8]}@example.com",
        user_type=user_type,
        **fields,
    )


async def add_reel(
    db: AsyncSession,
    game: GameProfile,
    tags: list[Tag],
    created_at: datetime,
    order_index: int,
    caption: Optional[str] = None,
) -> Reel:
    reel = Reel(
        game_profile_id=game.id,
        video_url=f"https://videos.example.com/{uuid.uuid4().hex}.mp4",
        caption=caption,
        order_index=order_index,
        created_at=created_at,
    )
    db.add(reel)
    await db.flush()
    db.add_all([ReelTag(reel_id=reel.id, tag_id=t.id) for t in tags])
    await db.flush()
    return reel


@pytest_asyncio.fixture
async def catalog(session_maker) -> Catalog:
    async with session_maker() as db:
        developer = make_user("developer", developer_name="Pixel Forge")
        gamer = make_user("gamer")
        db.add_all([developer, gamer])
        await db.flush()

        tags = {name: Tag(name=name, type="vibe") for name in ("Cozy", "Spooky", "Action", "Chill")}
        tags["Roguelike"] = Tag(name="Roguelike", type="genre")
        db.add_all(tags.values())

        game = GameProfile(
            developer_id=developer.id,
            game_title="Lantern Hollow",
            itch_url="https://pixelforge.itch.io/lantern-hollow",
            created_at=BASE_TIME,
        )
        db.add(game)
        await db.flush()

        reels = {
            "A": await add_reel(db, game, [tags["Cozy"]], BASE_TIME + timedelta(minutes=1), 0, "Cozy cabin"),
            "B": await add_reel(db, game, [tags["Action"]], BASE_TIME + timedelta(minutes=2), 1),
            "C": await add_reel(db, game, [tags["Spooky"], tags["Action"]], BASE_TIME + timedelta(minutes=3), 2),
        }
        await db.commit()
    return Catalog(developer=developer, gamer=gamer, tags=tags, game=game, reels=reels)


async def set_mood_tags(session_maker, user: User, tags: list[Tag]) -> None:
    async with session_maker() as db:
        db.add_all([UserMoodTag(user_id=user.id, tag_id=t.id) for t in tags])
        await db.commit()


# ── Hosted backend stand-ins ─────────────────────────────────────

class FakeAuthProvider(IAuthProvider):
    """Maps access tokens to users."""

    def __init__(self):
        self.tokens: dict[str, AuthUser] = {}

    def issue(self, user_id: uuid.UUID | str, email: str) -> str:
        token = f"token-{uuid.uuid4().hex}"
        self.tokens[token] = AuthUser(id=str(user_id), email=email)
        return token

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        return self.tokens.get(access_token)

class FakeStorage(IObjectStorage):

    def __init__(self):
        self.objects: dict[str, bytes] = {}

    async def upload(self, path, content, content_type, access_token=None) -> StoredObject:
        self.objects[path] = content
        return StoredObject(bucket="reel-videos", path=path, public_url=self.public_url(path))

    def public_url(self, path: str) -> str:
        return f"https://backend.example.com/storage/v1/object/public/reel-videos/{path}"

@pytest.fixture
def auth_provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


# ── API ──────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(session_maker, auth_provider, storage):
    """HTTP client bound to the app, with DB and hosted backend overridden."""
    from indiereels.main import app

    async def _get_db():
        async with session_maker() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db] = _get_db
    app.state.auth_provider = auth_provider
    app.state.storage = storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api/v1") as c:
        yield c
    app.dependency_overrides.clear()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
