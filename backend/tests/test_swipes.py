"""Swipe recorder tests."""

import uuid

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from conftest import set_mood_tags
from indiereels.errors import StoreError, ValidationError
from indiereels.models.tables import LibraryEntry, Swipe
from indiereels.services.feed import FeedResolver
from indiereels.services.swipes import SwipeDirection, SwipeRecorder


async def _count(db, model, user_id, reel_id) -> int:
    result = await db.execute(
        select(func.count()).select_from(model).where(model.user_id == user_id, model.reel_id == reel_id)
    )
    return result.scalar_one()


async def test_right_swipe_saves_to_library(db, catalog):
    reel = catalog.reels["A"]

    result = await SwipeRecorder(db).record(catalog.gamer.id, reel.id, "right")

    assert result.created
    assert result.saved_to_library
    assert result.direction is SwipeDirection.RIGHT
    assert await _count(db, Swipe, catalog.gamer.id, reel.id) == 1
    assert await _count(db, LibraryEntry, catalog.gamer.id, reel.id) == 1


async def test_left_swipe_creates_no_library_entry(db, catalog):
    reel = catalog.reels["B"]

    result = await SwipeRecorder(db).record(catalog.gamer.id, reel.id, SwipeDirection.LEFT)

    assert result.created
    assert not result.saved_to_library
    assert await _count(db, Swipe, catalog.gamer.id, reel.id) == 1
    assert await _count(db, LibraryEntry, catalog.gamer.id, reel.id) == 0


async def test_repeated_right_swipe_is_a_noop(db, catalog):
    reel = catalog.reels["A"]
    recorder = SwipeRecorder(db)

    first = await recorder.record(catalog.gamer.id, reel.id, "right")
    second = await recorder.record(catalog.gamer.id, reel.id, "right")

    assert first.created and not second.created
    assert second.swipe_id == first.swipe_id
    assert second.saved_to_library
    assert await _count(db, Swipe, catalog.gamer.id, reel.id) == 1
    assert await _count(db, LibraryEntry, catalog.gamer.id, reel.id) == 1


async def test_first_decision_wins(db, catalog):
    reel = catalog.reels["C"]
    recorder = SwipeRecorder(db)

    await recorder.record(catalog.gamer.id, reel.id, "left")
    again = await recorder.record(catalog.gamer.id, reel.id, "right")

    assert not again.created
    assert again.direction is SwipeDirection.LEFT
    assert not again.saved_to_library
    assert await _count(db, LibraryEntry, catalog.gamer.id, reel.id) == 0


async def test_concurrent_duplicate_resolves_to_existing(session_maker, catalog):
    reel = catalog.reels["A"]
    async with session_maker() as other:
        await SwipeRecorder(other).record(catalog.gamer.id, reel.id, "left")

    async with session_maker() as db:
        recorder = SwipeRecorder(db)
        real_find = recorder._find_swipe
        calls = []

        async def stale_find(user_id, reel_id):
            # The first lookup misses the other session's row.
            calls.append(reel_id)
            if len(calls) == 1:
                return None
            return await real_find(user_id, reel_id)

        recorder._find_swipe = stale_find
        result = await recorder.record(catalog.gamer.id, reel.id, "right")

        assert not result.created
        assert result.direction is SwipeDirection.LEFT
        assert await _count(db, Swipe, catalog.gamer.id, reel.id) == 1
        assert await _count(db, LibraryEntry, catalog.gamer.id, reel.id) == 0


async def test_unknown_reel_is_a_store_error(db, catalog):
    with pytest.raises(StoreError):
        await SwipeRecorder(db).record(catalog.gamer.id, uuid.uuid4(), "right")

    result = await db.execute(select(func.count()).select_from(Swipe))
    assert result.scalar_one() == 0


async def test_invalid_direction_rejected_before_store(db, catalog):
    with pytest.raises(ValidationError):
        await SwipeRecorder(db).record(catalog.gamer.id, catalog.reels["A"].id, "up")

    result = await db.execute(select(func.count()).select_from(Swipe))
    assert result.scalar_one() == 0


async def test_swiped_reel_never_reappears_in_feed(db, session_maker, catalog):
    await set_mood_tags(session_maker, catalog.gamer, [catalog.tags["Cozy"], catalog.tags["Spooky"]])
    resolver = FeedResolver(db)
    recorder = SwipeRecorder(db)

    for reel in await resolver.resolve(catalog.gamer.id):
        await recorder.record(catalog.gamer.id, reel.id, "left")

    assert await resolver.resolve(catalog.gamer.id) == []


class _BrokenSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))


async def test_failed_library_lookup_on_duplicate_is_a_store_error(db, catalog):
    reel = catalog.reels["A"]
    recorder = SwipeRecorder(db)
    await recorder.record(catalog.gamer.id, reel.id, "right")
    existing = await recorder._find_swipe(catalog.gamer.id, reel.id)

    async def found(user_id, reel_id):
        return existing

    recorder._find_swipe = found
    recorder.db = _BrokenSession()

    with pytest.raises(StoreError):
        await recorder.record(catalog.gamer.id, reel.id, "right")
