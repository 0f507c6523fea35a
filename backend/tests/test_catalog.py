"""Catalog service tests — games and reels."""

import uuid

import pytest
from sqlalchemy import select, func

from conftest import make_user
from indiereels.errors import NotFoundError, PermissionDeniedError, ValidationError
from indiereels.models.tables import LibraryEntry, Reel, ReelTag, Swipe
from indiereels.services.catalog import CatalogService


async def test_create_game_strips_and_stores(db, catalog):
    game = await CatalogService(db).create_game(
        catalog.developer.id,
        game_title="  Moss Knight ",
        itch_url="https://pixelforge.itch.io/moss-knight",
        description="   ",
    )

    assert game.game_title == "Moss Knight"
    assert game.description is None
    assert game.created_at is not None


@pytest.mark.parametrize(
    "fields",
    [
        {"game_title": "   ", "itch_url": "https://x.itch.io/y"},
        {"game_title": "x" * 101, "itch_url": "https://x.itch.io/y"},
        {"game_title": "Fine", "itch_url": ""},
        {"game_title": "Fine", "itch_url": "https://x.itch.io/y", "description": "d" * 501},
    ],
)
async def test_create_game_validation(db, catalog, fields):
    with pytest.raises(ValidationError):
        await CatalogService(db).create_game(catalog.developer.id, **fields)


async def test_list_games_newest_first(db, catalog):
    service = CatalogService(db)
    newer = await service.create_game(catalog.developer.id, "Newer", "https://x.itch.io/newer")

    games = await service.list_games(catalog.developer.id)

    assert [g.id for g in games] == [newer.id, catalog.game.id]


async def test_update_game_partial(db, catalog):
    game = await CatalogService(db).update_game(
        catalog.developer.id, catalog.game.id, {"description": "A lantern-lit adventure"},
    )

    assert game.description == "A lantern-lit adventure"
    assert game.game_title == "Lantern Hollow"


async def test_update_game_rejects_unknown_fields(db, catalog):
    with pytest.raises(ValidationError):
        await CatalogService(db).update_game(catalog.developer.id, catalog.game.id, {"developer_id": "x"})


async def test_other_developer_cannot_touch_game(db, catalog):
    intruder = make_user("developer", developer_name="Rival")
    db.add(intruder)
    await db.commit()
    service = CatalogService(db)

    with pytest.raises(PermissionDeniedError):
        await service.update_game(intruder.id, catalog.game.id, {"game_title": "Mine now"})
    with pytest.raises(PermissionDeniedError):
        await service.delete_reel(intruder.id, catalog.reels["A"].id)


async def test_unknown_game_not_found(db, catalog):
    with pytest.raises(NotFoundError):
        await CatalogService(db).get_game(catalog.developer.id, uuid.uuid4())


async def test_delete_game_cascades(db, catalog):
    db.add(Swipe(user_id=catalog.gamer.id, reel_id=catalog.reels["A"].id, direction="right"))
    db.add(LibraryEntry(user_id=catalog.gamer.id, reel_id=catalog.reels["A"].id))
    await db.commit()

    await CatalogService(db).delete_game(catalog.developer.id, catalog.game.id)

    for model in (Reel, ReelTag, Swipe, LibraryEntry):
        result = await db.execute(select(func.count()).select_from(model))
        assert result.scalar_one() == 0, model.__tablename__


async def test_create_reel_appends_with_tags(db, catalog):
    tags = [catalog.tags["Chill"].id, catalog.tags["Cozy"].id]

    reel = await CatalogService(db).create_reel(
        catalog.developer.id, catalog.game.id,
        video_url="https://videos.example.com/new.mp4",
        caption=" Night walk ",
        tag_ids=tags,
    )

    assert reel.order_index == 3
    assert reel.caption == "Night walk"
    assert [t.name for t in reel.tags] == ["Chill", "Cozy"]


async def test_create_reel_rejects_too_many_tags(db, catalog):
    tag_ids = [t.id for name, t in catalog.tags.items() if name != "Roguelike"]

    with pytest.raises(ValidationError):
        await CatalogService(db).create_reel(
            catalog.developer.id, catalog.game.id, "https://videos.example.com/x.mp4", tag_ids=tag_ids,
        )


async def test_create_reel_rejects_unknown_tag(db, catalog):
    with pytest.raises(ValidationError):
        await CatalogService(db).create_reel(
            catalog.developer.id, catalog.game.id, "https://videos.example.com/x.mp4", tag_ids=[uuid.uuid4()],
        )

    result = await db.execute(select(func.count()).select_from(Reel))
    assert result.scalar_one() == 3


async def test_update_reel_rejects_unknown_tag_and_keeps_tags(db, catalog):
    service = CatalogService(db)

    with pytest.raises(ValidationError):
        await service.update_reel(catalog.developer.id, catalog.reels["A"].id, tag_ids=[uuid.uuid4()])

    reels = await service.list_reels(catalog.developer.id, catalog.game.id)
    assert [t.name for t in reels[0].tags] == ["Cozy"]


async def test_create_reel_requires_video(db, catalog):
    with pytest.raises(ValidationError):
        await CatalogService(db).create_reel(catalog.developer.id, catalog.game.id, "  ")


async def test_order_index_follows_last_reel_after_delete(db, catalog):
    service = CatalogService(db)
    await service.delete_reel(catalog.developer.id, catalog.reels["A"].id)

    reel = await service.create_reel(catalog.developer.id, catalog.game.id, "https://videos.example.com/y.mp4")

    assert reel.order_index == 3


async def test_update_reel_replaces_tags(db, catalog):
    service = CatalogService(db)

    reel = await service.update_reel(
        catalog.developer.id, catalog.reels["C"].id, tag_ids=[catalog.tags["Chill"].id],
    )

    assert [t.name for t in reel.tags] == ["Chill"]
    assert reel.video_url == catalog.reels["C"].video_url


async def test_update_reel_caption_only_keeps_tags(db, catalog):
    reel = await CatalogService(db).update_reel(catalog.developer.id, catalog.reels["A"].id, caption="Warm")

    assert reel.caption == "Warm"
    assert [t.name for t in reel.tags] == ["Cozy"]


async def test_list_reels_in_display_order(db, catalog):
    reels = await CatalogService(db).list_reels(catalog.developer.id, catalog.game.id)

    assert [r.id for r in reels] == [catalog.reels[k].id for k in ("A", "B", "C")]
    assert [t.name for t in reels[2].tags] == ["Action", "Spooky"]
