"""Developer catalog endpoints — games, reels and video uploads."""

import time
import uuid
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, Header, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from indiereels.api.deps import get_access_token, get_storage, require_developer
from indiereels.api.serializers import game_to_dict, reel_to_dict
from indiereels.clients.base import IObjectStorage
from indiereels.database import get_db
from indiereels.errors import ValidationError
from indiereels.models.tables import User
from indiereels.services.catalog import CatalogService

router = APIRouter()


class GameCreate(BaseModel):
    game_title: str
    itch_url: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None


class GameUpdate(BaseModel):
    game_title: Optional[str] = None
    itch_url: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None


class ReelCreate(BaseModel):
    video_url: str
    caption: Optional[str] = None
    tag_ids: list[uuid.UUID] = []


class ReelUpdate(BaseModel):
    video_url: Optional[str] = None
    caption: Optional[str] = None
    tag_ids: Optional[list[uuid.UUID]] = None


# ── Games ────────────────────────────────────────────────────────

@router.get("/games")
async def list_games(
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    games = await CatalogService(db).list_games(user.id)
    return {"games": [game_to_dict(g) for g in games]}


@router.post("/games", status_code=201)
async def create_game(
    body: GameCreate,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    game = await CatalogService(db).create_game(
        user.id,
        game_title=body.game_title,
        itch_url=body.itch_url,
        description=body.description,
        thumbnail_url=body.thumbnail_url,
    )
    return game_to_dict(game)


@router.get("/games/{game_id}")
async def get_game(
    game_id: uuid.UUID,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    return game_to_dict(await CatalogService(db).get_game(user.id, game_id))


@router.patch("/games/{game_id}")
async def update_game(
    game_id: uuid.UUID,
    body: GameUpdate,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    game = await CatalogService(db).update_game(user.id, game_id, body.model_dump(exclude_unset=True))
    return game_to_dict(game)


@router.delete("/games/{game_id}", status_code=204)
async def delete_game(
    game_id: uuid.UUID,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    """Delete a game together with all of its reels."""
    await CatalogService(db).delete_game(user.id, game_id)


# ── Reels ────────────────────────────────────────────────────────

@router.get("/games/{game_id}/reels")
async def list_reels(
    game_id: uuid.UUID,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    reels = await CatalogService(db).list_reels(user.id, game_id)
    return {"reels": [reel_to_dict(r) for r in reels]}


@router.post("/games/{game_id}/reels", status_code=201)
async def create_reel(
    game_id: uuid.UUID,
    body: ReelCreate,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    reel = await CatalogService(db).create_reel(
        user.id, game_id,
        video_url=body.video_url,
        caption=body.caption,
        tag_ids=body.tag_ids,
    )
    return reel_to_dict(reel)


@router.patch("/reels/{reel_id}")
async def update_reel(
    reel_id: uuid.UUID,
    body: ReelUpdate,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    reel = await CatalogService(db).update_reel(
        user.id, reel_id,
        video_url=body.video_url,
        caption=body.caption,
        tag_ids=body.tag_ids,
    )
    return reel_to_dict(reel)


@router.delete("/reels/{reel_id}", status_code=204)
async def delete_reel(
    reel_id: uuid.UUID,
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    await CatalogService(db).delete_reel(user.id, reel_id)


# ── Uploads ──────────────────────────────────────────────────────

@router.post("/uploads/videos", status_code=201)
async def upload_video(
    request: Request,
    filename: str = Query(..., min_length=1),
    content_type: str = Header("video/mp4"),
    user: User = Depends(require_developer),
    token: str = Depends(get_access_token),
    storage: IObjectStorage = Depends(get_storage),
):
    """Upload a raw video body; returns the public URL to use as ``video_url``.

    Stored as ``{developer_id}/{epoch_ms}.{ext}``.
    """
    if not content_type.startswith("video/"):
        raise ValidationError("Only video files can be uploaded")
    content = await request.body()
    if not content:
        raise ValidationError("Please select a video file")

    ext = PurePosixPath(filename).suffix.lstrip(".").lower() or "mp4"
    path = f"{user.id}/{int(time.time() * 1000)}.{ext}"
    stored = await storage.upload(path, content, content_type, access_token=token)
    return {"path": stored.path, "video_url": stored.public_url}
