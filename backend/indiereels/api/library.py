"""Gamer library endpoints."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.api.deps import require_gamer
from indiereels.api.serializers import feed_reel_to_dict
from indiereels.database import get_db
from indiereels.models.tables import User
from indiereels.services.library import LibraryService

router = APIRouter()


@router.get("/library")
async def get_library(
    user: User = Depends(require_gamer),
    db: AsyncSession = Depends(get_db),
):
    reels = await LibraryService(db).list_library(user.id)
    return {"reels": [feed_reel_to_dict(r) for r in reels], "total": len(reels)}


@router.delete("/library/{reel_id}", status_code=204)
async def remove_from_library(
    reel_id: uuid.UUID,
    user: User = Depends(require_gamer),
    db: AsyncSession = Depends(get_db),
):
    await LibraryService(db).remove(user.id, reel_id)
