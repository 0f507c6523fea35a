"""Gamer mood preference endpoints."""

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.api.deps import require_gamer
from indiereels.api.serializers import tag_to_dict
from indiereels.config import settings
from indiereels.database import get_db
from indiereels.errors import ValidationError
from indiereels.models.tables import User
from indiereels.services.moods import MoodPreferenceManager

router = APIRouter()


class MoodTagsUpdate(BaseModel):
    tag_ids: list[uuid.UUID]


@router.get("/me/mood-tags")
async def get_mood_tags(
    user: User = Depends(require_gamer),
    db: AsyncSession = Depends(get_db),
):
    tags = await MoodPreferenceManager(db).list_tags(user.id)
    return {"tags": [tag_to_dict(t) for t in tags]}


@router.put("/me/mood-tags")
async def replace_mood_tags(
    body: MoodTagsUpdate,
    user: User = Depends(require_gamer),
    db: AsyncSession = Depends(get_db),
):
    """Replace the mood-tag set. At least ``min_mood_tags`` are required."""
    if len(body.tag_ids) < settings.min_mood_tags:
        raise ValidationError(f"Please select at least {settings.min_mood_tags} mood tags")

    manager = MoodPreferenceManager(db)
    await manager.replace(user.id, body.tag_ids)
    tags = await manager.list_tags(user.id)
    return {"tags": [tag_to_dict(t) for t in tags]}
