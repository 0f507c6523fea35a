"""Mood tag catalog."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.api.deps import get_current_user
from indiereels.api.serializers import tag_to_dict
from indiereels.database import get_db
from indiereels.services.tags import TagSelector

router = APIRouter()


@router.get("/tags", dependencies=[Depends(get_current_user)])
async def list_tags(db: AsyncSession = Depends(get_db)):
    tags = await TagSelector(db).list_mood_tags()
    return {"tags": [tag_to_dict(t) for t in tags]}
