"""The gamer's swipe feed."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.api.deps import require_gamer
from indiereels.api.serializers import feed_reel_to_dict
from indiereels.database import get_db
from indiereels.models.tables import User
from indiereels.services.feed import FeedResolver

router = APIRouter()


@router.get("/feed")
async def get_feed(
    user: User = Depends(require_gamer),
    db: AsyncSession = Depends(get_db),
):
    """Unswiped reels matching any of the caller's mood tags, newest first.

    Each call recomputes from current state; there is no cursor.
    """
    reels = await FeedResolver(db).resolve(user.id)
    return {
        "reels": [feed_reel_to_dict(r) for r in reels],
        "meta": {"count": len(reels)},
    }
