"""Developer analytics endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.api.deps import require_developer
from indiereels.database import get_db
from indiereels.models.tables import User
from indiereels.services.analytics import AnalyticsService

router = APIRouter()


@router.get("/analytics")
async def get_analytics(
    user: User = Depends(require_developer),
    db: AsyncSession = Depends(get_db),
):
    """Swipe performance per game and in total."""
    report = await AnalyticsService(db).developer_report(user.id)
    return {
        "games": [
            {
                "game_id": str(g.game_id),
                "game_title": g.game_title,
                "reel_count": g.reel_count,
                "total_swipes": g.total_swipes,
                "right_swipes": g.right_swipes,
                "right_swipe_rate": g.right_swipe_rate,
            }
            for g in report.games
        ],
        "totals": {
            "games": len(report.games),
            "reels": report.total_reels,
            "total_swipes": report.total_swipes,
            "right_swipe_rate": report.right_swipe_rate,
        },
    }
