"""Swipe endpoint."""

import uuid

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.api.deps import require_gamer
from indiereels.database import get_db
from indiereels.models.tables import User
from indiereels.services.swipes import SwipeRecorder

router = APIRouter()


class SwipeRequest(BaseModel):
    reel_id: uuid.UUID
    direction: str          # left | right


@router.post("/swipes")
async def record_swipe(
    body: SwipeRequest,
    response: Response,
    user: User = Depends(require_gamer),
    db: AsyncSession = Depends(get_db),
):
    """Record a decision. Repeating a swipe returns the stored decision (200)."""
    result = await SwipeRecorder(db).record(user.id, body.reel_id, body.direction)
    response.status_code = 201 if result.created else 200
    return {
        "swipe_id": str(result.swipe_id),
        "reel_id": str(result.reel_id),
        "direction": result.direction.value,
        "created": result.created,
        "saved_to_library": result.saved_to_library,
    }
