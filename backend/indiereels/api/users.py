"""Account profile endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from indiereels.api.deps import get_auth_user, get_current_user
from indiereels.api.serializers import user_to_dict
from indiereels.clients.base import AuthUser
from indiereels.database import get_db
from indiereels.models.tables import User
from indiereels.services.accounts import AccountService

router = APIRouter()


class RegisterRequest(BaseModel):
    user_type: str          # developer | gamer
    developer_name: Optional[str] = None


class ProfileUpdate(BaseModel):
    developer_name: Optional[str] = None
    studio_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


@router.get("/users/me")
async def get_me(user: User = Depends(get_current_user)):
    return user_to_dict(user)


@router.post("/users/me", status_code=201)
async def register_me(
    body: RegisterRequest,
    auth_user: AuthUser = Depends(get_auth_user),
    db: AsyncSession = Depends(get_db),
):
    """Create the profile after signing up with the hosted auth service."""
    user = await AccountService(db).register(auth_user, body.user_type, body.developer_name)
    return user_to_dict(user)


@router.patch("/users/me")
async def update_me(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await AccountService(db).update_profile(user, body.model_dump(exclude_unset=True))
    return user_to_dict(user)
