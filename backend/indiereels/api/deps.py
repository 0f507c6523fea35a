"""Request dependencies — who is calling, and the collaborators they use.

The caller's identity is resolved per request and handed explicitly to every
service call.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.clients.base import AuthUser, IAuthProvider, IObjectStorage
from indiereels.database import get_db
from indiereels.errors import (
    NotAuthenticatedError, NotFoundError, PermissionDeniedError, StoreError,
)
from indiereels.models.tables import User
from indiereels.services.accounts import AccountService


def get_auth_provider(request: Request) -> IAuthProvider:
    provider = getattr(request.app.state, "auth_provider", None)
    if provider is None:
        raise StoreError("Authentication is not configured")
    return provider


def get_storage(request: Request) -> IObjectStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise StoreError("Video storage is not configured")
    return storage


async def get_access_token(authorization: Optional[str] = Header(None)) -> str:
    """Bearer token from the Authorization header."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise NotAuthenticatedError()
    return token.strip()


async def get_auth_user(
    token: str = Depends(get_access_token),
    auth: IAuthProvider = Depends(get_auth_provider),
) -> AuthUser:
    user = await auth.get_user(token)
    if user is None:
        raise NotAuthenticatedError("Your session has expired. Please sign in again.")
    return user


async def get_current_user(
    auth_user: AuthUser = Depends(get_auth_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """The caller's profile row."""
    try:
        user_id = uuid.UUID(auth_user.id)
    except ValueError:
        raise NotAuthenticatedError()
    user = await AccountService(db).get_profile(user_id)
    if user is None:
        raise NotFoundError("Profile not found. Please finish signing up.")
    return user


async def require_gamer(user: User = Depends(get_current_user)) -> User:
    if user.user_type != "gamer":
        raise PermissionDeniedError("Only gamer accounts can do that")
    return user


async def require_developer(user: User = Depends(get_current_user)) -> User:
    if user.user_type != "developer":
        raise PermissionDeniedError("Only developer accounts can do that")
    return user
