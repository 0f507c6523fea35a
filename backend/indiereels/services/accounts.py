"""Account service — the profile row behind a hosted auth identity.

Sign-up itself happens against the hosted auth API; this creates the matching
``users`` row with its role, which never changes afterwards.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.clients.base import AuthUser
from indiereels.errors import NotAuthenticatedError, StoreError, ValidationError
from indiereels.models.tables import User, USER_TYPES

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("developer_name", "studio_name", "bio", "avatar_url")


class AccountService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            return await self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreError("Could not load your profile") from e

    async def register(
        self,
        auth_user: AuthUser,
        user_type: str,
        developer_name: Optional[str] = None,
    ) -> User:
        """Create the profile for a freshly signed-up identity."""
        if user_type not in USER_TYPES:
            raise ValidationError("Account type must be 'developer' or 'gamer'")
        developer_name = (developer_name or "").strip() or None
        if user_type == "developer" and not developer_name:
            raise ValidationError("Developer name is required")

        email = auth_user.email.lower()
        try:
            user_id = uuid.UUID(auth_user.id)
        except ValueError:
            raise NotAuthenticatedError() from None
        try:
            existing = await self.db.execute(
                select(User.id).where(func.lower(User.email) == email)
            )
            if existing.first() is not None or await self.db.get(User, user_id) is not None:
                raise ValidationError(
                    "This email is already registered. Please use a different email or sign in."
                )
            user = User(
                id=user_id,
                email=email,
                user_type=user_type,
                developer_name=developer_name if user_type == "developer" else None,
            )
            self.db.add(user)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationError(
                "This email is already registered. Please use a different email or sign in."
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Could not create your profile") from e

        await self.db.refresh(user)
        logger.info("Registered %s %s", user_type, user_id)
        return user

    async def update_profile(self, user: User, updates: dict) -> User:
        """Update profile attributes. The role is not among them."""
        unknown = set(updates) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")
        if "developer_name" in updates and user.user_type == "developer":
            if not (updates["developer_name"] or "").strip():
                raise ValidationError("Developer name is required")

        for key, value in updates.items():
            setattr(user, key, (value or "").strip() or None)
        user.updated_at = datetime.now(timezone.utc)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreError("Failed to update profile") from e
        await self.db.refresh(user)
        return user
