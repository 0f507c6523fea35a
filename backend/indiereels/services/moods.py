"""Mood preference manager — the gamer's mood-tag set.

The set is always replaced wholesale: every existing row is deleted and one row
is inserted per requested id, in a single transaction. Callers validate the
minimum number of tags before calling.
"""

import logging
import uuid
from typing import Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.errors import StoreError, ValidationError
from indiereels.models.tables import Tag, UserMoodTag
from indiereels.services.tags import TagSelector

logger = logging.getLogger(__name__)


class MoodPreferenceManager:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def replace(self, user_id: uuid.UUID, tag_ids: Sequence[uuid.UUID]) -> None:
        """Replace the user's mood tags with *tag_ids*, exactly as given."""
        if await TagSelector(self.db).missing_ids(tag_ids):
            raise ValidationError("One or more mood tags do not exist")
        try:
            await self.db.execute(delete(UserMoodTag).where(UserMoodTag.user_id == user_id))
            self.db.add_all([UserMoodTag(user_id=user_id, tag_id=tag_id) for tag_id in tag_ids])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Replacing mood tags for %s failed", user_id)
            raise StoreError("Could not save your mood tags") from e

        logger.info("User %s mood tags replaced (%d tags)", user_id, len(tag_ids))

    async def tag_ids(self, user_id: uuid.UUID) -> set[uuid.UUID]:
        try:
            result = await self.db.execute(
                select(UserMoodTag.tag_id).where(UserMoodTag.user_id == user_id)
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load your mood tags") from e
        return {row[0] for row in result.all()}

    async def list_tags(self, user_id: uuid.UUID) -> list[Tag]:
        """The user's mood tags, alphabetical."""
        try:
            result = await self.db.execute(
                select(Tag)
                .join(UserMoodTag, UserMoodTag.tag_id == Tag.id)
                .where(UserMoodTag.user_id == user_id)
                .order_by(Tag.name)
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load your mood tags") from e
        return list(result.scalars().unique())
