"""Tag selector — the read-only mood tag catalog."""

import uuid
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.errors import StoreError
from indiereels.models.tables import Tag, MOOD_TAG_TYPE


class TagSelector:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_mood_tags(self) -> list[Tag]:
        """All "vibe" tags, ordered by name."""
        try:
            result = await self.db.execute(
                select(Tag).where(Tag.type == MOOD_TAG_TYPE).order_by(Tag.name)
            )
        except SQLAlchemyError as e:
            raise StoreError("Could not load tags") from e
        return list(result.scalars())

    async def missing_ids(self, tag_ids: Iterable[uuid.UUID]) -> set[uuid.UUID]:
        """The subset of *tag_ids* with no tag row."""
        wanted = set(tag_ids)
        if not wanted:
            return set()
        try:
            result = await self.db.execute(select(Tag.id).where(Tag.id.in_(list(wanted))))
        except SQLAlchemyError as e:
            raise StoreError("Could not load tags") from e
        return wanted - set(result.scalars())
