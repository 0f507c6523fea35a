"""Developer analytics — swipe performance per game."""

import uuid
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from indiereels.errors import StoreError
from indiereels.models.tables import GameProfile, Reel, Swipe


@dataclass
class GameStats:
    game_id: uuid.UUID
    game_title: str
    reel_count: int = 0
    total_swipes: int = 0
    right_swipes: int = 0

    @property
    def right_swipe_rate(self) -> float:
        return _rate(self.right_swipes, self.total_swipes)


@dataclass
class AnalyticsReport:
    games: list[GameStats] = field(default_factory=list)

    @property
    def total_reels(self) -> int:
        return sum(g.reel_count for g in self.games)

    @property
    def total_swipes(self) -> int:
        return sum(g.total_swipes for g in self.games)

    @property
    def right_swipe_rate(self) -> float:
        return _rate(sum(g.right_swipes for g in self.games), self.total_swipes)


def _rate(right: int, total: int) -> float:
    """Percentage, 0 when nothing was swiped."""
    return round(right / total * 100, 1) if total else 0.0


class AnalyticsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def developer_report(self, developer_id: uuid.UUID) -> AnalyticsReport:
        try:
            games = (await self.db.execute(
                select(GameProfile.id, GameProfile.game_title)
                .where(GameProfile.developer_id == developer_id)
                .order_by(GameProfile.created_at.desc())
            )).all()

            reel_counts = dict((await self.db.execute(
                select(Reel.game_profile_id, func.count(Reel.id))
                .join(GameProfile, GameProfile.id == Reel.game_profile_id)
                .where(GameProfile.developer_id == developer_id)
                .group_by(Reel.game_profile_id)
            )).all())

            swipe_rows = (await self.db.execute(
                select(Reel.game_profile_id, Swipe.direction, func.count(Swipe.id))
                .join(Reel, Reel.id == Swipe.reel_id)
                .join(GameProfile, GameProfile.id == Reel.game_profile_id)
                .where(GameProfile.developer_id == developer_id)
                .group_by(Reel.game_profile_id, Swipe.direction)
            )).all()
        except SQLAlchemyError as e:
            raise StoreError("Could not load analytics") from e

        swipes: dict[uuid.UUID, dict[str, int]] = defaultdict(dict)
        for game_id, direction, count in swipe_rows:
            swipes[game_id][direction] = count

        report = AnalyticsReport()
        for game_id, title in games:
            by_direction = swipes.get(game_id, {})
            report.games.append(GameStats(
                game_id=game_id,
                game_title=title,
                reel_count=reel_counts.get(game_id, 0),
                total_swipes=sum(by_direction.values()),
                right_swipes=by_direction.get("right", 0),
            ))
        return report
