"""Trade recommendation repository."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import or_, select, update

from quantcore.accuracy import HistoricalAccuracy, calculate_accuracy
from quantcore.models import Outcome, TradeRecommendation
from quantdesk.storage.database import Database, TradeAnalysisTable

logger = logging.getLogger(__name__)

_OUTCOME_COLUMNS = (
    "outcome",
    "outcome_price",
    "outcome_time",
    "target_hit",
    "hours_to_outcome",
    "pnl_percentage",
    "checked_at",
)


def _is_open():
    """SQL condition for recommendations whose outcome is still undecided."""
    return or_(
        TradeAnalysisTable.outcome.is_(None),
        TradeAnalysisTable.outcome == Outcome.PENDING.value,
    )


class RecommendationRepository:
    """PostgreSQL-backed RecommendationStore."""

    def __init__(self, database: Database):
        self._db = database

    async def select_eligible(
        self, limit: int, older_than_hours: float
    ) -> list[TradeRecommendation]:
        """Open recommendations created more than ``older_than_hours`` ago, oldest first."""
        cutoff = datetime.now(timezone.utc) - timedelta(hours=older_than_hours)
        async with self._db.session() as session:
            stmt = (
                select(TradeAnalysisTable)
                .where(_is_open(), TradeAnalysisTable.created_at < cutoff)
                .order_by(TradeAnalysisTable.created_at.asc())
                .limit(limit)
            )
            result = await session.execute(stmt)
            rows = result.scalars().all()

            return [self._row_to_recommendation(row) for row in rows]

    async def claim(
        self,
        recommendation_id: str,
        expected_checked_at: datetime | None,
        claimed_at: datetime,
    ) -> bool:
        """Conditionally stamp ``checked_at``; False if another run got there first."""
        if expected_checked_at is None:
            unchanged = TradeAnalysisTable.checked_at.is_(None)
        else:
            unchanged = TradeAnalysisTable.checked_at == expected_checked_at

        async with self._db.session() as session:
            stmt = (
                update(TradeAnalysisTable)
                .where(
                    TradeAnalysisTable.id == recommendation_id,
                    _is_open(),
                    unchanged,
                )
                .values(checked_at=claimed_at)
            )
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def update_outcome(self, recommendation_id: str, patch: dict[str, Any]) -> None:
        """Apply an outcome patch; terminal records are never rewritten."""
        values = {k: v for k, v in patch.items() if k in _OUTCOME_COLUMNS}
        if not values:
            return

        async with self._db.session() as session:
            stmt = (
                update(TradeAnalysisTable)
                .where(TradeAnalysisTable.id == recommendation_id, _is_open())
                .values(**values)
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                logger.info(
                    f"Recommendation {recommendation_id} already resolved, update skipped"
                )

    async def reset_outcomes(self) -> int:
        """Clear outcome fields on every evaluated recommendation."""
        async with self._db.session() as session:
            stmt = (
                update(TradeAnalysisTable)
                .where(TradeAnalysisTable.outcome.is_not(None))
                .values(**{column: None for column in _OUTCOME_COLUMNS})
            )
            result = await session.execute(stmt)
            return result.rowcount

    async def get_recent(self, symbol: str, days: int = 30) -> list[TradeRecommendation]:
        """Recommendations for ``symbol`` created in the last ``days`` days."""
        since = datetime.now(timezone.utc) - timedelta(days=days)
        async with self._db.session() as session:
            stmt = (
                select(TradeAnalysisTable)
                .where(
                    TradeAnalysisTable.symbol == symbol,
                    TradeAnalysisTable.created_at >= since,
                )
                .order_by(TradeAnalysisTable.created_at.desc())
            )
            result = await session.execute(stmt)
            rows = result.scalars().all()

            return [self._row_to_recommendation(row) for row in rows]

    async def get_accuracy(self, symbol: str, days: int = 30) -> HistoricalAccuracy:
        """Historical accuracy for ``symbol`` over the last ``days`` days."""
        return calculate_accuracy(symbol, await self.get_recent(symbol, days))

    @staticmethod
    def _row_to_recommendation(row: TradeAnalysisTable) -> TradeRecommendation:
        """Convert database row to TradeRecommendation (Numeric → float via pydantic)."""
        return TradeRecommendation(
            id=row.id,
            symbol=row.symbol,
            market=row.market,
            timeframe=row.timeframe,
            direction=row.direction,
            entry_price=row.entry_price,
            stop_price=row.stop_price,
            target1_price=row.target1_price,
            target2_price=row.target2_price,
            target3_price=row.target3_price,
            created_at=row.created_at,
            outcome=row.outcome,
            outcome_price=row.outcome_price,
            outcome_time=row.outcome_time,
            target_hit=row.target_hit,
            hours_to_outcome=row.hours_to_outcome,
            pnl_percentage=row.pnl_percentage,
            checked_at=row.checked_at,
        )
