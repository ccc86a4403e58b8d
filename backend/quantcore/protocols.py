"""Collaborator protocols for the outcome evaluator.

Any candle source or recommendation store (PostgreSQL, HTTP API, in-memory
fakes in tests) can implement these to be driven by the batch runner.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from quantcore.models.candle import Candle
from quantcore.models.recommendation import TradeRecommendation


@runtime_checkable
class CandleProvider(Protocol):
    """Source of ascending OHLCV candles."""

    async def get_candles(
        self,
        symbol: str,
        timeframe: str,
        start: datetime,
        end: datetime,
    ) -> list[Candle]:
        """Fetch candles in ``[start, end]``.

        Raises ProviderError on fetch failure and EmptySeriesError when the
        source has no candles for the range.
        """
        ...


@runtime_checkable
class RecommendationStore(Protocol):
    """Protocol that recommendation storage backends must implement."""

    async def select_eligible(
        self, limit: int, older_than_hours: float
    ) -> list[TradeRecommendation]:
        """Open recommendations older than ``older_than_hours``, oldest first."""
        ...

    async def claim(
        self,
        recommendation_id: str,
        expected_checked_at: datetime | None,
        claimed_at: datetime,
    ) -> bool:
        """Set ``checked_at`` to ``claimed_at`` if the record is still open and
        its ``checked_at`` still equals ``expected_checked_at``.

        Returns True if this caller won the claim.
        """
        ...

    async def update_outcome(self, recommendation_id: str, patch: dict[str, Any]) -> None:
        """Apply an outcome patch. Records already terminal are left untouched."""
        ...
