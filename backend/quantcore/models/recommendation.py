"""Trade recommendation and outcome data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class Direction(str, Enum):
    """Trade direction."""

    LONG = "long"
    SHORT = "short"


class Market(str, Enum):
    """Market type of the recommended symbol."""

    STOCK = "STOCK"
    CRYPTO = "CRYPTO"
    FOREX = "FOREX"


class Outcome(str, Enum):
    """Recommendation outcome status."""

    PENDING = "PENDING"
    TARGET_HIT = "TARGET_HIT"
    STOP_HIT = "STOP_HIT"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.PENDING


OPEN_OUTCOMES = (None, Outcome.PENDING)


class OutcomeUpdate(BaseModel):
    """Result of one evaluation of a recommendation.

    Produced by the outcome classifier; the recommendation itself is never
    mutated.
    """

    model_config = ConfigDict(frozen=True)

    recommendation_id: str
    outcome: Outcome
    checked_at: datetime
    outcome_price: float | None = None
    outcome_time: datetime | None = None
    target_hit: int | None = None
    hours_to_outcome: float | None = None
    pnl_percentage: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.outcome.is_terminal

    def to_patch(self) -> dict[str, Any]:
        """Column values to persist for this evaluation.

        A still-pending evaluation only touches ``checked_at``; an expiry
        records the outcome without price data.
        """
        if self.outcome is Outcome.PENDING:
            return {"checked_at": self.checked_at}
        if self.outcome is Outcome.EXPIRED:
            return {"outcome": self.outcome.value, "checked_at": self.checked_at}
        return {
            "outcome": self.outcome.value,
            "outcome_price": self.outcome_price,
            "outcome_time": self.outcome_time,
            "target_hit": self.target_hit,
            "hours_to_outcome": self.hours_to_outcome,
            "pnl_percentage": self.pnl_percentage,
            "checked_at": self.checked_at,
        }


class TradeRecommendation(BaseModel):
    """A previously issued entry/stop/targets set and its evaluated outcome."""

    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    market: Market = Market.STOCK
    timeframe: str = "60m"
    direction: Direction
    entry_price: float
    stop_price: float
    target1_price: float | None = None
    target2_price: float | None = None
    target3_price: float | None = None
    created_at: datetime

    outcome: Outcome | None = None
    outcome_price: float | None = None
    outcome_time: datetime | None = None
    target_hit: int | None = None
    hours_to_outcome: float | None = None
    pnl_percentage: float | None = None
    checked_at: datetime | None = None

    @field_validator("direction", mode="before")
    @classmethod
    def _lower_direction(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("market", mode="before")
    @classmethod
    def _upper_market(cls, value: Any) -> Any:
        if value is None or value == "":
            return Market.STOCK
        return value.upper() if isinstance(value, str) else value

    @field_validator("timeframe", mode="before")
    @classmethod
    def _default_timeframe(cls, value: Any) -> Any:
        return value or "60m"

    @field_validator("created_at", "outcome_time", "checked_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Stores without timezone support hand back naive UTC datetimes
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_open(self) -> bool:
        """True while the outcome is still undecided."""
        return self.outcome in OPEN_OUTCOMES

    def targets(self) -> list[tuple[int, float]]:
        """Targets as ``(index, price)``, most distant first; unset targets skipped."""
        pairs = [
            (3, self.target3_price),
            (2, self.target2_price),
            (1, self.target1_price),
        ]
        return [(index, price) for index, price in pairs if price is not None]

    def with_outcome(self, update: OutcomeUpdate) -> "TradeRecommendation":
        """Return a copy of this recommendation with ``update`` applied."""
        return self.model_copy(update=update.model_dump(exclude={"recommendation_id"}))
