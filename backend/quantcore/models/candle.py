"""Candle (OHLCV) data model."""

from datetime import datetime, timezone
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from quantcore.errors import MalformedDataError


class Candle(BaseModel):
    """One time-bucketed OHLCV bar. ``t`` is epoch milliseconds."""

    model_config = ConfigDict(frozen=True)

    t: int
    o: float = Field(gt=0)
    h: float = Field(gt=0)
    l: float = Field(gt=0)
    c: float = Field(gt=0)
    v: float = Field(default=0.0, ge=0)

    @property
    def timestamp(self) -> datetime:
        """Bar open time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.t / 1000, tz=timezone.utc)

    @property
    def typical_price(self) -> float:
        return (self.h + self.l + self.c) / 3

    @property
    def range_size(self) -> float:
        """Get the full range (high - low) of the candle."""
        return self.h - self.l

    def is_well_formed(self) -> bool:
        """Check ``l <= min(o, c) <= max(o, c) <= h``."""
        return self.l <= min(self.o, self.c) and max(self.o, self.c) <= self.h


def validate_series(candles: Sequence[Candle]) -> None:
    """Reject a series that breaks the candle invariants.

    Every bar must satisfy the OHLC ordering and timestamps must be strictly
    ascending (no duplicates).

    Raises:
        MalformedDataError: on the first offending bar
    """
    prev_t: int | None = None
    for i, candle in enumerate(candles):
        if not candle.is_well_formed():
            raise MalformedDataError(
                f"candle {i} at t={candle.t} violates l <= o,c <= h "
                f"(o={candle.o}, h={candle.h}, l={candle.l}, c={candle.c})"
            )
        if prev_t is not None and candle.t <= prev_t:
            raise MalformedDataError(
                f"candle {i} at t={candle.t} is not after previous t={prev_t}"
            )
        prev_t = candle.t


def datetime_to_ms(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)
