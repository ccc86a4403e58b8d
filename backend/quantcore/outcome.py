"""Candle-based outcome classification for trade recommendations.

Replays the candles since a recommendation was issued and decides whether
its stop or one of its targets was reached.

Rules:
- Older than 7 days → EXPIRED, candles are not scanned
- LONG: low <= stop → STOP_HIT; else high >= target3/2/1 → TARGET_HIT
- SHORT: high >= stop → STOP_HIT; else low <= target3/2/1 → TARGET_HIT
- Stop is checked before targets on every candle (a candle touching both
  resolves as STOP_HIT)
- Targets are tested most distant first, so a candle spanning several
  targets records the furthest one reached
- No hit in the window → PENDING
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Sequence

from quantcore.models.candle import Candle, datetime_to_ms
from quantcore.models.recommendation import (
    Direction,
    Outcome,
    OutcomeUpdate,
    TradeRecommendation,
)

logger = logging.getLogger(__name__)

EXPIRY = timedelta(days=7)
MS_PER_HOUR = 3_600_000


def is_expired(
    recommendation: TradeRecommendation,
    now: datetime,
    expiry: timedelta = EXPIRY,
) -> bool:
    """True once the recommendation is older than ``expiry``."""
    return now - recommendation.created_at > expiry


def pnl_percentage(direction: Direction, entry_price: float, exit_price: float) -> float:
    """Realized move from entry to exit in percent, signed for the direction."""
    if direction == Direction.LONG:
        return (exit_price - entry_price) / entry_price * 100
    return (entry_price - exit_price) / entry_price * 100


def _check_candle(
    recommendation: TradeRecommendation, candle: Candle
) -> tuple[Outcome, float, int | None] | None:
    """Check one candle. Returns ``(outcome, price, target_index)`` or None."""
    if recommendation.direction == Direction.LONG:
        if candle.l <= recommendation.stop_price:
            return Outcome.STOP_HIT, recommendation.stop_price, None
        for index, price in recommendation.targets():
            if candle.h >= price:
                return Outcome.TARGET_HIT, price, index
    else:  # SHORT
        if candle.h >= recommendation.stop_price:
            return Outcome.STOP_HIT, recommendation.stop_price, None
        for index, price in recommendation.targets():
            if candle.l <= price:
                return Outcome.TARGET_HIT, price, index

    return None


def classify_outcome(
    recommendation: TradeRecommendation,
    candles: Sequence[Candle],
    now: datetime,
    expiry: timedelta = EXPIRY,
) -> OutcomeUpdate:
    """
    Classify a recommendation against the candles covering its lifetime.

    Stateless: calling it twice with the same inputs gives the same update
    and the recommendation is never modified. Guarding already-terminal
    records is the caller's job.

    Args:
        recommendation: Recommendation with an open (None/PENDING) outcome
        candles: Ascending candles from ``created_at`` to ``now``
        now: Evaluation time, also used as ``checked_at``
        expiry: Maximum age before the recommendation expires

    Returns:
        OutcomeUpdate for the recommendation
    """
    if is_expired(recommendation, now, expiry):
        return OutcomeUpdate(
            recommendation_id=recommendation.id,
            outcome=Outcome.EXPIRED,
            checked_at=now,
        )

    created_ms = datetime_to_ms(recommendation.created_at)

    for candle in candles:
        hit = _check_candle(recommendation, candle)
        if hit is None:
            continue

        outcome, price, target_index = hit
        return OutcomeUpdate(
            recommendation_id=recommendation.id,
            outcome=outcome,
            checked_at=now,
            outcome_price=price,
            outcome_time=candle.timestamp,
            target_hit=target_index,
            hours_to_outcome=(candle.t - created_ms) / MS_PER_HOUR,
            pnl_percentage=pnl_percentage(
                recommendation.direction, recommendation.entry_price, price
            ),
        )

    return OutcomeUpdate(
        recommendation_id=recommendation.id,
        outcome=Outcome.PENDING,
        checked_at=now,
    )
