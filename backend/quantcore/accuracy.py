"""Historical accuracy of evaluated recommendations.

Accuracy only counts decided trades: ``TARGET_HIT / (TARGET_HIT + STOP_HIT)``.
Pending and expired recommendations are reported but do not move it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from statistics import mean
from typing import Iterable

from quantcore.models.recommendation import Outcome, TradeRecommendation


@dataclass
class HistoricalAccuracy:
    symbol: str
    total_analyses: int = 0
    target_hit_count: int = 0
    stop_hit_count: int = 0
    pending_count: int = 0
    expired_count: int = 0
    accuracy_percentage: float = 0.0
    avg_hours_to_target: float | None = None
    avg_pnl_on_wins: float | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_accuracy(
    symbol: str, recommendations: Iterable[TradeRecommendation]
) -> HistoricalAccuracy:
    """Aggregate outcome counts and win statistics for one symbol."""
    result = HistoricalAccuracy(symbol=symbol)
    hours_to_target: list[float] = []
    pnl_on_wins: list[float] = []

    for rec in recommendations:
        result.total_analyses += 1
        if rec.outcome == Outcome.TARGET_HIT:
            result.target_hit_count += 1
            if rec.hours_to_outcome is not None:
                hours_to_target.append(rec.hours_to_outcome)
            if rec.pnl_percentage is not None:
                pnl_on_wins.append(rec.pnl_percentage)
        elif rec.outcome == Outcome.STOP_HIT:
            result.stop_hit_count += 1
        elif rec.outcome == Outcome.EXPIRED:
            result.expired_count += 1
        else:
            result.pending_count += 1

    decided = result.target_hit_count + result.stop_hit_count
    if decided > 0:
        result.accuracy_percentage = result.target_hit_count / decided * 100
    if hours_to_target:
        result.avg_hours_to_target = mean(hours_to_target)
    if pnl_on_wins:
        result.avg_pnl_on_wins = mean(pnl_on_wins)

    return result
