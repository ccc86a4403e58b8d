"""Support and resistance levels from swing points of the recent window.

A swing low is a bar whose low is below the lows of the three bars on each
side; a swing high mirrors that on highs. Only swing lows below the current
price count as support and only swing highs above it as resistance. Pivots
are ranked by volume and bounce strength, discounted by distance from price.
"""

from typing import Sequence

from quantcore.models.candle import Candle

MAX_LEVELS = 3
LEVEL_WINDOW = 50
PIVOT_SPAN = 3
VOLUME_SPAN = 5
SUPPORT_BUFFER = 0.995
RESISTANCE_BUFFER = 1.005


def _volume(candle: Candle) -> float:
    # Bars without volume weigh as one unit
    return candle.v or 1.0


def _avg_volume(candles: Sequence[Candle], i: int) -> float:
    nearby = candles[max(0, i - VOLUME_SPAN):i + VOLUME_SPAN]
    return sum(_volume(c) for c in nearby) / len(nearby)


def _rank(pivots: list[tuple[float, float]], current_price: float, max_levels: int) -> list[float]:
    """Keep the ``max_levels`` strongest pivots, strength discounted by distance."""
    def score(pivot: tuple[float, float]) -> float:
        price, strength = pivot
        proximity = abs(current_price - price) / current_price
        return strength / (1 + proximity * 10)

    return [price for price, _ in sorted(pivots, key=score, reverse=True)[:max_levels]]


def find_support_levels(
    candles: Sequence[Candle],
    current_price: float,
    max_levels: int = MAX_LEVELS,
) -> list[float]:
    """Swing lows below ``current_price``, nearest (highest) first."""
    recent = candles[-LEVEL_WINDOW:]
    pivots: list[tuple[float, float]] = []

    for i in range(PIVOT_SPAN, len(recent) - PIVOT_SPAN):
        candle = recent[i]
        before = recent[i - PIVOT_SPAN:i]
        after = recent[i + 1:i + 1 + PIVOT_SPAN]
        if (
            candle.l < min(c.l for c in before)
            and candle.l < min(c.l for c in after)
            and candle.l < current_price * SUPPORT_BUFFER
        ):
            bounce = (after[0].c - candle.l) / candle.l
            strength = _volume(candle) / _avg_volume(recent, i) * (1 + bounce * 100)
            pivots.append((candle.l, strength))

    return sorted(_rank(pivots, current_price, max_levels), reverse=True)


def find_resistance_levels(
    candles: Sequence[Candle],
    current_price: float,
    max_levels: int = MAX_LEVELS,
) -> list[float]:
    """Swing highs above ``current_price``, nearest (lowest) first."""
    recent = candles[-LEVEL_WINDOW:]
    pivots: list[tuple[float, float]] = []

    for i in range(PIVOT_SPAN, len(recent) - PIVOT_SPAN):
        candle = recent[i]
        before = recent[i - PIVOT_SPAN:i]
        after = recent[i + 1:i + 1 + PIVOT_SPAN]
        if (
            candle.h > max(c.h for c in before)
            and candle.h > max(c.h for c in after)
            and candle.h > current_price * RESISTANCE_BUFFER
        ):
            rejection = (candle.h - after[0].c) / candle.h
            strength = _volume(candle) / _avg_volume(recent, i) * (1 + rejection * 100)
            pivots.append((candle.h, strength))

    return sorted(_rank(pivots, current_price, max_levels))


def support_resistance_levels(
    candles: Sequence[Candle],
    current_price: float,
    max_levels: int = MAX_LEVELS,
) -> dict[str, list[float]]:
    """``{"support": [...], "resistance": [...]}`` relative to ``current_price``."""
    return {
        "support": find_support_levels(candles, current_price, max_levels),
        "resistance": find_resistance_levels(candles, current_price, max_levels),
    }
