"""Numeric series helpers (pure math, no I/O).

Bollinger Bands use the population standard deviation (divide by N) while
realized volatility and the z-score use the sample standard deviation
(divide by N-1). Downstream consumers rely on that split, keep it.
"""

from typing import Sequence

import numpy as np

from quantcore.errors import InsufficientHistoryError


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Raises InsufficientHistoryError on an empty input."""
    if len(values) == 0:
        raise InsufficientHistoryError(1, 0)
    return float(np.mean(_as_array(values)))


def sma(values: Sequence[float], period: int) -> float:
    """
    Simple Moving Average of the last ``period`` values.

    Raises:
        InsufficientHistoryError: if fewer than ``period`` values exist
    """
    if len(values) < period:
        raise InsufficientHistoryError(period, len(values))
    return float(np.mean(_as_array(values[-period:])))


def ema_series(values: Sequence[float], period: int) -> list[float | None]:
    """
    Exponential Moving Average at every index.

    Seeded with the SMA of the first ``period`` values, then smoothed with
    multiplier ``2 / (period + 1)``.

    Returns:
        List aligned to ``values`` with ``None`` for the first ``period - 1``
        entries (all ``None`` when the input is shorter than ``period``)
    """
    if len(values) < period:
        return [None] * len(values)

    arr = _as_array(values)
    multiplier = 2.0 / (period + 1)

    result: list[float | None] = [None] * (period - 1)
    current = float(np.mean(arr[:period]))
    result.append(current)

    for i in range(period, len(arr)):
        current = float(arr[i]) * multiplier + current * (1 - multiplier)
        result.append(current)

    return result


def ema(values: Sequence[float], period: int) -> float:
    """
    Latest Exponential Moving Average value.

    With fewer than ``period`` values the most recent value is returned as a
    degraded estimate (``0.0`` for an empty input). Callers must treat that as
    a low-confidence fallback, not a true EMA.
    """
    if len(values) < period:
        return float(values[-1]) if len(values) else 0.0
    return ema_series(values, period)[-1]


def population_stdev(values: Sequence[float]) -> float:
    """Population standard deviation (divide by N)."""
    if len(values) == 0:
        raise InsufficientHistoryError(1, 0)
    return float(np.std(_as_array(values), ddof=0))


def sample_stdev(values: Sequence[float]) -> float:
    """
    Sample standard deviation (divide by N - 1).

    Raises:
        InsufficientHistoryError: with fewer than two values
    """
    if len(values) < 2:
        raise InsufficientHistoryError(2, len(values))
    return float(np.std(_as_array(values), ddof=1))


def log_returns(prices: Sequence[float]) -> list[float]:
    """``ln(p[i] / p[i-1])`` for i >= 1."""
    if len(prices) < 2:
        return []
    arr = _as_array(prices)
    return np.log(arr[1:] / arr[:-1]).tolist()


def simple_returns(prices: Sequence[float]) -> list[float]:
    """``(p[i] - p[i-1]) / p[i-1]`` for i >= 1."""
    if len(prices) < 2:
        return []
    arr = _as_array(prices)
    return ((arr[1:] - arr[:-1]) / arr[:-1]).tolist()


def true_range(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
) -> list[float]:
    """
    Calculate True Range.

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))

    The first element has no previous close and is just ``high - low``.
    """
    n = len(highs)
    if n == 0:
        return []

    result = [highs[0] - lows[0]]

    for i in range(1, n):
        hl = highs[i] - lows[i]
        hc = abs(highs[i] - closes[i - 1])
        lc = abs(lows[i] - closes[i - 1])
        result.append(max(hl, hc, lc))

    return result
