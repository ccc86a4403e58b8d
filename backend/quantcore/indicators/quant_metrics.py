"""Risk/return statistics over a close series.

Returns are simple per-bar returns; annualization assumes 252 bars a year
and a zero risk-free rate.
"""

import math
from typing import Sequence

import numpy as np

from quantcore.errors import InsufficientHistoryError
from quantcore.indicators import series
from quantcore.models.snapshot import QuantMetrics

PERIODS_PER_YEAR = 252
DISTRIBUTION_PERIOD = 20


def sharpe_ratio(closes: Sequence[float], period: int = PERIODS_PER_YEAR) -> float | None:
    """Annualized mean return over annualized return volatility."""
    returns = series.simple_returns(closes)[-period:]
    try:
        stdev = series.sample_stdev(returns)
    except InsufficientHistoryError:
        return None
    if stdev == 0:
        return None
    annual_return = series.mean(returns) * PERIODS_PER_YEAR
    return annual_return / (stdev * math.sqrt(PERIODS_PER_YEAR))


def sortino_ratio(
    closes: Sequence[float],
    period: int = PERIODS_PER_YEAR,
    target_return: float = 0.0,
) -> float | None:
    """Like Sharpe, but only returns below ``target_return`` count as risk."""
    returns = series.simple_returns(closes)[-period:]
    if not returns:
        return None
    downside = np.asarray([r for r in returns if r < target_return], dtype=np.float64)
    if downside.size == 0:
        return None
    downside_dev = float(np.sqrt(np.mean((downside - target_return) ** 2)))
    if downside_dev == 0:
        return None
    annual_return = series.mean(returns) * PERIODS_PER_YEAR
    return annual_return / (downside_dev * math.sqrt(PERIODS_PER_YEAR))


def _standardized_moment(
    closes: Sequence[float], power: int, period: int
) -> float | None:
    if len(closes) < period:
        return None
    recent = np.asarray(closes[-period:], dtype=np.float64)
    stdev = series.sample_stdev(recent)
    if stdev == 0:
        return 0.0
    return float(np.mean(((recent - recent.mean()) / stdev) ** power))


def skewness(closes: Sequence[float], period: int = DISTRIBUTION_PERIOD) -> float | None:
    return _standardized_moment(closes, 3, period)


def kurtosis(closes: Sequence[float], period: int = DISTRIBUTION_PERIOD) -> float | None:
    """Excess kurtosis (normal distribution = 0)."""
    moment = _standardized_moment(closes, 4, period)
    if moment is None or moment == 0.0:
        return moment
    return moment - 3.0


def max_drawdown(closes: Sequence[float]) -> float | None:
    """Largest peak-to-trough decline as a fraction of the peak."""
    if len(closes) < 2:
        return None
    arr = np.asarray(closes, dtype=np.float64)
    peaks = np.maximum.accumulate(arr)
    return float(np.max((peaks - arr) / peaks))


def calmar_ratio(closes: Sequence[float], period: int = PERIODS_PER_YEAR) -> float | None:
    """Annualized mean return over max drawdown of the same window."""
    returns = series.simple_returns(closes)[-period:]
    if not returns:
        return None
    drawdown = max_drawdown(closes[-period:])
    if not drawdown:
        return None
    return series.mean(returns) * PERIODS_PER_YEAR / drawdown


def compute_quant_metrics(closes: Sequence[float]) -> QuantMetrics:
    """All metrics for one close series."""
    period = min(PERIODS_PER_YEAR, len(closes))
    recent = closes[-DISTRIBUTION_PERIOD:]

    try:
        sample = series.sample_stdev(recent)
    except InsufficientHistoryError:
        sample = None
    population = (
        series.population_stdev(recent) if len(closes) >= DISTRIBUTION_PERIOD else None
    )

    return QuantMetrics(
        sharpe_ratio=sharpe_ratio(closes, period),
        sortino_ratio=sortino_ratio(closes, period),
        std_dev=sample,
        variance=sample * sample if sample is not None else None,
        population_std_dev=population,
        sample_std_dev=sample,
        skewness=skewness(closes),
        kurtosis=kurtosis(closes),
        max_drawdown=max_drawdown(closes),
        calmar_ratio=calmar_ratio(closes, period),
    )
