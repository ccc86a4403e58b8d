"""Tests for risk/return statistics."""

import math

import pytest

from quantcore.indicators.quant_metrics import (
    calmar_ratio,
    compute_quant_metrics,
    kurtosis,
    max_drawdown,
    sharpe_ratio,
    skewness,
    sortino_ratio,
)


class TestMaxDrawdown:
    def test_peak_to_trough(self):
        closes = [100.0, 120.0, 90.0, 110.0, 80.0, 130.0]
        # Peak 120 -> trough 80
        assert max_drawdown(closes) == pytest.approx(40 / 120)

    def test_monotonic_rise(self):
        assert max_drawdown([1.0, 2.0, 3.0, 4.0]) == 0.0

    def test_too_short(self):
        assert max_drawdown([100.0]) is None


class TestSharpeSortino:
    def test_sharpe_uses_return_volatility(self):
        closes = [100.0, 102.0, 101.0, 104.0, 103.0, 106.0]
        returns = [(b - a) / a for a, b in zip(closes[:-1], closes[1:])]
        avg = sum(returns) / len(returns)
        stdev = math.sqrt(sum((r - avg) ** 2 for r in returns) / (len(returns) - 1))

        expected = avg * 252 / (stdev * math.sqrt(252))
        assert sharpe_ratio(closes) == pytest.approx(expected)

    def test_sharpe_of_flat_series(self):
        assert sharpe_ratio([100.0] * 10) is None

    def test_sharpe_needs_two_returns(self):
        assert sharpe_ratio([100.0, 101.0]) is None

    def test_sortino_ignores_upside(self):
        closes = [100.0, 102.0, 101.0, 104.0, 103.0, 106.0]
        assert sortino_ratio(closes) > sharpe_ratio(closes)

    def test_sortino_without_losses(self):
        assert sortino_ratio([1.0, 2.0, 3.0, 4.0]) is None


class TestDistribution:
    def test_symmetric_series_has_no_skew(self):
        closes = [float(i % 5) + 10 for i in range(20)]
        assert skewness(closes) == pytest.approx(0.0, abs=1e-9)

    def test_short_series(self):
        assert skewness([1.0, 2.0, 3.0]) is None
        assert kurtosis([1.0, 2.0, 3.0]) is None

    def test_flat_series(self):
        assert skewness([5.0] * 20) == 0.0
        assert kurtosis([5.0] * 20) == 0.0


class TestCalmar:
    def test_no_drawdown(self):
        assert calmar_ratio([1.0, 2.0, 3.0]) is None

    def test_sign_follows_mean_return(self):
        closes = [100.0, 110.0, 105.0, 120.0]
        assert calmar_ratio(closes) > 0


class TestComputeQuantMetrics:
    def test_variance_is_sample_stdev_squared(self):
        closes = [100.0 + (i % 7) * 1.5 for i in range(30)]
        metrics = compute_quant_metrics(closes)

        assert metrics.std_dev == metrics.sample_std_dev
        assert metrics.variance == pytest.approx(metrics.sample_std_dev ** 2)
        assert metrics.population_std_dev < metrics.sample_std_dev

    def test_short_series_has_nulls(self):
        metrics = compute_quant_metrics([100.0])

        assert metrics.sharpe_ratio is None
        assert metrics.std_dev is None
        assert metrics.population_std_dev is None
        assert metrics.max_drawdown is None
