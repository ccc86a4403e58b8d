"""Technical indicators (pure math, no I/O)."""

from quantcore.indicators.engine import (
    average_true_range,
    bollinger_bands,
    compute_indicators,
    donchian,
    macd,
    macd_history,
    realized_volatility,
    rsi,
    vwap,
    zscore,
)
from quantcore.indicators.levels import (
    find_resistance_levels,
    find_support_levels,
    support_resistance_levels,
)
from quantcore.indicators.market_structure import (
    find_breakout_zones,
    find_liquidity_zones,
    find_order_blocks,
)
from quantcore.indicators.quant_metrics import compute_quant_metrics
from quantcore.indicators.series import (
    ema,
    ema_series,
    log_returns,
    population_stdev,
    sample_stdev,
    simple_returns,
    sma,
    true_range,
)

__all__ = [
    "average_true_range",
    "bollinger_bands",
    "compute_indicators",
    "donchian",
    "macd",
    "macd_history",
    "realized_volatility",
    "rsi",
    "vwap",
    "zscore",
    "find_resistance_levels",
    "find_support_levels",
    "support_resistance_levels",
    "find_breakout_zones",
    "find_liquidity_zones",
    "find_order_blocks",
    "compute_quant_metrics",
    "ema",
    "ema_series",
    "log_returns",
    "population_stdev",
    "sample_stdev",
    "simple_returns",
    "sma",
    "true_range",
]
