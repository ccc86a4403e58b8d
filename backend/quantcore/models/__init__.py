"""Data models."""

from quantcore.models.candle import Candle, datetime_to_ms, validate_series
from quantcore.models.recommendation import (
    OPEN_OUTCOMES,
    Direction,
    Market,
    Outcome,
    OutcomeUpdate,
    TradeRecommendation,
)
from quantcore.models.snapshot import (
    BollingerBands,
    BreakoutZone,
    DonchianChannel,
    IndicatorSnapshot,
    LiquidityZone,
    MacdValues,
    OrderBlock,
    QuantMetrics,
    TailPoint,
)

__all__ = [
    "Candle",
    "datetime_to_ms",
    "validate_series",
    "OPEN_OUTCOMES",
    "Direction",
    "Market",
    "Outcome",
    "OutcomeUpdate",
    "TradeRecommendation",
    "BollingerBands",
    "BreakoutZone",
    "DonchianChannel",
    "IndicatorSnapshot",
    "LiquidityZone",
    "MacdValues",
    "OrderBlock",
    "QuantMetrics",
    "TailPoint",
]
