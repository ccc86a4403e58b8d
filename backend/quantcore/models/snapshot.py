"""Indicator snapshot models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MacdValues(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: float
    signal: float
    hist: float


class BollingerBands(BaseModel):
    model_config = ConfigDict(frozen=True)

    mid: float
    upper: float
    lower: float


class DonchianChannel(BaseModel):
    model_config = ConfigDict(frozen=True)

    high: float
    low: float


class TailPoint(BaseModel):
    """One (time, close) pair for sparkline charts."""

    model_config = ConfigDict(frozen=True)

    t: int
    c: float


class LiquidityZone(BaseModel):
    """Price where resting orders are likely to cluster."""

    model_config = ConfigDict(frozen=True)

    price: float
    type: Literal["buy", "sell"]
    strength: Literal["strong", "moderate"]
    description: str


class BreakoutZone(BaseModel):
    """Nearby support/resistance level that price may break through."""

    model_config = ConfigDict(frozen=True)

    price: float
    type: Literal["bullish", "bearish"]
    strength: Literal["strong", "moderate", "weak"]
    description: str


class OrderBlock(BaseModel):
    """High-volume candle range followed by a move away from it."""

    model_config = ConfigDict(frozen=True)

    high: float
    low: float
    type: Literal["bullish", "bearish"]
    strength: Literal["strong", "moderate"]
    description: str


class QuantMetrics(BaseModel):
    """Risk/return statistics over the close series. ``None`` when undefined."""

    model_config = ConfigDict(frozen=True)

    sharpe_ratio: float | None = None
    sortino_ratio: float | None = None
    std_dev: float | None = None
    variance: float | None = None
    population_std_dev: float | None = None
    sample_std_dev: float | None = None
    skewness: float | None = None
    kurtosis: float | None = None
    max_drawdown: float | None = None
    calmar_ratio: float | None = None


class IndicatorSnapshot(BaseModel):
    """Indicators derived from one candle window.

    Optional indicators are always present in the serialized shape and set to
    ``None`` when the window is too short to compute them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str
    timeframe: str
    as_of: datetime = Field(alias="asOf")
    price: float
    prev_close: float | None = Field(default=None, alias="prevClose")
    data_points: int = Field(alias="dataPoints")
    ema: dict[int, float]
    rsi14: float
    macd: MacdValues
    bb20: BollingerBands
    atr14: float
    donchian20: DonchianChannel
    vol20_annual: float | None = None
    zscore20: float | None = None
    vwap: float | None = None
    tail: list[TailPoint] = Field(default_factory=list)
    support: list[float] = Field(default_factory=list)
    resistance: list[float] = Field(default_factory=list)
    liquidity_zones: list[LiquidityZone] = Field(default_factory=list)
    breakout_zones: list[BreakoutZone] = Field(default_factory=list)
    order_blocks: list[OrderBlock] = Field(default_factory=list)
    quant_metrics: QuantMetrics = Field(default_factory=QuantMetrics)

    def to_payload(self) -> dict:
        """JSON-ready dict using the wire field names (``asOf``, ``prevClose``)."""
        return self.model_dump(mode="json", by_alias=True)
