"""Indicator engine: candle window in, IndicatorSnapshot out.

Every call recomputes from the full window it is given; nothing is cached
between calls, so the engine is safe to call concurrently.
"""

import logging
import math
from typing import Sequence

from quantcore.errors import EmptySeriesError, InsufficientHistoryError
from quantcore.indicators import series
from quantcore.indicators.levels import support_resistance_levels
from quantcore.indicators.market_structure import (
    find_breakout_zones,
    find_liquidity_zones,
    find_order_blocks,
)
from quantcore.indicators.quant_metrics import compute_quant_metrics
from quantcore.models.candle import Candle, validate_series
from quantcore.models.snapshot import (
    BollingerBands,
    DonchianChannel,
    IndicatorSnapshot,
    MacdValues,
    TailPoint,
)

logger = logging.getLogger(__name__)

EMA_PERIODS = (20, 50, 200)
RSI_PERIOD = 14
RSI_NEUTRAL = 50.0
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
MACD_HISTORY = 35
BB_PERIOD = 20
BB_MULT = 2.0
ATR_PERIOD = 14
DONCHIAN_PERIOD = 20
VOL_PERIOD = 20
TRADING_PERIODS_PER_YEAR = 252
ZSCORE_PERIOD = 20
TAIL_LENGTH = 50
LIVE_PRICE_TOLERANCE = 0.01


def rsi(closes: Sequence[float], period: int = RSI_PERIOD) -> float:
    """
    Relative Strength Index with Wilder smoothing.

    The first ``period`` gains/losses seed simple averages; every further
    delta is folded in with weight ``(period - 1) / period``.

    Returns:
        Value in [0, 100]; exactly 50 with fewer than ``period + 1`` closes
    """
    if len(closes) < period + 1:
        return RSI_NEUTRAL

    changes = [closes[i] - closes[i - 1] for i in range(1, len(closes))]
    gains = [max(change, 0.0) for change in changes]
    losses = [max(-change, 0.0) for change in changes]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for i in range(period, len(changes)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def macd_history(closes: Sequence[float], max_points: int = MACD_HISTORY) -> list[float]:
    """
    Rolling history of MACD line values (EMA12 - EMA26), oldest first.

    Bounded to the last ``max_points`` values. When the window is too short
    for a single true MACD value, the history is the one degraded value
    ``ema(closes, 12) - ema(closes, 26)``.
    """
    fast = series.ema_series(closes, MACD_FAST)
    slow = series.ema_series(closes, MACD_SLOW)
    history = [f - s for f, s in zip(fast, slow) if f is not None and s is not None]
    if not history:
        history = [series.ema(closes, MACD_FAST) - series.ema(closes, MACD_SLOW)]
    return history[-max_points:]


def macd(closes: Sequence[float]) -> MacdValues:
    """MACD line, EMA-9 signal over the MACD line history, and histogram."""
    history = macd_history(closes)
    line = history[-1]
    signal = series.ema(history, MACD_SIGNAL)
    return MacdValues(line=line, signal=signal, hist=line - signal)


def bollinger_bands(
    closes: Sequence[float],
    period: int = BB_PERIOD,
    multiplier: float = BB_MULT,
) -> BollingerBands:
    """
    Bollinger Bands: SMA(period) +/- multiplier * population stdev(period).

    With fewer than ``period`` closes all three bands collapse to the mean of
    the available closes.
    """
    try:
        mid = series.sma(closes, period)
    except InsufficientHistoryError:
        avg = series.mean(closes)
        return BollingerBands(mid=avg, upper=avg, lower=avg)

    width = series.population_stdev(closes[-period:]) * multiplier
    return BollingerBands(mid=mid, upper=mid + width, lower=mid - width)


def average_true_range(candles: Sequence[Candle], period: int = ATR_PERIOD) -> float:
    """
    Simple (unweighted) mean of the last ``period`` true ranges.

    True ranges are taken from the second candle on, each against the
    previous close. A single candle has only its own ``high - low``.
    """
    if len(candles) == 1:
        return candles[0].range_size

    tr = series.true_range(
        [c.h for c in candles],
        [c.l for c in candles],
        [c.c for c in candles],
    )[1:]
    recent = tr[-period:]
    return sum(recent) / len(recent)


def donchian(candles: Sequence[Candle], period: int = DONCHIAN_PERIOD) -> DonchianChannel:
    """Highest high and lowest low over the last ``period`` (or fewer) candles."""
    recent = candles[-period:]
    return DonchianChannel(
        high=max(c.h for c in recent),
        low=min(c.l for c in recent),
    )


def realized_volatility(closes: Sequence[float], period: int = VOL_PERIOD) -> float | None:
    """Annualized sample stdev of the last ``period`` log returns, or None."""
    if len(closes) < period + 1:
        return None
    returns = series.log_returns(closes)[-period:]
    try:
        return series.sample_stdev(returns) * math.sqrt(TRADING_PERIODS_PER_YEAR)
    except InsufficientHistoryError:
        return None


def zscore(closes: Sequence[float], period: int = ZSCORE_PERIOD) -> float | None:
    """
    Distance of the last close from the ``period`` mean in sample stdevs.

    Returns:
        None with fewer than ``period`` closes or a zero stdev
    """
    if len(closes) < period:
        return None
    recent = closes[-period:]
    try:
        stdev = series.sample_stdev(recent)
    except InsufficientHistoryError:
        return None
    if stdev == 0:
        return None
    return (closes[-1] - series.mean(recent)) / stdev


def vwap(candles: Sequence[Candle]) -> float | None:
    """
    Volume-weighted typical price across the whole window.

    Not reset at session boundaries: callers pick the session by the window
    they pass in. None when the window carries no volume.
    """
    total_volume = sum(c.v for c in candles)
    if total_volume <= 0:
        return None
    return sum(c.typical_price * c.v for c in candles) / total_volume


def _with_live_price(candles: list[Candle], live_price: float | None) -> list[Candle]:
    """Append a synthetic bar for a live quote that moved off the last close."""
    if live_price is None or live_price <= 0:
        return candles
    last = candles[-1]
    if abs(live_price - last.c) <= LIVE_PRICE_TOLERANCE:
        return candles
    logger.debug(f"Appending live price {live_price} (last close {last.c})")
    synthetic = Candle(
        t=last.t + 1,
        o=last.c,
        h=max(live_price, last.c),
        l=min(live_price, last.c),
        c=live_price,
        v=0.0,
    )
    return [*candles, synthetic]


def compute_indicators(
    candles: Sequence[Candle],
    symbol: str = "",
    timeframe: str = "",
    live_price: float | None = None,
) -> IndicatorSnapshot:
    """
    Compute the full indicator snapshot for one candle window.

    Args:
        candles: Ascending OHLCV series (at least one bar)
        symbol: Symbol label copied into the snapshot
        timeframe: Timeframe label copied into the snapshot
        live_price: Optional live quote; when it differs from the last close
            a synthetic bar is appended so indicators reflect it

    Returns:
        IndicatorSnapshot with every field present

    Raises:
        EmptySeriesError: if ``candles`` is empty
        MalformedDataError: if the series breaks the candle invariants
    """
    if not candles:
        raise EmptySeriesError(f"no candles supplied for {symbol or 'snapshot'}")
    supplied = list(candles)
    validate_series(supplied)

    window = _with_live_price(supplied, live_price)
    closes = [c.c for c in window]
    last = window[-1]
    window_vwap = vwap(window)
    levels = support_resistance_levels(window, last.c)

    snapshot = IndicatorSnapshot(
        symbol=symbol,
        timeframe=timeframe,
        as_of=last.timestamp,
        price=last.c,
        prev_close=supplied[-2].c if len(supplied) > 1 else None,
        data_points=len(supplied),
        ema={period: series.ema(closes, period) for period in EMA_PERIODS},
        rsi14=rsi(closes),
        macd=macd(closes),
        bb20=bollinger_bands(closes),
        atr14=average_true_range(window),
        donchian20=donchian(window),
        vol20_annual=realized_volatility(closes),
        zscore20=zscore(closes),
        vwap=window_vwap,
        tail=[TailPoint(t=c.t, c=c.c) for c in supplied[-TAIL_LENGTH:]],
        support=levels["support"],
        resistance=levels["resistance"],
        liquidity_zones=find_liquidity_zones(window, last.c, window_vwap),
        breakout_zones=find_breakout_zones(
            window, last.c, levels["support"], levels["resistance"]
        ),
        order_blocks=find_order_blocks(window, last.c),
        quant_metrics=compute_quant_metrics(closes),
    )

    logger.debug(
        f"Indicators {symbol} {timeframe}: price={snapshot.price} "
        f"rsi={snapshot.rsi14:.1f} bars={len(window)}"
    )
    return snapshot
