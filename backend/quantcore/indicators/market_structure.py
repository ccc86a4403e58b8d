"""Market structure zones: liquidity, breakout candidates and order blocks.

All functions are pure over the candle window and the current price.
"""

from typing import Sequence

from quantcore.models.candle import Candle
from quantcore.models.snapshot import BreakoutZone, LiquidityZone, OrderBlock

MAX_LIQUIDITY_ZONES = 5
MAX_BREAKOUT_ZONES = 4
MAX_ORDER_BLOCKS = 3

DAY_BARS = 24
VOLUME_NODE_BARS = 100
VOLUME_NODE_STEP = 0.001  # bucket width as a fraction of price
BREAKOUT_TEST_BARS = 20
BREAKOUT_TEST_TOLERANCE = 0.003
ORDER_BLOCK_BARS = 30
ORDER_BLOCK_VOLUME_SPAN = 6


def _volume(candle: Candle) -> float:
    return candle.v or 1.0


def _round_base(price: float) -> float:
    if price >= 1000:
        return 1000.0
    if price >= 100:
        return 100.0
    if price >= 10:
        return 10.0
    return 1.0


def _side(level: float, current_price: float) -> str:
    return "sell" if level > current_price else "buy"


def find_liquidity_zones(
    candles: Sequence[Candle],
    current_price: float,
    vwap: float | None = None,
) -> list[LiquidityZone]:
    """
    Likely liquidity pools around the current price.

    Sources, in order: the nearest round number, VWAP, the high/low of the
    last 24 bars, and the three busiest 0.1% price buckets of the last 100
    bars. Levels above price are sell-side, below are buy-side.
    """
    zones: list[LiquidityZone] = []

    base = _round_base(current_price)
    nearest_round = round(current_price / base) * base
    if abs(nearest_round - current_price) / current_price > 0.002:
        zones.append(LiquidityZone(
            price=nearest_round,
            type=_side(nearest_round, current_price),
            strength="strong",
            description=f"Round number liquidity at {nearest_round:.2f}",
        ))

    vwap = current_price if vwap is None else vwap
    if abs(vwap - current_price) / current_price > 0.003:
        zones.append(LiquidityZone(
            price=vwap,
            type=_side(vwap, current_price),
            strength="moderate",
            description=f"VWAP liquidity zone at {vwap:.2f}",
        ))

    day = candles[-DAY_BARS:]
    if day:
        day_high = max(c.h for c in day)
        day_low = min(c.l for c in day)
        if current_price * 1.002 < day_high < current_price * 1.05:
            zones.append(LiquidityZone(
                price=day_high,
                type="sell",
                strength="strong",
                description=f"Previous day high - sell-side liquidity at {day_high:.2f}",
            ))
        if current_price * 0.95 < day_low < current_price * 0.998:
            zones.append(LiquidityZone(
                price=day_low,
                type="buy",
                strength="strong",
                description=f"Previous day low - buy-side liquidity at {day_low:.2f}",
            ))

    step = current_price * VOLUME_NODE_STEP
    buckets: dict[int, float] = {}
    for c in candles[-VOLUME_NODE_BARS:]:
        key = round((c.h + c.l) / 2 / step)
        buckets[key] = buckets.get(key, 0.0) + _volume(c)

    busiest = sorted(buckets.items(), key=lambda item: item[1], reverse=True)[:3]
    for key, _ in busiest:
        price = key * step
        distance = abs(price - current_price) / current_price
        if 0.005 < distance < 0.03:
            zones.append(LiquidityZone(
                price=price,
                type=_side(price, current_price),
                strength="moderate",
                description=f"High volume node liquidity at {price:.2f}",
            ))

    return zones[:MAX_LIQUIDITY_ZONES]


def _test_strength(tests: int) -> str:
    if tests > 2:
        return "strong"
    if tests > 0:
        return "moderate"
    return "weak"


def find_breakout_zones(
    candles: Sequence[Candle],
    current_price: float,
    support: Sequence[float],
    resistance: Sequence[float],
) -> list[BreakoutZone]:
    """
    Support/resistance levels within 0.1%-5% of price.

    Strength counts how many of the last 20 bars tested the level (high or
    low within 0.3% of it).
    """
    recent = candles[-BREAKOUT_TEST_BARS:]
    zones: list[BreakoutZone] = []

    for level in resistance:
        distance = (level - current_price) / current_price
        if 0.001 < distance < 0.05:
            tests = sum(1 for c in recent if abs(c.h - level) / level < BREAKOUT_TEST_TOLERANCE)
            zones.append(BreakoutZone(
                price=level,
                type="bullish",
                strength=_test_strength(tests),
                description=f"Resistance breakout zone at {level:.2f} (tested {tests}x recently)",
            ))

    for level in support:
        distance = (current_price - level) / current_price
        if 0.001 < distance < 0.05:
            tests = sum(1 for c in recent if abs(c.l - level) / level < BREAKOUT_TEST_TOLERANCE)
            zones.append(BreakoutZone(
                price=level,
                type="bearish",
                strength=_test_strength(tests),
                description=f"Support breakdown zone at {level:.2f} (tested {tests}x recently)",
            ))

    return zones[:MAX_BREAKOUT_ZONES]


def find_order_blocks(candles: Sequence[Candle], current_price: float) -> list[OrderBlock]:
    """
    High-volume candles that the next bar moved decisively away from.

    Bullish: an up candle with volume above 1.5x the local average, the next
    close above its high, and the block at least 1% below price. Bearish
    mirrors it above price.
    """
    recent = candles[-ORDER_BLOCK_BARS:]
    blocks: list[OrderBlock] = []

    for i in range(1, len(recent) - 1):
        candle = recent[i]
        following = recent[i + 1]
        nearby = recent[max(0, i - ORDER_BLOCK_VOLUME_SPAN + 1):i + 1]
        avg_volume = sum(_volume(c) for c in nearby) / len(nearby)
        volume = _volume(candle)
        if volume <= avg_volume * 1.5:
            continue
        strength = "strong" if volume > avg_volume * 2 else "moderate"

        if candle.c > candle.o and following.c > candle.h and candle.h < current_price * 0.99:
            blocks.append(OrderBlock(
                high=candle.h,
                low=candle.l,
                type="bullish",
                strength=strength,
                description=f"Bullish order block {candle.l:.2f}-{candle.h:.2f} (institutional buying)",
            ))
        elif candle.c < candle.o and following.c < candle.l and candle.l > current_price * 1.01:
            blocks.append(OrderBlock(
                high=candle.h,
                low=candle.l,
                type="bearish",
                strength=strength,
                description=f"Bearish order block {candle.l:.2f}-{candle.h:.2f} (institutional selling)",
            ))

    return blocks[:MAX_ORDER_BLOCKS]
