"""Tests for liquidity zones, breakout zones and order blocks."""

import pytest

from quantcore.indicators import (
    compute_indicators,
    find_breakout_zones,
    find_liquidity_zones,
    find_order_blocks,
)
from quantcore.models import Candle

BASE_T = 1_717_200_000_000
HOUR_MS = 3_600_000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_bar(i: int, o: float, h: float, l: float, c: float, v: float = 100) -> Candle:
    return Candle(t=BASE_T + i * HOUR_MS, o=o, h=h, l=l, c=c, v=v)


def flat_bars(n: int, price: float = 100.0, v: float = 100, start: int = 0) -> list[Candle]:
    """Doji bars one point either side of ``price``."""
    return [make_bar(start + i, price, price + 1, price - 1, price, v) for i in range(n)]


# ---------------------------------------------------------------------------
# Liquidity zones
# ---------------------------------------------------------------------------

class TestLiquidityZones:
    def test_round_number_and_day_range(self):
        candles = [make_bar(i, 103, 106, 100, 103) for i in range(30)]

        zones = find_liquidity_zones(candles, current_price=103)

        assert [(z.price, z.type, z.strength) for z in zones] == [
            (100, "buy", "strong"),
            (106, "sell", "strong"),
            (100, "buy", "strong"),
        ]
        assert zones[1].description.startswith("Previous day high")

    def test_vwap_zone(self):
        candles = [make_bar(i, 103, 106, 100, 103) for i in range(30)]

        zones = find_liquidity_zones(candles, current_price=103, vwap=101)

        vwap_zones = [z for z in zones if z.description.startswith("VWAP")]
        assert len(vwap_zones) == 1
        assert vwap_zones[0].price == 101
        assert vwap_zones[0].type == "buy"
        assert vwap_zones[0].strength == "moderate"

    def test_vwap_at_price_skipped(self):
        candles = [make_bar(i, 103, 106, 100, 103) for i in range(30)]
        zones = find_liquidity_zones(candles, current_price=103, vwap=103.1)
        assert not any(z.description.startswith("VWAP") for z in zones)

    def test_high_volume_node(self):
        candles = flat_bars(20, v=10)
        candles += [make_bar(20 + i, 101.5, 102, 101, 101.5, v=1000) for i in range(5)]

        zones = find_liquidity_zones(candles, current_price=100)

        nodes = [z for z in zones if z.description.startswith("High volume node")]
        assert len(nodes) == 1
        assert nodes[0].price == pytest.approx(101.5)
        assert nodes[0].type == "sell"
        assert nodes[0].strength == "moderate"

    def test_at_most_five(self):
        candles = flat_bars(20, v=10)
        candles += [make_bar(20 + i, 101.5, 102, 101, 101.5, v=1000) for i in range(5)]
        candles += [make_bar(25 + i, 98.5, 99, 98, 98.5, v=500) for i in range(5)]

        zones = find_liquidity_zones(candles, current_price=103, vwap=100)

        assert len(zones) <= 5


# ---------------------------------------------------------------------------
# Breakout zones
# ---------------------------------------------------------------------------

class TestBreakoutZones:
    @pytest.fixture
    def candles(self):
        bars = flat_bars(17)
        # Three bars poking into the 102 level
        bars += [make_bar(17 + i, 100, 102.1, 99, 100) for i in range(3)]
        return bars

    def test_tested_resistance_is_strong(self, candles):
        zones = find_breakout_zones(candles, 100, support=[97], resistance=[102])

        assert zones[0].price == 102
        assert zones[0].type == "bullish"
        assert zones[0].strength == "strong"
        assert "tested 3x" in zones[0].description

    def test_untested_support_is_weak(self, candles):
        zones = find_breakout_zones(candles, 100, support=[97], resistance=[102])

        assert zones[1].price == 97
        assert zones[1].type == "bearish"
        assert zones[1].strength == "weak"

    def test_distance_window(self, candles):
        zones = find_breakout_zones(candles, 100, support=[80, 99.95], resistance=[100.05, 120])
        assert zones == []

    def test_at_most_four(self, candles):
        zones = find_breakout_zones(
            candles, 100, support=[99, 98, 97], resistance=[101, 102, 103]
        )

        assert len(zones) == 4
        assert [z.type for z in zones] == ["bullish", "bullish", "bullish", "bearish"]


# ---------------------------------------------------------------------------
# Order blocks
# ---------------------------------------------------------------------------

def impulse_bars(block: Candle, follow: Candle) -> list[Candle]:
    """Five quiet bars, the block candle, the follow-through bar, three quiet bars."""
    return flat_bars(5) + [block, follow] + flat_bars(3, start=7)


class TestOrderBlocks:
    def test_bullish_block(self):
        candles = impulse_bars(
            make_bar(5, 100, 105, 99.5, 104, v=400),
            make_bar(6, 104, 108, 103, 107),
        )

        blocks = find_order_blocks(candles, current_price=120)

        assert len(blocks) == 1
        block = blocks[0]
        assert block.type == "bullish"
        assert block.strength == "strong"
        assert (block.low, block.high) == (99.5, 105)

    def test_bearish_block(self):
        candles = impulse_bars(
            make_bar(5, 100, 100.5, 95, 96, v=400),
            make_bar(6, 96, 97, 92, 93),
        )

        blocks = find_order_blocks(candles, current_price=80)

        assert len(blocks) == 1
        assert blocks[0].type == "bearish"
        assert (blocks[0].low, blocks[0].high) == (95, 100.5)

    def test_moderate_volume(self):
        candles = impulse_bars(
            make_bar(5, 100, 105, 99.5, 104, v=250),
            make_bar(6, 104, 108, 103, 107),
        )

        blocks = find_order_blocks(candles, current_price=120)

        assert [b.strength for b in blocks] == ["moderate"]

    def test_block_too_close_to_price(self):
        candles = impulse_bars(
            make_bar(5, 100, 105, 99.5, 104, v=400),
            make_bar(6, 104, 108, 103, 107),
        )
        assert find_order_blocks(candles, current_price=105.5) == []

    def test_needs_follow_through(self):
        candles = impulse_bars(
            make_bar(5, 100, 105, 99.5, 104, v=400),
            make_bar(6, 104, 105, 103, 104.5),
        )
        assert find_order_blocks(candles, current_price=120) == []

    def test_quiet_candle_ignored(self):
        candles = impulse_bars(
            make_bar(5, 100, 105, 99.5, 104),
            make_bar(6, 104, 108, 103, 107),
        )
        assert find_order_blocks(candles, current_price=120) == []


# ---------------------------------------------------------------------------
# Snapshot wiring
# ---------------------------------------------------------------------------

class TestSnapshotZones:
    def test_zones_in_payload(self):
        candles = [make_bar(i, 103, 106, 100, 103) for i in range(30)]

        payload = compute_indicators(candles, symbol="AAPL").to_payload()

        assert payload["liquidity_zones"][0] == {
            "price": 100,
            "type": "buy",
            "strength": "strong",
            "description": "Round number liquidity at 100.00",
        }
        assert payload["breakout_zones"] == []
        assert payload["order_blocks"] == []
