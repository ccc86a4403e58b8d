"""Tests for candle and recommendation models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from quantcore.errors import MalformedDataError
from quantcore.models import (
    Candle,
    Direction,
    Market,
    Outcome,
    OutcomeUpdate,
    TradeRecommendation,
    datetime_to_ms,
    validate_series,
)


class TestCandle:
    def test_timestamp_is_utc(self):
        candle = Candle(t=1_717_200_000_000, o=1, h=2, l=0.5, c=1.5)
        assert candle.timestamp == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_derived_values(self):
        candle = Candle(t=0, o=10, h=12, l=9, c=11, v=100)
        assert candle.range_size == 3
        assert candle.typical_price == pytest.approx(32 / 3)

    def test_volume_defaults_to_zero(self):
        assert Candle(t=0, o=1, h=1, l=1, c=1).v == 0

    def test_negative_volume_rejected(self):
        with pytest.raises(ValidationError):
            Candle(t=0, o=1, h=1, l=1, c=1, v=-1)

    @pytest.mark.parametrize("field", ["o", "h", "l", "c"])
    @pytest.mark.parametrize("value", [0, -1.5])
    def test_non_positive_price_rejected(self, field, value):
        prices = dict(o=1, h=1, l=1, c=1)
        prices[field] = value
        with pytest.raises(ValidationError):
            Candle(t=0, **prices)

    def test_frozen(self):
        candle = Candle(t=0, o=1, h=1, l=1, c=1)
        with pytest.raises(ValidationError):
            candle.c = 2

    @pytest.mark.parametrize(
        "o,h,l,c,ok",
        [
            (10, 12, 9, 11, True),
            (10, 10, 10, 10, True),
            (10, 9, 8, 9, False),   # open above high
            (10, 12, 10.5, 11, False),  # open below low
            (10, 12, 9, 13, False),  # close above high
        ],
    )
    def test_well_formed(self, o, h, l, c, ok):
        assert Candle(t=0, o=o, h=h, l=l, c=c).is_well_formed() is ok


class TestValidateSeries:
    def test_valid_series(self):
        candles = [Candle(t=i * 1000, o=10, h=11, l=9, c=10) for i in range(5)]
        validate_series(candles)

    def test_empty_series_is_valid(self):
        validate_series([])

    def test_duplicate_timestamp(self):
        candles = [Candle(t=1000, o=10, h=11, l=9, c=10)] * 2
        with pytest.raises(MalformedDataError, match="not after"):
            validate_series(candles)

    def test_bad_bar(self):
        candles = [
            Candle(t=1000, o=10, h=11, l=9, c=10),
            Candle(t=2000, o=10, h=9, l=8, c=9),
        ]
        with pytest.raises(MalformedDataError, match="candle 1"):
            validate_series(candles)

    def test_malformed_is_value_error(self):
        assert issubclass(MalformedDataError, ValueError)


class TestDatetimeToMs:
    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 6, 1)
        aware = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert datetime_to_ms(naive) == datetime_to_ms(aware) == 1_717_200_000_000


class TestTradeRecommendation:
    def make(self, **overrides) -> TradeRecommendation:
        fields = dict(
            id="rec-1",
            symbol="AAPL",
            direction="long",
            entry_price=100,
            stop_price=95,
            target1_price=105,
            target2_price=110,
            target3_price=120,
            created_at=datetime(2024, 6, 1, tzinfo=timezone.utc),
        )
        fields.update(overrides)
        return TradeRecommendation(**fields)

    def test_normalizes_enums(self):
        rec = self.make(direction="SHORT", market="crypto")
        assert rec.direction is Direction.SHORT
        assert rec.market is Market.CRYPTO

    def test_defaults(self):
        rec = self.make(market=None, timeframe="")
        assert rec.market is Market.STOCK
        assert rec.timeframe == "60m"
        assert rec.outcome is None
        assert rec.is_open

    def test_naive_created_at_is_utc(self):
        rec = self.make(created_at=datetime(2024, 6, 1, 12, 0))
        assert rec.created_at.tzinfo is not None
        assert rec.created_at == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def test_targets_most_distant_first(self):
        assert self.make().targets() == [(3, 120), (2, 110), (1, 105)]

    def test_missing_targets_skipped(self):
        rec = self.make(target2_price=None, target3_price=None)
        assert rec.targets() == [(1, 105)]

    def test_zero_target_kept(self):
        rec = self.make(target1_price=0.0, target2_price=None, target3_price=None)
        assert rec.targets() == [(1, 0.0)]

    def test_pending_is_open(self):
        assert self.make(outcome="PENDING").is_open
        assert not self.make(outcome="STOP_HIT").is_open

    def test_with_outcome_returns_copy(self):
        rec = self.make()
        now = datetime(2024, 6, 2, tzinfo=timezone.utc)
        update = OutcomeUpdate(
            recommendation_id=rec.id,
            outcome=Outcome.STOP_HIT,
            checked_at=now,
            outcome_price=95,
        )

        resolved = rec.with_outcome(update)

        assert resolved.outcome is Outcome.STOP_HIT
        assert resolved.outcome_price == 95
        assert resolved.checked_at == now
        assert rec.outcome is None


class TestOutcomeUpdatePatch:
    NOW = datetime(2024, 6, 2, tzinfo=timezone.utc)

    def test_pending_touches_only_checked_at(self):
        update = OutcomeUpdate(recommendation_id="r", outcome=Outcome.PENDING, checked_at=self.NOW)
        assert update.to_patch() == {"checked_at": self.NOW}
        assert not update.is_terminal

    def test_expired_has_no_price(self):
        update = OutcomeUpdate(recommendation_id="r", outcome=Outcome.EXPIRED, checked_at=self.NOW)
        assert update.to_patch() == {"outcome": "EXPIRED", "checked_at": self.NOW}
        assert update.is_terminal

    def test_hit_carries_all_fields(self):
        update = OutcomeUpdate(
            recommendation_id="r",
            outcome=Outcome.TARGET_HIT,
            checked_at=self.NOW,
            outcome_price=110,
            outcome_time=self.NOW,
            target_hit=2,
            hours_to_outcome=5.0,
            pnl_percentage=10.0,
        )
        patch = update.to_patch()

        assert patch["outcome"] == "TARGET_HIT"
        assert patch["target_hit"] == 2
        assert patch["pnl_percentage"] == 10.0
        assert set(patch) == {
            "outcome",
            "outcome_price",
            "outcome_time",
            "target_hit",
            "hours_to_outcome",
            "pnl_percentage",
            "checked_at",
        }
