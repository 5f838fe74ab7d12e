"""Tests for the opening range builder state machine."""

import pytest

from orb_scanner.ranges.builder import OpeningRangeBuilder
from orb_scanner.ranges.models import RangeState, Timeframe


@pytest.fixture
def builder(trading_day) -> OpeningRangeBuilder:
    return OpeningRangeBuilder("SPY", trading_day, Timeframe.MIN_15)


class TestOpeningRangeBuilder:
    """Test suite for range formation."""

    def test_forming_until_window_end(self, builder, opening_bars, et) -> None:
        builder.observe_many(opening_bars)

        assert builder.advance(et(9, 44, 59)) is None
        assert builder.state is RangeState.FORMING

        opening_range = builder.advance(et(9, 45))
        assert builder.state is RangeState.VALID
        assert opening_range.high == 105.0
        assert opening_range.low == 100.0
        assert opening_range.open == 101.0
        assert opening_range.close == 103.0
        assert opening_range.volume == 3000.0
        assert opening_range.observations == 3
        assert opening_range.formed_at == et(9, 45)
        assert opening_range.range_width == 5.0
        assert opening_range.range_width_pct == pytest.approx(5.0 / 101.0 * 100)

    def test_bars_outside_window_are_ignored(self, builder, session_bars, et) -> None:
        accepted = builder.observe_many(session_bars)

        assert accepted == 3
        assert builder.advance(et(10, 0)).high == 105.0

    def test_bar_before_open_is_ignored(self, builder, make_bar, et) -> None:
        assert not builder.observe(make_bar(9, 25, 90.0, 120.0, 80.0, 95.0))
        assert builder.observe(make_bar(9, 30, 101.0, 102.0, 100.0, 101.5))
        assert builder.advance(et(9, 45)).high == 102.0

    def test_reobserving_bars_is_idempotent(self, builder, opening_bars, et, trading_day) -> None:
        builder.observe_many(opening_bars)
        builder.observe_many(opening_bars)
        twice = builder.advance(et(9, 45))

        once = OpeningRangeBuilder("SPY", trading_day, Timeframe.MIN_15)
        once.observe_many(opening_bars)

        assert twice == once.advance(et(9, 45))
        assert twice.observations == 3

    def test_window_without_data_is_invalid(self, builder, et) -> None:
        opening_range = builder.advance(et(9, 45))

        assert builder.state is RangeState.INVALID
        assert not opening_range.is_valid
        assert opening_range.high == opening_range.low == 0.0
        assert opening_range.observations == 0

    def test_finalized_range_is_frozen(self, builder, opening_bars, make_bar, et) -> None:
        builder.observe_many(opening_bars)
        first = builder.advance(et(9, 45))

        assert not builder.observe(make_bar(9, 40, 104.0, 120.0, 90.0, 110.0))
        assert builder.advance(et(11, 0)) is first
        assert builder.finalize() is first

    def test_trade_prints_are_observations(self, builder, et) -> None:
        builder.observe_trade(et(9, 31), 100.5)
        builder.observe_trade(et(9, 38), 102.5, volume=50.0)
        opening_range = builder.advance(et(9, 45))

        assert (opening_range.low, opening_range.high) == (100.5, 102.5)
        assert opening_range.volume == 50.0

    def test_narrow_range_is_invalid_with_min_width(self, opening_bars, et, trading_day) -> None:
        builder = OpeningRangeBuilder("SPY", trading_day, Timeframe.MIN_15, min_range_pct=10.0)
        builder.observe_many(opening_bars)

        opening_range = builder.advance(et(9, 45))
        assert not opening_range.is_valid
        assert builder.state is RangeState.INVALID

    def test_thirty_minute_window(self, session_bars, et, trading_day) -> None:
        builder = OpeningRangeBuilder("SPY", trading_day, Timeframe.MIN_30)
        builder.observe_many(session_bars)

        assert builder.advance(et(9, 59)) is None
        opening_range = builder.advance(et(10, 0))
        assert opening_range.high == 105.6
        assert opening_range.observations == 6


class TestOpeningRangePayload:
    """Test suite for range serialization."""

    def test_payload_fields(self, builder, opening_bars, et) -> None:
        builder.observe_many(opening_bars)
        payload = builder.advance(et(9, 45)).to_payload()

        assert payload["symbol"] == "SPY"
        assert payload["date"] == "2024-01-03"
        assert payload["timeframe"] == "15min"
        assert payload["rangeWidth"] == 5.0
        assert payload["isValid"] is True
        assert payload["formedAt"] == "2024-01-03T14:45:00.000Z"
