"""Tests for breakout detection and classification."""

import pytest

from orb_scanner.breakout.detector import (
    breakout_buffer,
    classify_breakout_type,
    detect_breakout,
    pending_setup,
    watch_item,
)
from orb_scanner.breakout.models import Bias, BreakoutType, Direction
from orb_scanner.data.models import PriceTick
from orb_scanner.session.clock import SessionPhase


@pytest.fixture
def tick(et):
    def _tick(close: float, high: float = None, low: float = None) -> PriceTick:
        return PriceTick(
            ts=et(10, 0),
            close=close,
            high=high if high is not None else close,
            low=low if low is not None else close,
        )
    return _tick


class TestDetectBreakout:
    """Test suite for close-confirmed detection."""

    def test_buffer_is_percent_of_width(self, make_range) -> None:
        assert breakout_buffer(make_range(), 0.05) == pytest.approx(0.0025)
        assert breakout_buffer(make_range(), 10.0) == pytest.approx(0.5)

    def test_long_breakout(self, make_range, tick, et) -> None:
        detection = detect_breakout(make_range(), tick(105.5))

        assert detection.direction is Direction.LONG
        assert detection.trigger_price == 105.5
        assert detection.boundary == 105.0
        assert detection.breach == pytest.approx(0.5)
        assert detection.strength == pytest.approx(10.0)
        assert detection.ts == et(10, 0)

    def test_short_breakout(self, make_range, tick) -> None:
        detection = detect_breakout(make_range(), tick(99.5))

        assert detection.direction is Direction.SHORT
        assert detection.trigger_price == 99.5
        assert detection.boundary == 100.0

    def test_close_at_boundary_is_not_a_breakout(self, make_range, tick) -> None:
        assert detect_breakout(make_range(), tick(105.0)) is None
        assert detect_breakout(make_range(), tick(100.0)) is None

    def test_breach_inside_buffer_is_ignored(self, make_range, tick) -> None:
        assert detect_breakout(make_range(), tick(105.001)) is None
        assert detect_breakout(make_range(), tick(105.001), buffer_pct=0.0) is not None

    def test_invalid_range_never_breaks_out(self, make_range, tick) -> None:
        assert detect_breakout(make_range(is_valid=False), tick(150.0)) is None

    def test_strength_is_capped(self, make_range, tick) -> None:
        assert detect_breakout(make_range(), tick(120.0)).strength == 100.0

    def test_wick_does_not_count_with_close_confirmation(self, make_range, tick) -> None:
        assert detect_breakout(make_range(), tick(104.0, high=106.0, low=103.0)) is None


class TestExtremeDetection:
    """Test suite for detection on bar extremes."""

    def test_wick_counts_without_close_confirmation(self, make_range, tick) -> None:
        detection = detect_breakout(make_range(), tick(104.0, high=106.0, low=103.0),
                                    confirm_close=False)

        assert detection.direction is Direction.LONG
        assert detection.trigger_price == 106.0

    def test_gap_bar_larger_breach_wins(self, make_range, tick) -> None:
        detection = detect_breakout(make_range(), tick(101.0, high=105.5, low=98.0),
                                    confirm_close=False)

        assert detection.direction is Direction.SHORT
        assert detection.trigger_price == 98.0

    def test_gap_bar_equal_breach_follows_close(self, make_range, tick) -> None:
        below_mid = detect_breakout(make_range(), tick(101.0, high=106.0, low=99.0),
                                    confirm_close=False)
        above_mid = detect_breakout(make_range(), tick(104.0, high=106.0, low=99.0),
                                    confirm_close=False)

        assert below_mid.direction is Direction.SHORT
        assert above_mid.direction is Direction.LONG


class TestClassification:
    """Test suite for breakout type and pending setups."""

    @pytest.mark.parametrize("phase,expected", [
        (SessionPhase.OPENING, BreakoutType.ZERO_DTE),
        (SessionPhase.MORNING_SESSION, BreakoutType.ZERO_DTE),
        (SessionPhase.MIDDAY, BreakoutType.ZERO_DTE),
        (SessionPhase.AFTERNOON, BreakoutType.SWING),
        (SessionPhase.POWER_HOUR, BreakoutType.SWING),
        (SessionPhase.CLOSED, BreakoutType.SWING),
    ])
    def test_breakout_type_by_phase(self, phase, expected) -> None:
        assert classify_breakout_type(phase) is expected

    def test_no_daily_expiries_is_swing(self) -> None:
        assert classify_breakout_type(SessionPhase.OPENING, daily_expiries=False) is BreakoutType.SWING

    def test_configurable_cutoff(self) -> None:
        assert classify_breakout_type(SessionPhase.MIDDAY, cutoff=SessionPhase.MIDDAY) is BreakoutType.SWING

    @pytest.mark.parametrize("price,bias", [
        (104.0, Bias.BULLISH),
        (101.0, Bias.BEARISH),
        (102.5, Bias.NEUTRAL),
    ])
    def test_pending_setup_bias(self, make_range, price, bias) -> None:
        setup = pending_setup(make_range(), price)

        assert setup.bias is bias
        assert setup.distance_to_high == pytest.approx((105.0 - price) / price * 100)
        assert setup.distance_to_low == pytest.approx((price - 100.0) / price * 100)

    def test_watch_item_takes_breakout_direction(self, make_range) -> None:
        assert watch_item(make_range(), 105.5, Direction.LONG).bias is Bias.BULLISH
        assert watch_item(make_range(), 99.5, Direction.SHORT).bias is Bias.BEARISH
        payload = watch_item(make_range(), 99.5, Direction.SHORT).to_payload()
        assert payload["bias"] == "bearish"
