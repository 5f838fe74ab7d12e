"""Tests for the per-day registry."""

from dataclasses import replace
from datetime import timedelta

import pytest

from orb_scanner.breakout.models import BreakoutDetection, BreakoutType, Direction
from orb_scanner.config.defaults import TradeParams
from orb_scanner.ranges.models import Timeframe
from orb_scanner.risk.gamma import GammaZone
from orb_scanner.scoring.confidence import ConfidenceBreakdown
from orb_scanner.session.clock import SessionPhase
from orb_scanner.state.daily import DailyRegistry
from orb_scanner.trade.synthesizer import TradeSynthesizer


@pytest.fixture
def registry(trading_day) -> DailyRegistry:
    registry = DailyRegistry()
    registry.roll(trading_day)
    return registry


@pytest.fixture
def breakout(make_range, et):
    detection = BreakoutDetection(Direction.LONG, 105.5, 105.0, 0.5, 10.0, et(10, 0))
    scores = ConfidenceBreakdown(80.0, 80.0, 80.0, 80.0, 80.0)
    return TradeSynthesizer().synthesize(
        detection, make_range(), BreakoutType.ZERO_DTE, scores, TradeParams(),
        18.0, SessionPhase.MORNING_SESSION, GammaZone.NEUTRAL, 105.5
    )


class TestDailyRegistry:
    """Test suite for registry lifecycle."""

    def test_builder_requires_trading_day(self) -> None:
        with pytest.raises(RuntimeError):
            DailyRegistry().builder("SPY", Timeframe.MIN_15)

    def test_builder_is_reused(self, registry) -> None:
        first = registry.builder("SPY", Timeframe.MIN_15)
        assert registry.builder("SPY", Timeframe.MIN_15) is first
        assert registry.builder("SPY", Timeframe.MIN_30) is not first

    def test_ranges_are_write_once(self, registry, make_range) -> None:
        first = make_range()
        stored = registry.record_range(first)
        again = registry.record_range(make_range(high=110.0))

        assert stored is first
        assert again is first
        assert registry.get_range("SPY", Timeframe.MIN_15).high == 105.0
        assert registry.ranges_formed == 1

    def test_one_breakout_per_slot(self, registry, breakout) -> None:
        registry.put_breakout(breakout)
        registry.put_breakout(breakout.with_market_update(current_price=104.0))

        assert registry.breakout_count == 1
        assert registry.get_breakout("SPY", Timeframe.MIN_15).current_price == 104.0

        with pytest.raises(ValueError):
            registry.put_breakout(replace(breakout, id="orb_SPY_15min_2024-01-03_SHORT"))

    def test_roll_resets_state(self, registry, make_range, breakout, trading_day) -> None:
        registry.record_range(make_range())
        registry.put_breakout(breakout)

        assert not registry.roll(trading_day)
        assert registry.ranges_formed == 1

        assert registry.roll(trading_day + timedelta(days=1))
        assert registry.ranges() == []
        assert registry.breakouts() == []
        assert registry.builder("SPY", Timeframe.MIN_15).day == trading_day + timedelta(days=1)
