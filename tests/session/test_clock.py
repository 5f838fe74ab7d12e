"""Tests for session phase classification and clocks."""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from orb_scanner.session.clock import (
    PHASE_ORDER,
    FixedClock,
    ManualClock,
    ManualTicker,
    SessionPhase,
    classify_phase,
    is_before_phase,
    is_market_open,
    time_to_next_phase,
)

SATURDAY = date(2024, 1, 6)


class TestClassifyPhase:
    """Test suite for phase classification."""

    @pytest.mark.parametrize("hour,minute,second,expected", [
        (3, 59, 59, SessionPhase.CLOSED),
        (4, 0, 0, SessionPhase.PREMARKET),
        (9, 29, 59, SessionPhase.PREMARKET),
        (9, 30, 0, SessionPhase.OPENING),
        (9, 59, 59, SessionPhase.OPENING),
        (10, 0, 0, SessionPhase.MORNING_SESSION),
        (12, 0, 0, SessionPhase.MIDDAY),
        (14, 0, 0, SessionPhase.AFTERNOON),
        (15, 0, 0, SessionPhase.POWER_HOUR),
        (15, 59, 59, SessionPhase.POWER_HOUR),
        (16, 0, 0, SessionPhase.CLOSED),
        (23, 0, 0, SessionPhase.CLOSED),
    ])
    def test_boundaries_are_half_open(self, et, hour, minute, second, expected) -> None:
        assert classify_phase(et(hour, minute, second)) is expected

    def test_weekend_is_always_closed(self, et) -> None:
        for hour in (4, 9, 10, 12, 15):
            assert classify_phase(et(hour, 30, day=SATURDAY)) is SessionPhase.CLOSED
            assert classify_phase(et(hour, 30, day=SATURDAY + timedelta(days=1))) is SessionPhase.CLOSED

    def test_every_minute_maps_to_one_phase_in_session_order(self, et) -> None:
        start = et(0, 0)
        seen = []
        for minute in range(24 * 60):
            phase = classify_phase(start + timedelta(minutes=minute))
            assert phase in PHASE_ORDER
            if not seen or seen[-1] is not phase:
                seen.append(phase)

        assert seen == [
            SessionPhase.CLOSED,
            SessionPhase.PREMARKET,
            SessionPhase.OPENING,
            SessionPhase.MORNING_SESSION,
            SessionPhase.MIDDAY,
            SessionPhase.AFTERNOON,
            SessionPhase.POWER_HOUR,
            SessionPhase.CLOSED,
        ]

    def test_naive_instants_are_utc(self) -> None:
        # 15:00 UTC is 10:00 EST
        assert classify_phase(datetime(2024, 1, 3, 15, 0)) is SessionPhase.MORNING_SESSION

    def test_daylight_saving_time(self) -> None:
        # 13:30 UTC is 9:30 EDT in July
        instant = datetime(2024, 7, 1, 13, 30, tzinfo=timezone.utc)
        assert classify_phase(instant) is SessionPhase.OPENING


class TestCountdown:
    """Test suite for time to next phase."""

    def test_countdown_within_session(self, et) -> None:
        countdown = time_to_next_phase(et(9, 45))

        assert (countdown.hours, countdown.minutes, countdown.seconds) == (0, 15, 0)
        assert countdown.next_phase is SessionPhase.MORNING_SESSION

    def test_countdown_after_close_wraps_to_premarket(self, et) -> None:
        countdown = time_to_next_phase(et(16, 30))

        assert (countdown.hours, countdown.minutes) == (11, 30)
        assert countdown.next_phase is SessionPhase.PREMARKET

    def test_countdown_on_weekend_targets_next_four_am(self, et) -> None:
        countdown = time_to_next_phase(et(10, 0, day=SATURDAY))

        assert countdown.total_seconds == 18 * 3600
        assert countdown.next_phase is SessionPhase.PREMARKET

    def test_countdown_payload(self, et) -> None:
        payload = time_to_next_phase(et(15, 59, 30)).to_payload()
        assert payload == {"hours": 0, "minutes": 0, "seconds": 30, "nextPhase": "closed"}


class TestSessionHelpers:
    """Test suite for market hours helpers."""

    def test_is_market_open(self, et) -> None:
        assert is_market_open(et(9, 30))
        assert is_market_open(et(15, 59))
        assert not is_market_open(et(16, 0))
        assert not is_market_open(et(9, 29))
        assert not is_market_open(et(11, 0, day=SATURDAY))

    def test_is_before_phase(self) -> None:
        assert is_before_phase(SessionPhase.PREMARKET, SessionPhase.AFTERNOON)
        assert is_before_phase(SessionPhase.MIDDAY, SessionPhase.AFTERNOON)
        assert not is_before_phase(SessionPhase.AFTERNOON, SessionPhase.AFTERNOON)
        assert not is_before_phase(SessionPhase.POWER_HOUR, SessionPhase.AFTERNOON)
        assert not is_before_phase(SessionPhase.CLOSED, SessionPhase.AFTERNOON)


class TestClocks:
    """Test suite for injectable clocks and tickers."""

    def test_fixed_clock_normalizes_to_utc(self) -> None:
        clock = FixedClock(datetime(2024, 1, 3, 15, 0))
        assert clock.now().tzinfo is not None
        assert clock.now() == datetime(2024, 1, 3, 15, 0, tzinfo=timezone.utc)

    def test_manual_ticker_advances_clock(self, et) -> None:
        clock = ManualClock(et(10, 0))
        ticker = ManualTicker(clock)

        asyncio.run(ticker.sleep(15))
        asyncio.run(ticker.sleep(2.5))

        assert ticker.sleeps == [15, 2.5]
        assert clock.now() == et(10, 0, 17) + timedelta(milliseconds=500)
