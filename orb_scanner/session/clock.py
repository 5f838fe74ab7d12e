"""
Session clock and market phase classification.

Maps an instant to exactly one session phase using a fixed table of
half-open Eastern time intervals, and exposes injectable clocks and tickers
so the scan loop can be driven without real sleeping in tests.
"""

import asyncio
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from ..utils.time import EASTERN, eastern_instant, ensure_utc, to_eastern


class SessionPhase(str, Enum):
    """Market session phases; values are the wire strings."""
    PREMARKET = "premarket"
    OPENING = "opening"
    MORNING_SESSION = "morningSession"
    MIDDAY = "midday"
    AFTERNOON = "afternoon"
    POWER_HOUR = "powerHour"
    CLOSED = "closed"


# Ordered half-open [start, end) intervals, Eastern wall clock
PHASE_TABLE: tuple[tuple[time, time, SessionPhase], ...] = (
    (time(4, 0), time(9, 30), SessionPhase.PREMARKET),
    (time(9, 30), time(10, 0), SessionPhase.OPENING),
    (time(10, 0), time(12, 0), SessionPhase.MORNING_SESSION),
    (time(12, 0), time(14, 0), SessionPhase.MIDDAY),
    (time(14, 0), time(15, 0), SessionPhase.AFTERNOON),
    (time(15, 0), time(16, 0), SessionPhase.POWER_HOUR),
)

PHASE_ORDER: tuple[SessionPhase, ...] = tuple(row[2] for row in PHASE_TABLE) + (SessionPhase.CLOSED,)

MARKET_OPEN = time(9, 30)
MARKET_CLOSE = time(16, 0)
PREMARKET_START = time(4, 0)


@dataclass(frozen=True)
class Countdown:
    """Time remaining until the next phase boundary."""
    hours: int
    minutes: int
    seconds: int
    next_phase: SessionPhase

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    def to_payload(self) -> dict[str, Any]:
        return {
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "nextPhase": self.next_phase.value,
        }


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def classify_phase(instant: datetime, tz=None) -> SessionPhase:
    """
    Classify an instant into its session phase.

    Args:
        instant: Any instant; naive values are treated as UTC
        tz: Session timezone, US Eastern by default

    Returns:
        The single phase active at that instant
    """
    local = to_eastern(instant, tz)
    if is_weekend(local.date()):
        return SessionPhase.CLOSED

    wall = local.time()
    for start, end, phase in PHASE_TABLE:
        if start <= wall < end:
            return phase
    return SessionPhase.CLOSED


def phase_boundary(phase: SessionPhase) -> time:
    """Wall-clock time at which the given phase ends."""
    for _start, end, candidate in PHASE_TABLE:
        if candidate is phase:
            return end
    return PREMARKET_START


def time_to_next_phase(instant: datetime, tz=None) -> Countdown:
    """
    Countdown to the next phase boundary.

    While closed the target is the next 4:00 wall-clock time, which may fall
    on a weekend.
    """
    zone = tz or EASTERN
    local = to_eastern(instant, zone)
    phase = classify_phase(instant, zone)

    index = PHASE_ORDER.index(phase)
    next_phase = PHASE_ORDER[index + 1] if index + 1 < len(PHASE_ORDER) else SessionPhase.PREMARKET

    target_day = local.date()
    target = eastern_instant(target_day, phase_boundary(phase), zone)
    if target <= ensure_utc(instant):
        target = eastern_instant(target_day + timedelta(days=1), phase_boundary(phase), zone)

    remaining = math.floor((target - ensure_utc(instant)).total_seconds())
    return Countdown(
        hours=remaining // 3600,
        minutes=(remaining % 3600) // 60,
        seconds=remaining % 60,
        next_phase=next_phase,
    )


def is_market_open(instant: datetime, tz=None) -> bool:
    """Regular session hours, 9:30 to 16:00 Eastern on weekdays."""
    local = to_eastern(instant, tz)
    if is_weekend(local.date()):
        return False
    return MARKET_OPEN <= local.time() < MARKET_CLOSE


def is_before_phase(phase: SessionPhase, cutoff: SessionPhase) -> bool:
    """True when ``phase`` comes strictly earlier in the session than ``cutoff``."""
    if phase is SessionPhase.CLOSED:
        return False
    return PHASE_ORDER.index(phase) < PHASE_ORDER.index(cutoff)


class Clock(ABC):
    """Source of the current instant."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant as an aware UTC datetime."""


class SystemClock(Clock):
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Always returns the same instant."""

    def __init__(self, instant: datetime):
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant


class ManualClock(Clock):
    """Clock advanced explicitly by tests or a simulated ticker."""

    def __init__(self, start: datetime):
        self._instant = ensure_utc(start)

    def now(self) -> datetime:
        return self._instant

    def advance(self, seconds: float) -> None:
        self._instant = self._instant + timedelta(seconds=seconds)

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)


class Ticker(ABC):
    """Sleep abstraction for the scan loop."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend until the next tick."""


class AsyncioTicker(Ticker):
    """Real-time ticker backed by asyncio.sleep."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualTicker(Ticker):
    """Advances a ManualClock instead of sleeping."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.clock.advance(seconds)
        # Yield so other tasks get a turn
        await asyncio.sleep(0)


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock if clock is not None else SystemClock()
