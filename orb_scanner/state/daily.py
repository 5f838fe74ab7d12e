"""
Per-trading-day registry of opening ranges and breakout records.

Ranges are written once, by the worker that owns the symbol, when their
window is finalized. Each (symbol, timeframe) holds at most one breakout
record per day. Everything is dropped when the trading date rolls.
"""

from datetime import date
from typing import Optional

import structlog

from ..breakout.models import ORBBreakout
from ..ranges.builder import OpeningRangeBuilder
from ..ranges.models import OpeningRange, Timeframe

logger = structlog.get_logger(__name__)

SlotKey = tuple[str, Timeframe]


class DailyRegistry:
    """In-memory state for one trading day."""

    def __init__(self, min_range_pct: float = 0.0, tz=None):
        self.min_range_pct = min_range_pct
        self.tz = tz
        self.trading_day: Optional[date] = None
        self._builders: dict[SlotKey, OpeningRangeBuilder] = {}
        self._ranges: dict[SlotKey, OpeningRange] = {}
        self._breakouts: dict[SlotKey, ORBBreakout] = {}

    def roll(self, day: date) -> bool:
        """Reset state when a new trading date starts; returns True on reset."""
        if self.trading_day == day:
            return False

        previous = self.trading_day
        self.trading_day = day
        self._builders.clear()
        self._ranges.clear()
        self._breakouts.clear()

        logger.info(
            "New trading day, registry reset",
            previous_day=previous.isoformat() if previous else None,
            trading_day=day.isoformat()
        )
        return True

    def builder(self, symbol: str, timeframe: Timeframe) -> OpeningRangeBuilder:
        if self.trading_day is None:
            raise RuntimeError("Registry has no trading day; call roll() first")

        key = (symbol, timeframe)
        existing = self._builders.get(key)
        if existing is None:
            existing = OpeningRangeBuilder(
                symbol, self.trading_day, timeframe, self.min_range_pct, self.tz
            )
            self._builders[key] = existing
        return existing

    def record_range(self, opening_range: OpeningRange) -> OpeningRange:
        """Store a finalized range; the first write for a slot wins."""
        key = (opening_range.symbol, opening_range.timeframe)
        stored = self._ranges.setdefault(key, opening_range)
        if stored is opening_range:
            # Builder no longer needed once the range is frozen
            self._builders.pop(key, None)
        return stored

    def get_range(self, symbol: str, timeframe: Timeframe) -> Optional[OpeningRange]:
        return self._ranges.get((symbol, timeframe))

    def get_breakout(self, symbol: str, timeframe: Timeframe) -> Optional[ORBBreakout]:
        return self._breakouts.get((symbol, timeframe))

    def put_breakout(self, breakout: ORBBreakout) -> None:
        key = (breakout.symbol, breakout.timeframe)
        existing = self._breakouts.get(key)
        if existing is not None and existing.id != breakout.id:
            raise ValueError(
                f"Breakout slot {breakout.symbol}/{breakout.timeframe.value} already holds {existing.id}"
            )
        self._breakouts[key] = breakout

    def ranges(self) -> list[OpeningRange]:
        return list(self._ranges.values())

    def breakouts(self) -> list[ORBBreakout]:
        return list(self._breakouts.values())

    @property
    def ranges_formed(self) -> int:
        return len(self._ranges)

    @property
    def breakout_count(self) -> int:
        return len(self._breakouts)
