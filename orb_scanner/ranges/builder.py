"""
Opening range builder state machine.

Forming -> Valid | Invalid, per (symbol, timeframe, trading day). While
forming, the builder accumulates observations whose start lies inside
``[9:30, 9:30 + timeframe)`` Eastern. At the window end it is finalized
with whatever arrived; an empty window yields a permanently invalid range.
"""

from datetime import date, datetime, timedelta
from typing import Optional

import structlog

from ..data.models import Bar
from ..logging.config import get_state_logger, log_state_transition
from ..session.clock import MARKET_OPEN
from ..utils.time import eastern_instant, ensure_utc
from .models import OpeningRange, RangeState, Timeframe, range_key

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)


class OpeningRangeBuilder:
    """Accumulates observations for one opening range window."""

    def __init__(
        self,
        symbol: str,
        day: date,
        timeframe: Timeframe,
        min_range_pct: float = 0.0,
        tz=None
    ):
        self.symbol = symbol
        self.day = day
        self.timeframe = timeframe
        self.min_range_pct = min_range_pct

        self.window_start = eastern_instant(day, MARKET_OPEN, tz)
        self.window_end = self.window_start + timedelta(minutes=timeframe.minutes)

        self.state = RangeState.FORMING
        self.result: Optional[OpeningRange] = None
        # Keyed by bar start so the same bar observed twice counts once
        self._bars: dict[datetime, Bar] = {}

    @property
    def key(self) -> str:
        return range_key(self.symbol, self.timeframe, self.day)

    def in_window(self, ts: datetime) -> bool:
        return self.window_start <= ensure_utc(ts) < self.window_end

    def observe(self, bar: Bar) -> bool:
        """
        Record a bar or trade print.

        Returns:
            True if the observation was inside the window and the range is
            still forming
        """
        if self.state is not RangeState.FORMING:
            return False
        if not self.in_window(bar.ts):
            return False
        self._bars[ensure_utc(bar.ts)] = bar
        return True

    def observe_trade(self, ts: datetime, price: float, volume: float = 0.0) -> bool:
        return self.observe(Bar.from_trade(ts, price, volume))

    def observe_many(self, bars) -> int:
        return sum(1 for bar in bars if self.observe(bar))

    def advance(self, now: datetime) -> Optional[OpeningRange]:
        """Finalize if the window has elapsed; returns the range once final."""
        if self.state is RangeState.FORMING and ensure_utc(now) >= self.window_end:
            return self.finalize()
        return self.result

    def finalize(self) -> OpeningRange:
        """Freeze the range with whatever observations arrived."""
        if self.result is not None:
            return self.result

        bars = [self._bars[ts] for ts in sorted(self._bars)]

        if not bars:
            self.result = OpeningRange(
                symbol=self.symbol,
                date=self.day,
                timeframe=self.timeframe,
                high=0.0,
                low=0.0,
                open=0.0,
                close=0.0,
                volume=0.0,
                formed_at=self.window_end,
                is_valid=False,
                observations=0,
            )
            self._transition(RangeState.INVALID, "window_elapsed_without_data")
            logger.warning(
                "Opening range window elapsed with no observations",
                symbol=self.symbol,
                timeframe=self.timeframe.value,
                date=self.day.isoformat()
            )
            return self.result

        high = max(bar.high for bar in bars)
        low = min(bar.low for bar in bars)
        opening = bars[0].open
        width_pct = (high - low) / opening * 100 if opening > 0 else 0.0
        is_valid = width_pct >= self.min_range_pct

        self.result = OpeningRange(
            symbol=self.symbol,
            date=self.day,
            timeframe=self.timeframe,
            high=high,
            low=low,
            open=opening,
            close=bars[-1].close,
            volume=sum(bar.volume for bar in bars),
            formed_at=self.window_end,
            is_valid=is_valid,
            observations=len(bars),
        )

        if is_valid:
            self._transition(RangeState.VALID, "window_elapsed", {
                "high": high, "low": low, "width_pct": round(width_pct, 4)
            })
        else:
            self._transition(RangeState.INVALID, "range_too_narrow", {
                "width_pct": round(width_pct, 4), "min_range_pct": self.min_range_pct
            })

        return self.result

    def _transition(self, to_state: RangeState, trigger: str, context: Optional[dict] = None) -> None:
        log_state_transition(
            state_logger,
            range_key=self.key,
            from_state=self.state.value,
            to_state=to_state.value,
            trigger=trigger,
            context=context
        )
        self.state = to_state
