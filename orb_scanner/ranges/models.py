"""
Opening range data models.

An opening range is created once per symbol, timeframe and trading day when
its formation window elapses, and is never mutated afterwards.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from ..utils.time import format_market_time


class Timeframe(str, Enum):
    """Opening range window lengths; values are the wire strings."""
    MIN_15 = "15min"
    MIN_30 = "30min"
    MIN_60 = "60min"

    @property
    def minutes(self) -> int:
        return int(self.value.removesuffix("min"))


class RangeState(str, Enum):
    """Opening range builder lifecycle."""
    FORMING = "forming"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class OpeningRange:
    """Finalized opening range for one symbol/timeframe/day."""
    symbol: str
    date: date
    timeframe: Timeframe
    high: float
    low: float
    open: float
    close: float
    volume: float
    formed_at: datetime
    is_valid: bool
    observations: int = 0

    @property
    def key(self) -> str:
        return range_key(self.symbol, self.timeframe, self.date)

    @property
    def range_width(self) -> float:
        return self.high - self.low

    @property
    def range_width_pct(self) -> float:
        if self.open <= 0:
            return 0.0
        return self.range_width / self.open * 100

    def to_payload(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "date": self.date.isoformat(),
            "timeframe": self.timeframe.value,
            "high": self.high,
            "low": self.low,
            "open": self.open,
            "close": self.close,
            "volume": self.volume,
            "rangeWidth": self.range_width,
            "rangeWidthPct": self.range_width_pct,
            "formedAt": format_market_time(self.formed_at),
            "isValid": self.is_valid,
        }


def range_key(symbol: str, timeframe: Timeframe, day: date) -> str:
    return f"{symbol}:{timeframe.value}:{day.isoformat()}"
