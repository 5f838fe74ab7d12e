"""
Breakout data models.

Breakout records are immutable; a re-detection produces an updated copy
with fresh ``current_price`` and scores while the trade levels stay fixed.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from ..ranges.models import Timeframe
from ..risk.gamma import GammaZone
from ..session.clock import SessionPhase
from ..utils.time import format_market_time


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Direction.LONG else -1


class BreakoutType(str, Enum):
    ZERO_DTE = "0DTE"
    SWING = "SWING"


class OptionType(str, Enum):
    CALL = "call"
    PUT = "put"

    @classmethod
    def for_direction(cls, direction: Direction) -> "OptionType":
        return cls.CALL if direction is Direction.LONG else cls.PUT


class Bias(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class BreakoutDetection:
    """Raw result of checking one tick against a range."""
    direction: Direction
    trigger_price: float        # Price that confirmed the breach
    boundary: float             # Range side that was broken
    breach: float               # Distance beyond the boundary
    strength: float             # Breach as % of range width, capped at 100
    ts: datetime


@dataclass(frozen=True)
class ORBBreakout:
    """Opening range breakout with trade parameters and scores."""
    id: str
    symbol: str
    direction: Direction
    breakout_type: BreakoutType
    timeframe: Timeframe

    breakout_price: float
    current_price: float
    range_high: float
    range_low: float
    range_width: float

    entry: float
    stop: float
    target1: float
    target2: float
    target3: Optional[float]
    risk_reward: float

    suggested_strike: float
    suggested_expiry: date
    option_type: OptionType

    confidence: float
    volume_score: float
    flow_score: float
    pattern_score: float
    ml_score: float

    vix: float
    session_phase: SessionPhase
    gamma_zone: GammaZone

    signals: tuple[str, ...]
    thesis: str
    timestamp: datetime
    strength: float = 0.0

    def with_market_update(self, **changes: Any) -> "ORBBreakout":
        """Copy with refreshed price, scores and context; levels are kept."""
        frozen_fields = {
            "id", "symbol", "direction", "breakout_type", "timeframe", "breakout_price",
            "range_high", "range_low", "range_width", "entry", "stop", "target1",
            "target2", "target3", "risk_reward", "suggested_strike", "suggested_expiry",
            "option_type", "timestamp",
        }
        illegal = frozen_fields.intersection(changes)
        if illegal:
            raise ValueError(f"Breakout levels are immutable: {sorted(illegal)}")
        return replace(self, **changes)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "direction": self.direction.value,
            "breakoutType": self.breakout_type.value,
            "timeframe": self.timeframe.value,
            "breakoutPrice": self.breakout_price,
            "currentPrice": self.current_price,
            "rangeHigh": self.range_high,
            "rangeLow": self.range_low,
            "rangeWidth": self.range_width,
            "entry": self.entry,
            "stop": self.stop,
            "target1": self.target1,
            "target2": self.target2,
            "target3": self.target3,
            "riskReward": self.risk_reward,
            "suggestedStrike": self.suggested_strike,
            "suggestedExpiry": self.suggested_expiry.isoformat(),
            "optionType": self.option_type.value,
            "confidence": self.confidence,
            "volumeScore": self.volume_score,
            "flowScore": self.flow_score,
            "patternScore": self.pattern_score,
            "mlScore": self.ml_score,
            "vix": self.vix,
            "sessionPhase": self.session_phase.value,
            "gammaZone": self.gamma_zone.value,
            "signals": list(self.signals),
            "thesis": self.thesis,
            "timestamp": format_market_time(self.timestamp),
        }


@dataclass(frozen=True)
class PendingSetup:
    """Valid range awaiting a breakout, or a breakout below the confidence bar."""
    symbol: str
    timeframe: Timeframe
    range_high: float
    range_low: float
    distance_to_high: float     # % of current price
    distance_to_low: float      # % of current price
    bias: Bias

    def to_payload(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe.value,
            "rangeHigh": self.range_high,
            "rangeLow": self.range_low,
            "distanceToHigh": self.distance_to_high,
            "distanceToLow": self.distance_to_low,
            "bias": self.bias.value,
        }


def breakout_id(symbol: str, timeframe: Timeframe, day: date, direction: Direction) -> str:
    return f"orb_{symbol}_{timeframe.value}_{day.isoformat()}_{direction.value}"
