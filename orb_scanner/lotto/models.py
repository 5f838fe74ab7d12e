"""
Index lotto data models.

These mirror the ``/api/scanner/index-lotto`` response: per-index market
snapshots plus cheap out-of-the-money option plays ranked by setup score.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from ..breakout.models import OptionType
from ..risk.gamma import GammaZone
from .indicators import MacdSignal, PivotPoints, VolumeProfile


class SetupType(str, Enum):
    PIN_BAR = "pin_bar"
    RSI_DIVERGENCE = "rsi_divergence"
    SUPPORT_BOUNCE = "support_bounce"
    RESISTANCE_REJECTION = "resistance_rejection"
    GAMMA_FLIP = "gamma_flip"
    BOLLINGER_SQUEEZE = "bollinger_squeeze"


class LevelType(str, Enum):
    SUPPORT = "support"
    RESISTANCE = "resistance"
    PIVOT = "pivot"


class ConfidenceLabel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class IndexData:
    """Per-index market snapshot with daily technicals."""
    symbol: str
    name: str
    price: float
    change: float
    change_percent: float
    day_low: float
    day_high: float
    pivot_points: PivotPoints
    rsi: float
    macd_signal: MacdSignal
    volume_profile: VolumeProfile

    def to_payload(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "dayRange": {"low": self.day_low, "high": self.day_high},
            "pivotPoints": self.pivot_points.to_payload(),
            "rsi": self.rsi,
            "macdSignal": self.macd_signal.value,
            "volumeProfile": self.volume_profile.value,
        }


@dataclass(frozen=True)
class TechnicalSetup:
    type: SetupType
    timeframe: str
    strength: float
    description: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "timeframe": self.timeframe,
            "strength": self.strength,
            "description": self.description,
        }


@dataclass(frozen=True)
class LottoPlay:
    """A single out-of-the-money option idea."""
    symbol: str
    underlying: str
    underlying_price: float
    strike: float
    expiry: date
    type: OptionType
    current_price: float
    estimated_target: float
    potential_return: float
    setups: tuple[TechnicalSetup, ...]
    overall_score: float
    suggested_entry: float
    stop_loss: float
    target1: float
    target2: float
    risk_reward: str
    key_level: float
    level_type: LevelType
    gamma_exposure: GammaZone
    thesis: str
    confidence: ConfidenceLabel

    def to_payload(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "underlying": self.underlying,
            "underlyingPrice": self.underlying_price,
            "strike": self.strike,
            "expiry": self.expiry.isoformat(),
            "type": self.type.value,
            "currentPrice": self.current_price,
            "estimatedTarget": self.estimated_target,
            "potentialReturn": self.potential_return,
            "setups": [setup.to_payload() for setup in self.setups],
            "overallScore": self.overall_score,
            "suggestedEntry": self.suggested_entry,
            "stopLoss": self.stop_loss,
            "target1": self.target1,
            "target2": self.target2,
            "riskReward": self.risk_reward,
            "keyLevel": self.key_level,
            "levelType": self.level_type.value,
            "gammaExposure": self.gamma_exposure.value,
            "thesis": self.thesis,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class LottoScanResult:
    timestamp: datetime
    index_data: tuple[IndexData, ...] = field(default_factory=tuple)
    lotto_plays: tuple[LottoPlay, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, Any]:
        return {
            "indexData": [item.to_payload() for item in self.index_data],
            "lottoPlays": [play.to_payload() for play in self.lotto_plays],
        }
