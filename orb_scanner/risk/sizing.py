"""VIX based position sizing tiers."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


@dataclass(frozen=True)
class PositionSizing:
    """Size guidance for a VIX reading."""
    size_multiplier: float
    max_contracts: int
    risk_level: RiskLevel
    vix: Optional[float]

    def to_payload(self) -> dict[str, Any]:
        return {
            "sizeMultiplier": self.size_multiplier,
            "maxContracts": self.max_contracts,
            "riskLevel": self.risk_level.value,
            "vix": self.vix,
        }


# (upper bound exclusive, multiplier, max contracts, level); last tier is open-ended
SIZING_TIERS: tuple[tuple[float, float, int, RiskLevel], ...] = (
    (15.0, 1.0, 10, RiskLevel.LOW),
    (20.0, 0.75, 7, RiskLevel.MEDIUM),
    (30.0, 0.5, 5, RiskLevel.HIGH),
    (math.inf, 0.25, 2, RiskLevel.EXTREME),
)


def position_sizing(vix: Optional[float]) -> PositionSizing:
    """
    Map a VIX level to a sizing tier.

    Non-finite or missing input falls into the most conservative tier.
    """
    if vix is None or not isinstance(vix, (int, float)) or not math.isfinite(vix):
        _bound, multiplier, contracts, level = SIZING_TIERS[-1]
        return PositionSizing(multiplier, contracts, level, None)

    for bound, multiplier, contracts, level in SIZING_TIERS:
        if vix < bound:
            return PositionSizing(multiplier, contracts, level, float(vix))

    # Unreachable while the last bound is infinite
    _bound, multiplier, contracts, level = SIZING_TIERS[-1]
    return PositionSizing(multiplier, contracts, level, float(vix))
