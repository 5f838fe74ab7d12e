"""Gamma flip positioning."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class GammaRegime(str, Enum):
    MEAN_REVERSION = "mean_reversion"   # Above the flip, dealers dampen moves
    MOMENTUM = "momentum"               # Below the flip, dealers amplify moves


class GammaZone(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class GammaPosition:
    """Price location relative to the gamma flip level."""
    above: bool
    distance: float
    pct_distance: float
    regime: GammaRegime

    @property
    def zone(self) -> GammaZone:
        return GammaZone.POSITIVE if self.above else GammaZone.NEGATIVE

    def to_payload(self) -> dict[str, Any]:
        return {
            "above": self.above,
            "distance": self.distance,
            "pctDistance": self.pct_distance,
            "regime": self.regime.value,
        }


def _usable(value: Optional[float]) -> bool:
    return (
        value is not None
        and isinstance(value, (int, float))
        and math.isfinite(value)
        and value > 0
    )


def classify_gamma(price: Optional[float], gamma_flip: Optional[float]) -> Optional[GammaPosition]:
    """
    Compare price to the gamma flip.

    Returns None when either input is missing or non-positive; callers
    treat that as unavailable rather than guessing a regime.
    """
    if not _usable(price) or not _usable(gamma_flip):
        return None

    distance = abs(price - gamma_flip)
    # At the flip counts as above
    above = price >= gamma_flip
    return GammaPosition(
        above=above,
        distance=distance,
        pct_distance=distance / gamma_flip * 100,
        regime=GammaRegime.MEAN_REVERSION if above else GammaRegime.MOMENTUM,
    )


def gamma_zone(position: Optional[GammaPosition]) -> GammaZone:
    """Zone label for a breakout; neutral when positioning is unavailable."""
    if position is None:
        return GammaZone.NEUTRAL
    return position.zone
