"""
Risk context: VIX sizing tiers and gamma positioning.
"""

from .gamma import GammaPosition, GammaRegime, GammaZone, classify_gamma, gamma_zone
from .sizing import PositionSizing, RiskLevel, position_sizing

__all__ = [
    "GammaPosition",
    "GammaRegime",
    "GammaZone",
    "PositionSizing",
    "RiskLevel",
    "classify_gamma",
    "gamma_zone",
    "position_sizing",
]
