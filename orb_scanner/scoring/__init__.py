"""
Confidence scoring: sub-score calculators and the weighted composite.
"""

from .confidence import (
    ConfidenceBreakdown,
    ConfidenceScorer,
    ConfidenceWeights,
    composite_confidence,
    is_tradeable,
)
from .subscores import ModelScorer, PassthroughModelScorer

__all__ = [
    "ConfidenceBreakdown",
    "ConfidenceScorer",
    "ConfidenceWeights",
    "ModelScorer",
    "PassthroughModelScorer",
    "composite_confidence",
    "is_tradeable",
]
