"""
Multi-factor confidence scoring.

The composite is a weighted average of the clamped sub-scores with
non-negative weights, so it is deterministic and non-decreasing in every
sub-score.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import structlog

from ..breakout.models import Direction
from ..config.defaults import ScoringParams
from ..data.models import Bar, OptionsFlow
from ..logging.config import get_gating_logger, log_gate_decision
from .subscores import (
    ModelScorer,
    PassthroughModelScorer,
    bars_rvol,
    clamp_score,
    flow_score,
    ml_score,
    pattern_score,
    volume_score,
)

logger = structlog.get_logger(__name__)
gating_logger = get_gating_logger(__name__)


@dataclass(frozen=True)
class ConfidenceWeights:
    volume: float = 2.0
    flow: float = 2.0
    pattern: float = 1.0
    ml: float = 1.0

    @classmethod
    def from_params(cls, params: ScoringParams) -> "ConfidenceWeights":
        return cls(
            volume=params.volume_weight,
            flow=params.flow_weight,
            pattern=params.pattern_weight,
            ml=params.ml_weight,
        )

    def __post_init__(self):
        values = (self.volume, self.flow, self.pattern, self.ml)
        if any(w < 0 for w in values):
            raise ValueError(f"Confidence weights must be non-negative: {values}")
        if sum(values) <= 0:
            raise ValueError("At least one confidence weight must be positive")


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Sub-scores and the composite they produce."""
    volume_score: float
    flow_score: float
    pattern_score: float
    ml_score: float
    confidence: float


def composite_confidence(
    volume: float,
    flow: float,
    pattern: float,
    ml: float,
    weights: ConfidenceWeights = ConfidenceWeights()
) -> float:
    """
    Weighted average of the four sub-scores.

    Inputs outside [0, 100] are clamped first and the result is clamped
    again.
    """
    pairs = (
        (clamp_score(volume), weights.volume),
        (clamp_score(flow), weights.flow),
        (clamp_score(pattern), weights.pattern),
        (clamp_score(ml), weights.ml),
    )
    total_weight = sum(w for _score, w in pairs)
    return clamp_score(sum(score * w for score, w in pairs) / total_weight)


def baseline_confidence(
    volume: float,
    flow: float,
    pattern: float,
    weights: ConfidenceWeights = ConfidenceWeights()
) -> float:
    """Weighted average of the non-model sub-scores, used as the model input."""
    total_weight = weights.volume + weights.flow + weights.pattern
    if total_weight <= 0:
        return 50.0
    return clamp_score(
        (clamp_score(volume) * weights.volume
         + clamp_score(flow) * weights.flow
         + clamp_score(pattern) * weights.pattern) / total_weight
    )


def is_tradeable(confidence: float, threshold: float = 70.0) -> bool:
    """Live recommendation when confidence is strictly above the threshold."""
    return confidence > threshold


class ConfidenceScorer:
    """Computes all sub-scores for a detected breakout and combines them."""

    def __init__(self, params: Optional[ScoringParams] = None,
                 model: Optional[ModelScorer] = None):
        self.params = params or ScoringParams()
        self.weights = ConfidenceWeights.from_params(self.params)
        self.model = model or PassthroughModelScorer()

    def score(
        self,
        symbol: str,
        direction: Direction,
        bars: Sequence[Bar],
        flow: Optional[OptionsFlow] = None
    ) -> ConfidenceBreakdown:
        default = self.params.default_subscore
        volume = volume_score(bars_rvol(bars, self.params.rvol_period), default)
        flow_value = flow_score(direction, flow, default)
        pattern = pattern_score(direction, bars, default)

        baseline = baseline_confidence(volume, flow_value, pattern, self.weights)
        ml = ml_score(self.model, symbol, direction, baseline)

        confidence = composite_confidence(volume, flow_value, pattern, ml, self.weights)

        logger.debug(
            "Confidence scored",
            symbol=symbol,
            direction=direction.value,
            volume_score=volume,
            flow_score=flow_value,
            pattern_score=pattern,
            ml_score=ml,
            confidence=confidence
        )

        return ConfidenceBreakdown(
            volume_score=volume,
            flow_score=flow_value,
            pattern_score=pattern,
            ml_score=ml,
            confidence=confidence,
        )

    def is_tradeable(self, symbol: str, confidence: float) -> bool:
        passed = is_tradeable(confidence, self.params.active_threshold)
        log_gate_decision(
            gating_logger,
            gate_name="confidence_threshold",
            passed=passed,
            symbol=symbol,
            reason=f"confidence {confidence:.1f} vs threshold {self.params.active_threshold:.1f}"
        )
        return passed
