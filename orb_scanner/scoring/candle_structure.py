"""Single-bar shape checks used by the pattern sub-score"""

from dataclasses import dataclass
from typing import Optional

from ..data.models import Bar


@dataclass(frozen=True)
class BarShape:
    """Body and shadows of a bar as fractions of its high-low range"""
    body_pct: float
    upper_pct: float
    lower_pct: float

    @classmethod
    def of(cls, bar: Bar) -> "BarShape":
        span = bar.high - bar.low
        if span <= 0:
            return cls(0.0, 0.0, 0.0)
        return cls(
            body_pct=abs(bar.close - bar.open) / span,
            upper_pct=(bar.high - max(bar.open, bar.close)) / span,
            lower_pct=(min(bar.open, bar.close) - bar.low) / span,
        )


def detect_pinbar(bar: Bar, body_threshold: float = 0.4,
                  shadow_threshold: float = 0.66, tail_threshold: float = 0.1) -> Optional[str]:
    """
    Detect pinbar patterns

    Returns:
        'bullish' for a long lower shadow, 'bearish' for a long upper shadow,
        None otherwise
    """
    shape = BarShape.of(bar)
    if shape.body_pct > body_threshold:
        return None

    if shape.upper_pct >= shadow_threshold and shape.lower_pct <= tail_threshold:
        return 'bearish'
    if shape.lower_pct >= shadow_threshold and shape.upper_pct <= tail_threshold:
        return 'bullish'
    return None


def is_strong_candle(bar: Bar, min_body_pct: float = 0.6) -> bool:
    return BarShape.of(bar).body_pct >= min_body_pct


def closes_near_extreme(bar: Bar, bullish: bool, max_distance_pct: float = 0.2) -> bool:
    """Close within the top (bullish) or bottom (bearish) slice of the bar range"""
    span = bar.high - bar.low
    if span <= 0:
        return False
    if bullish:
        return (bar.high - bar.close) / span <= max_distance_pct
    return (bar.close - bar.low) / span <= max_distance_pct
