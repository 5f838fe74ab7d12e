"""
Sub-score calculators feeding the composite confidence.

Each calculator returns a value in [0, 100] and falls back to a neutral
default when its input is unavailable.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

from ..breakout.models import Direction
from ..data.models import Bar, OptionsFlow
from .candle_structure import closes_near_extreme, detect_pinbar, is_strong_candle

NEUTRAL_SCORE = 50.0


def clamp_score(value: float) -> float:
    """Clamp to [0, 100]; NaN becomes 0."""
    if value != value:
        return 0.0
    return max(0.0, min(100.0, float(value)))


def calculate_rvol(current_volume: float, volume_history: Sequence[float], period: int = 20) -> Optional[float]:
    """
    Calculate Relative Volume (RVOL)

    RVOL = current_volume / SMA(volume_history)

    Args:
        current_volume: Current bar volume
        volume_history: Historical volume values (excluding current)
        period: Lookback period for average (default 20)

    Returns:
        RVOL value or None if insufficient data
    """
    if len(volume_history) < period:
        return None

    recent_volumes = list(volume_history)[-period:]
    volume_average = sum(recent_volumes) / len(recent_volumes)

    if volume_average <= 0:
        return None

    return current_volume / volume_average


def bars_rvol(bars: Sequence[Bar], period: int = 20) -> Optional[float]:
    """RVOL of the latest bar against the bars before it."""
    if len(bars) < 2:
        return None
    return calculate_rvol(bars[-1].volume, [bar.volume for bar in bars[:-1]], period)


def volume_score(rvol: Optional[float], default: float = NEUTRAL_SCORE) -> float:
    """1.5x volume scores 25, 2x scores 50, 3x and above score 100."""
    if rvol is None:
        return default
    return clamp_score((rvol - 1) * 50)


def flow_score(direction: Direction, flow: Optional[OptionsFlow],
               default: float = NEUTRAL_SCORE) -> float:
    """
    Score options flow agreement with the breakout direction.

    The dominant side's volume ratio moves the score away from 50, upward
    when the dominant side agrees with the breakout and downward otherwise.
    """
    if flow is None:
        return default

    calls, puts = flow.call_volume, flow.put_volume
    if calls <= 0 and puts <= 0:
        return default

    bullish_flow = calls > puts
    if bullish_flow:
        ratio = calls / (puts or 1)
    else:
        ratio = puts / (calls or 1)

    agrees = (direction is Direction.LONG) == bullish_flow
    if agrees:
        return clamp_score(50 + ratio * 10)
    return clamp_score(50 - ratio * 10)


def confirming_patterns(direction: Direction, bars: Sequence[Bar]) -> list[str]:
    """Names of chart patterns on the latest bars that agree with the direction."""
    if not bars:
        return []

    bullish = direction is Direction.LONG
    last = bars[-1]
    found = []

    pinbar = detect_pinbar(last)
    if pinbar == ('bullish' if bullish else 'bearish'):
        found.append("pinbar")

    directional = last.close > last.open if bullish else last.close < last.open
    if directional and is_strong_candle(last):
        found.append("strong_body")

    if directional and closes_near_extreme(last, bullish):
        found.append("close_at_extreme")

    if len(bars) >= 3:
        a, b, c = bars[-3], bars[-2], bars[-1]
        if bullish and a.low < b.low < c.low:
            found.append("higher_lows")
        elif not bullish and a.high > b.high > c.high:
            found.append("lower_highs")

    return found


def pattern_score(direction: Direction, bars: Sequence[Bar],
                  default: float = NEUTRAL_SCORE) -> float:
    """60 plus 10 per confirming pattern, capped at 100; neutral when none."""
    count = len(confirming_patterns(direction, bars))
    if count == 0:
        return default
    return clamp_score(60 + count * 10)


class ModelScorer(ABC):
    """External predictive model producing the ML sub-score."""

    @abstractmethod
    def score(self, symbol: str, direction: Direction, baseline: float) -> Optional[float]:
        """
        Calibrate a baseline confidence.

        Returns None when the model has no opinion, in which case the
        baseline is used unchanged.
        """


class PassthroughModelScorer(ModelScorer):
    """Uncalibrated model: echoes the baseline."""

    def score(self, symbol: str, direction: Direction, baseline: float) -> Optional[float]:
        return baseline


def ml_score(scorer: ModelScorer, symbol: str, direction: Direction, baseline: float) -> float:
    calibrated = scorer.score(symbol, direction, baseline)
    if calibrated is None:
        return clamp_score(baseline)
    return clamp_score(calibrated)
