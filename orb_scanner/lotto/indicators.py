"""Daily technical indicators for the index lotto scan"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..data.models import Bar


class MacdSignal(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class VolumeProfile(str, Enum):
    ABOVE_AVG = "above_avg"
    BELOW_AVG = "below_avg"
    AVERAGE = "average"


@dataclass(frozen=True)
class MacdResult:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class PivotPoints:
    """Classic floor pivots from the prior session"""
    pivot: float
    r1: float
    r2: float
    s1: float
    s2: float

    def scaled(self, factor: float) -> "PivotPoints":
        return PivotPoints(
            pivot=round(self.pivot * factor, 2),
            r1=round(self.r1 * factor, 2),
            r2=round(self.r2 * factor, 2),
            s1=round(self.s1 * factor, 2),
            s2=round(self.s2 * factor, 2),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"s1": self.s1, "s2": self.s2, "pivot": self.pivot, "r1": self.r1, "r2": self.r2}


def calculate_rsi(closes: Sequence[float], period: int = 14) -> float:
    """
    Relative Strength Index with Wilder smoothing

    Args:
        closes: Closing prices, most recent last
        period: Lookback period (default 14)

    Returns:
        RSI in [0, 100]; 50 when there is not enough history
    """
    if len(closes) < period + 1:
        return 50.0

    gains = []
    losses = []
    for prev, curr in zip(closes, closes[1:]):
        change = curr - prev
        gains.append(max(change, 0.0))
        losses.append(max(-change, 0.0))

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return round(100 - 100 / (1 + rs), 2)


def _ema(values: Sequence[float], period: int) -> list[float]:
    """EMA seeded with the SMA of the first ``period`` values"""
    multiplier = 2 / (period + 1)
    ema = [sum(values[:period]) / period]
    for value in values[period:]:
        ema.append((value - ema[-1]) * multiplier + ema[-1])
    return ema


def calculate_macd(closes: Sequence[float], fast_period: int = 12,
                   slow_period: int = 26, signal_period: int = 9) -> MacdResult:
    """
    MACD line, signal line and histogram for the latest close

    Returns zeros when there are fewer than slow + signal closes.
    """
    if len(closes) < slow_period + signal_period:
        return MacdResult(0.0, 0.0, 0.0)

    fast = _ema(closes, fast_period)
    slow = _ema(closes, slow_period)

    # Align the fast EMA with the later-starting slow EMA
    offset = slow_period - fast_period
    macd_line = [fast[i + offset] - slow[i] for i in range(len(slow))]
    signal_line = _ema(macd_line, signal_period)

    macd = macd_line[-1]
    signal = signal_line[-1]
    return MacdResult(
        macd=round(macd, 4),
        signal=round(signal, 4),
        histogram=round(macd - signal, 4),
    )


def macd_signal(result: MacdResult) -> MacdSignal:
    if result.histogram > 0 and result.macd > result.signal:
        return MacdSignal.BULLISH
    if result.histogram < 0 and result.macd < result.signal:
        return MacdSignal.BEARISH
    return MacdSignal.NEUTRAL


def calculate_pivots(high: float, low: float, close: float) -> PivotPoints:
    pivot = (high + low + close) / 3
    return PivotPoints(
        pivot=round(pivot, 2),
        r1=round(2 * pivot - low, 2),
        r2=round(pivot + (high - low), 2),
        s1=round(2 * pivot - high, 2),
        s2=round(pivot - (high - low), 2),
    )


def volume_profile(bars: Sequence[Bar], period: int = 20,
                   above: float = 1.2, below: float = 0.8) -> VolumeProfile:
    """Latest daily volume against the trailing average"""
    history = [bar.volume for bar in bars[:-1]][-period:]
    if not bars or not history:
        return VolumeProfile.AVERAGE

    average = sum(history) / len(history)
    if average <= 0:
        return VolumeProfile.AVERAGE

    ratio = bars[-1].volume / average
    if ratio > above:
        return VolumeProfile.ABOVE_AVG
    if ratio < below:
        return VolumeProfile.BELOW_AVG
    return VolumeProfile.AVERAGE
