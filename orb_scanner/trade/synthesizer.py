"""
Trade parameter synthesis for detected breakouts.

Entry is the breakout trigger price, the stop is the opposite range
boundary and targets are whole multiples of the range width from entry.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

import structlog

from ..breakout.models import (
    BreakoutDetection,
    BreakoutType,
    Direction,
    OptionType,
    ORBBreakout,
    breakout_id,
)
from ..config.defaults import TradeParams
from ..errors import DegenerateRangeError
from ..ranges.models import OpeningRange
from ..risk.gamma import GammaZone
from ..scoring.confidence import ConfidenceBreakdown
from ..session.clock import SessionPhase
from ..utils.time import next_friday

logger = structlog.get_logger(__name__)

SIGNAL_SCORE_LEVEL = 70.0
STRONG_BREAKOUT_LEVEL = 50.0
LOW_VIX_LEVEL = 20.0
ELEVATED_VIX_LEVEL = 25.0


@dataclass(frozen=True)
class TradeLevels:
    entry: float
    stop: float
    target1: float
    target2: float
    target3: Optional[float]
    risk_reward: float


def compute_levels(
    direction: Direction,
    opening_range: OpeningRange,
    entry: float,
    breakout_type: BreakoutType = BreakoutType.ZERO_DTE
) -> TradeLevels:
    """
    Derive stop, targets and reward/risk from an entry price.

    Raises:
        DegenerateRangeError: If entry equals the stop or the range has no
            width, leaving no positive reward/risk
    """
    sign = direction.sign
    width = opening_range.range_width
    stop = opening_range.low if direction is Direction.LONG else opening_range.high

    risk = abs(entry - stop)
    if risk == 0 or width <= 0:
        raise DegenerateRangeError(
            f"Degenerate range for {opening_range.symbol} {opening_range.timeframe.value}: "
            f"entry={entry} stop={stop} width={width}",
            symbol=opening_range.symbol,
            timeframe=opening_range.timeframe.value,
            context={"entry": entry, "stop": stop, "range_width": width}
        )

    target1 = entry + sign * width
    target2 = entry + sign * 2 * width
    target3 = entry + sign * 3 * width if breakout_type is BreakoutType.SWING else None

    return TradeLevels(
        entry=entry,
        stop=stop,
        target1=target1,
        target2=target2,
        target3=target3,
        risk_reward=abs(target1 - entry) / risk,
    )


def suggest_strike(entry: float, direction: Direction, increment: float = 1.0,
                   otm_strikes: int = 1) -> float:
    """Nearest listed strike to entry, shifted out of the money by ``otm_strikes``."""
    nearest = math.floor(entry / increment + 0.5)
    steps = nearest + direction.sign * otm_strikes
    return round(steps * increment, 6)


def suggest_expiry(trading_day: date, breakout_type: BreakoutType) -> date:
    """Same day for 0DTE, otherwise the next weekly (Friday) expiry."""
    if breakout_type is BreakoutType.ZERO_DTE:
        return trading_day
    return next_friday(trading_day)


def build_signals(scores: ConfidenceBreakdown, strength: float, vix: float) -> tuple[str, ...]:
    signals = []
    if scores.volume_score >= SIGNAL_SCORE_LEVEL:
        signals.append(f"High volume ({scores.volume_score:.0f})")
    if scores.flow_score >= SIGNAL_SCORE_LEVEL:
        signals.append(f"Smart money confirms ({scores.flow_score:.0f})")
    if scores.pattern_score >= SIGNAL_SCORE_LEVEL:
        signals.append(f"Clean pattern ({scores.pattern_score:.0f})")
    if strength >= STRONG_BREAKOUT_LEVEL:
        signals.append(f"Strong breakout ({strength:.0f}%)")
    if vix < LOW_VIX_LEVEL:
        signals.append("Low VIX environment")
    if vix > ELEVATED_VIX_LEVEL:
        signals.append("Elevated VIX - reduce size")
    return tuple(signals)


def build_thesis(opening_range: OpeningRange, direction: Direction,
                 signals: tuple[str, ...]) -> str:
    if direction is Direction.LONG:
        move, level = "breakout above", opening_range.high
    else:
        move, level = "breakdown below", opening_range.low

    thesis = (
        f"{opening_range.symbol} {opening_range.timeframe.value} ORB {move} ${level:.2f}. "
        f"Range width: {opening_range.range_width_pct:.2f}%."
    )
    if signals:
        thesis += f" {'. '.join(signals[:2])}."
    return thesis


class TradeSynthesizer:
    """Builds breakout records from a detection, its range and scores."""

    def synthesize(
        self,
        detection: BreakoutDetection,
        opening_range: OpeningRange,
        breakout_type: BreakoutType,
        scores: ConfidenceBreakdown,
        trade_params: TradeParams,
        vix: float,
        session_phase: SessionPhase,
        gamma_zone: GammaZone,
        current_price: float
    ) -> ORBBreakout:
        """
        Create a new breakout record.

        Raises:
            DegenerateRangeError: If the range cannot produce valid levels
        """
        direction = detection.direction
        levels = compute_levels(direction, opening_range, detection.trigger_price, breakout_type)
        signals = build_signals(scores, detection.strength, vix)

        breakout = ORBBreakout(
            id=breakout_id(opening_range.symbol, opening_range.timeframe,
                           opening_range.date, direction),
            symbol=opening_range.symbol,
            direction=direction,
            breakout_type=breakout_type,
            timeframe=opening_range.timeframe,
            breakout_price=detection.boundary,
            current_price=current_price,
            range_high=opening_range.high,
            range_low=opening_range.low,
            range_width=opening_range.range_width,
            entry=levels.entry,
            stop=levels.stop,
            target1=levels.target1,
            target2=levels.target2,
            target3=levels.target3,
            risk_reward=levels.risk_reward,
            suggested_strike=suggest_strike(
                levels.entry, direction, trade_params.strike_increment, trade_params.otm_strikes
            ),
            suggested_expiry=suggest_expiry(opening_range.date, breakout_type),
            option_type=OptionType.for_direction(direction),
            confidence=scores.confidence,
            volume_score=scores.volume_score,
            flow_score=scores.flow_score,
            pattern_score=scores.pattern_score,
            ml_score=scores.ml_score,
            vix=vix,
            session_phase=session_phase,
            gamma_zone=gamma_zone,
            signals=signals,
            thesis=build_thesis(opening_range, direction, signals),
            timestamp=detection.ts,
            strength=detection.strength,
        )

        logger.info(
            "Breakout synthesized",
            breakout_id=breakout.id,
            entry=breakout.entry,
            stop=breakout.stop,
            target1=breakout.target1,
            strike=breakout.suggested_strike,
            expiry=breakout.suggested_expiry.isoformat(),
            confidence=breakout.confidence
        )
        return breakout

    def refresh(
        self,
        breakout: ORBBreakout,
        opening_range: OpeningRange,
        scores: ConfidenceBreakdown,
        strength: float,
        vix: float,
        session_phase: SessionPhase,
        gamma_zone: GammaZone,
        current_price: float
    ) -> ORBBreakout:
        """Update price, scores and context on an existing record."""
        signals = build_signals(scores, strength, vix)
        return breakout.with_market_update(
            current_price=current_price,
            confidence=scores.confidence,
            volume_score=scores.volume_score,
            flow_score=scores.flow_score,
            pattern_score=scores.pattern_score,
            ml_score=scores.ml_score,
            vix=vix,
            session_phase=session_phase,
            gamma_zone=gamma_zone,
            signals=signals,
            thesis=build_thesis(opening_range, breakout.direction, signals),
            strength=strength,
        )
