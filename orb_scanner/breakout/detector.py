"""
Breakout detection and classification against a finalized opening range.
"""

from typing import Optional

import structlog

from ..data.models import PriceTick
from ..logging.config import get_gating_logger, log_gate_decision
from ..ranges.models import OpeningRange
from ..session.clock import SessionPhase, is_before_phase
from .models import Bias, BreakoutDetection, BreakoutType, Direction, PendingSetup

logger = structlog.get_logger(__name__)
gating_logger = get_gating_logger(__name__)

# Position inside the range that tilts a pending setup's bias
BULLISH_POSITION = 0.7
BEARISH_POSITION = 0.3


def breakout_buffer(opening_range: OpeningRange, buffer_pct: float) -> float:
    """Minimum breach beyond a boundary, as a percent of range width."""
    return opening_range.range_width * buffer_pct / 100


def detect_breakout(
    opening_range: OpeningRange,
    tick: PriceTick,
    buffer_pct: float = 0.05,
    confirm_close: bool = True
) -> Optional[BreakoutDetection]:
    """
    Check one tick against a valid range.

    With ``confirm_close`` the tick close must be strictly beyond a
    boundary by at least the buffer. Otherwise the tick extremes are used,
    so a gap bar can breach both sides; the larger breach wins and an equal
    breach goes to the side the close is on.

    Args:
        opening_range: Finalized range
        tick: Latest price observation
        buffer_pct: Buffer as a percent of range width
        confirm_close: Use the close rather than bar extremes

    Returns:
        BreakoutDetection or None if no side qualifies
    """
    if not opening_range.is_valid:
        return None

    buffer = breakout_buffer(opening_range, buffer_pct)

    if confirm_close:
        long_price = short_price = tick.close
    else:
        long_price, short_price = tick.high, tick.low

    long_breach = long_price - opening_range.high
    short_breach = opening_range.low - short_price

    long_ok = _passes_buffer(opening_range, Direction.LONG, long_breach, buffer)
    short_ok = _passes_buffer(opening_range, Direction.SHORT, short_breach, buffer)

    if long_ok and short_ok:
        direction = _resolve_gap(opening_range, tick, long_breach, short_breach)
        logger.info(
            "Both range boundaries breached in one tick",
            symbol=opening_range.symbol,
            timeframe=opening_range.timeframe.value,
            long_breach=long_breach,
            short_breach=short_breach,
            chosen=direction.value
        )
    elif long_ok:
        direction = Direction.LONG
    elif short_ok:
        direction = Direction.SHORT
    else:
        return None

    if direction is Direction.LONG:
        trigger, boundary, breach = long_price, opening_range.high, long_breach
    else:
        trigger, boundary, breach = short_price, opening_range.low, short_breach

    width = opening_range.range_width
    strength = min(breach / width * 100, 100.0) if width > 0 else 100.0

    return BreakoutDetection(
        direction=direction,
        trigger_price=trigger,
        boundary=boundary,
        breach=breach,
        strength=strength,
        ts=tick.ts,
    )


def _passes_buffer(opening_range: OpeningRange, direction: Direction,
                   breach: float, buffer: float) -> bool:
    if breach <= 0:
        return False
    passed = breach >= buffer
    log_gate_decision(
        gating_logger,
        gate_name="breakout_buffer",
        passed=passed,
        symbol=opening_range.symbol,
        reason=f"{direction.value} breach {breach:.4f} vs buffer {buffer:.4f}",
        context={"timeframe": opening_range.timeframe.value}
    )
    return passed


def _resolve_gap(opening_range: OpeningRange, tick: PriceTick,
                 long_breach: float, short_breach: float) -> Direction:
    if long_breach > short_breach:
        return Direction.LONG
    if short_breach > long_breach:
        return Direction.SHORT
    midpoint = (opening_range.high + opening_range.low) / 2
    return Direction.LONG if tick.close >= midpoint else Direction.SHORT


def classify_breakout_type(
    phase: SessionPhase,
    cutoff: SessionPhase = SessionPhase.AFTERNOON,
    daily_expiries: bool = True
) -> BreakoutType:
    """0DTE before the cutoff phase on instruments with daily expiries, else SWING."""
    if daily_expiries and is_before_phase(phase, cutoff):
        return BreakoutType.ZERO_DTE
    return BreakoutType.SWING


def pending_setup(opening_range: OpeningRange, current_price: float) -> PendingSetup:
    """Watch item for a valid range that has not broken out."""
    if opening_range.range_width > 0:
        position = (current_price - opening_range.low) / opening_range.range_width
    else:
        position = 0.5

    if position > BULLISH_POSITION:
        bias = Bias.BULLISH
    elif position < BEARISH_POSITION:
        bias = Bias.BEARISH
    else:
        bias = Bias.NEUTRAL

    return _setup(opening_range, current_price, bias)


def watch_item(opening_range: OpeningRange, current_price: float,
               direction: Direction) -> PendingSetup:
    """Watch item for a breakout that did not clear the confidence threshold."""
    bias = Bias.BULLISH if direction is Direction.LONG else Bias.BEARISH
    return _setup(opening_range, current_price, bias)


def _setup(opening_range: OpeningRange, current_price: float, bias: Bias) -> PendingSetup:
    return PendingSetup(
        symbol=opening_range.symbol,
        timeframe=opening_range.timeframe,
        range_high=opening_range.high,
        range_low=opening_range.low,
        distance_to_high=(opening_range.high - current_price) / current_price * 100,
        distance_to_low=(current_price - opening_range.low) / current_price * 100,
        bias=bias,
    )
