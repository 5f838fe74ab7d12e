"""
Session clock and phase classification.
"""

from .clock import (
    Clock,
    Countdown,
    FixedClock,
    ManualClock,
    SessionPhase,
    SystemClock,
    classify_phase,
    is_market_open,
    time_to_next_phase,
)

__all__ = [
    "Clock",
    "Countdown",
    "FixedClock",
    "ManualClock",
    "SessionPhase",
    "SystemClock",
    "classify_phase",
    "is_market_open",
    "time_to_next_phase",
]
