"""
Breakout detection and breakout/pending setup models.
"""

from .detector import classify_breakout_type, detect_breakout, pending_setup, watch_item
from .models import (
    Bias,
    BreakoutDetection,
    BreakoutType,
    Direction,
    OptionType,
    ORBBreakout,
    PendingSetup,
)

__all__ = [
    "Bias",
    "BreakoutDetection",
    "BreakoutType",
    "Direction",
    "OptionType",
    "ORBBreakout",
    "PendingSetup",
    "classify_breakout_type",
    "detect_breakout",
    "pending_setup",
    "watch_item",
]
