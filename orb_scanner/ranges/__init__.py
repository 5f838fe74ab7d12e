"""
Opening range formation.
"""

from .builder import OpeningRangeBuilder
from .models import OpeningRange, RangeState, Timeframe

__all__ = ["OpeningRange", "OpeningRangeBuilder", "RangeState", "Timeframe"]
