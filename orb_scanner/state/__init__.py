"""
Per-trading-day scanner state.
"""

from .daily import DailyRegistry

__all__ = ["DailyRegistry"]
