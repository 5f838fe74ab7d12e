"""
Trade parameter synthesis.
"""

from .synthesizer import TradeLevels, TradeSynthesizer, compute_levels, suggest_expiry, suggest_strike

__all__ = ["TradeLevels", "TradeSynthesizer", "compute_levels", "suggest_expiry", "suggest_strike"]
