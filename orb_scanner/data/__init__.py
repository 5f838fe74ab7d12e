"""
Market data models and provider payload parsers.
"""

from .models import Bar, OptionsFlow, PriceTick, Quote, SymbolSnapshot

__all__ = ["Bar", "OptionsFlow", "PriceTick", "Quote", "SymbolSnapshot"]
