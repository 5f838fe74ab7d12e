"""
Market data providers.
"""

from .base import MarketDataProvider
from .static import StaticMarketDataProvider
from .yahoo import YahooChartProvider

__all__ = ["MarketDataProvider", "StaticMarketDataProvider", "YahooChartProvider"]
