"""
Canonical data models for normalized market data.

This module defines immutable data structures that represent clean, validated
market data after parsing from a provider's raw format.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Bar:
    """Normalized OHLCV bar with UTC timestamps."""
    ts: datetime        # UTC bar start
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def from_trade(cls, ts: datetime, price: float, volume: float = 0.0) -> "Bar":
        """Represent a single trade print as a zero-width bar."""
        return cls(ts=ts, open=price, high=price, low=price, close=price, volume=volume)


@dataclass(frozen=True)
class Quote:
    """Latest quote for a symbol."""
    symbol: str
    price: float
    ts: datetime
    previous_close: Optional[float] = None
    day_high: Optional[float] = None
    day_low: Optional[float] = None
    volume: Optional[float] = None

    @property
    def change(self) -> Optional[float]:
        """Absolute change since the previous close."""
        if self.previous_close is None:
            return None
        return self.price - self.previous_close

    @property
    def change_percent(self) -> Optional[float]:
        """Percent change since the previous close."""
        if not self.previous_close:
            return None
        return (self.price - self.previous_close) / self.previous_close * 100


@dataclass(frozen=True)
class OptionsFlow:
    """Aggregate options volume for a symbol."""
    call_volume: float
    put_volume: float


@dataclass(frozen=True)
class PriceTick:
    """
    Latest price observation used for breakout detection.

    ``high``/``low`` are the extremes of the bar the tick belongs to; for a
    bare trade print they equal ``close``.
    """
    ts: datetime
    close: float
    high: float
    low: float


@dataclass(frozen=True)
class SymbolSnapshot:
    """Everything the scan pipeline needs for one symbol in one cycle."""
    symbol: str
    quote: Quote
    bars: tuple[Bar, ...] = field(default_factory=tuple)   # Intraday bars, oldest first
    flow: Optional[OptionsFlow] = None
    gamma_flip: Optional[float] = None

    @property
    def last_bar(self) -> Optional[Bar]:
        return self.bars[-1] if self.bars else None

    def latest_tick(self) -> PriceTick:
        """
        Combine the live quote with the most recent bar.

        The quote price is the close; the extremes cover both the last bar
        and the quote so a breach inside the bar is not lost.
        """
        price = self.quote.price
        bar = self.last_bar
        if bar is None:
            return PriceTick(ts=self.quote.ts, close=price, high=price, low=price)
        return PriceTick(
            ts=max(self.quote.ts, bar.ts),
            close=price,
            high=max(bar.high, price),
            low=min(bar.low, price),
        )
