"""Pytest configuration and shared fixtures."""

from datetime import date, time, timedelta
from typing import Optional

import pytest

from orb_scanner.data.models import Bar, OptionsFlow, Quote, SymbolSnapshot
from orb_scanner.ranges.models import OpeningRange, Timeframe
from orb_scanner.utils.time import eastern_instant

# Wednesday, a regular session
TRADING_DAY = date(2024, 1, 3)


@pytest.fixture
def trading_day() -> date:
    return TRADING_DAY


@pytest.fixture
def et():
    """Build the UTC instant of an Eastern wall-clock time."""
    def _et(hour: int, minute: int = 0, second: int = 0, day: date = TRADING_DAY):
        return eastern_instant(day, time(hour, minute, second))
    return _et


@pytest.fixture
def make_bar(et):
    """5-minute bar factory keyed by Eastern start time."""
    def _bar(hour: int, minute: int, open_: float, high: float, low: float, close: float,
             volume: float = 1000.0, day: date = TRADING_DAY) -> Bar:
        return Bar(ts=et(hour, minute, day=day), open=open_, high=high, low=low,
                   close=close, volume=volume)
    return _bar


@pytest.fixture
def opening_bars(make_bar) -> tuple[Bar, ...]:
    """First 15 minutes of the session: high 105, low 100."""
    return (
        make_bar(9, 30, 101.0, 103.0, 100.0, 102.0),
        make_bar(9, 35, 102.0, 105.0, 101.0, 104.0),
        make_bar(9, 40, 104.0, 104.5, 102.0, 103.0),
    )


@pytest.fixture
def session_bars(make_bar, opening_bars) -> tuple[Bar, ...]:
    """Opening bars followed by a quiet drift and a strong bullish 9:55 bar."""
    return opening_bars + (
        make_bar(9, 45, 103.0, 104.0, 102.5, 103.5),
        make_bar(9, 50, 103.5, 104.2, 103.0, 103.2),
        make_bar(9, 55, 103.2, 105.6, 103.1, 105.5, volume=3000.0),
    )


@pytest.fixture
def make_range(trading_day):
    def _range(high: float = 105.0, low: float = 100.0, timeframe: Timeframe = Timeframe.MIN_15,
               symbol: str = "SPY", day: date = TRADING_DAY, is_valid: bool = True,
               open_: Optional[float] = None) -> OpeningRange:
        return OpeningRange(
            symbol=symbol,
            date=day,
            timeframe=timeframe,
            high=high,
            low=low,
            open=open_ if open_ is not None else low,
            close=(high + low) / 2,
            volume=3000.0,
            formed_at=eastern_instant(day, time(9, 30)) + timedelta(minutes=timeframe.minutes),
            is_valid=is_valid,
            observations=3,
        )
    return _range


@pytest.fixture
def make_snapshot(et):
    def _snapshot(symbol: str, price: float, bars=(), at=None,
                  flow: Optional[OptionsFlow] = None,
                  gamma_flip: Optional[float] = None) -> SymbolSnapshot:
        quote = Quote(
            symbol=symbol,
            price=price,
            ts=at or et(10, 0),
            previous_close=100.0,
        )
        return SymbolSnapshot(symbol=symbol, quote=quote, bars=tuple(bars),
                              flow=flow, gamma_flip=gamma_flip)
    return _snapshot


@pytest.fixture
def chart_payload():
    """Yahoo chart response factory; rows are (epoch, open, high, low, close, volume)."""
    def _payload(rows=(), price: Optional[float] = 101.0, market_time: Optional[int] = 1704294000,
                 previous_close: Optional[float] = 100.0, error=None) -> dict:
        meta = {
            "regularMarketPrice": price,
            "regularMarketTime": market_time,
            "chartPreviousClose": previous_close,
            "regularMarketDayHigh": 102.0,
            "regularMarketDayLow": 99.0,
        }
        result = {
            "meta": meta,
            "timestamp": [row[0] for row in rows],
            "indicators": {"quote": [{
                "open": [row[1] for row in rows],
                "high": [row[2] for row in rows],
                "low": [row[3] for row in rows],
                "close": [row[4] for row in rows],
                "volume": [row[5] for row in rows],
            }]},
        }
        if error is not None:
            return {"chart": {"result": None, "error": error}}
        return {"chart": {"result": [result], "error": None}}
    return _payload
