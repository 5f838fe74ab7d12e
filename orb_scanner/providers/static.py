"""In-memory provider for replays and tests."""

import asyncio
from typing import Optional

from ..data.models import Bar, SymbolSnapshot
from ..errors import MissingDataError, SymbolFetchError
from .base import MarketDataProvider


class StaticMarketDataProvider(MarketDataProvider):
    """
    Serves preloaded snapshots.

    ``failures`` maps a symbol to the exception its fetch raises and
    ``delays`` maps a symbol to seconds to wait before answering, which is
    how slow symbols are simulated.
    """

    def __init__(
        self,
        snapshots: Optional[dict[str, SymbolSnapshot]] = None,
        vix: Optional[float] = None,
        daily_bars: Optional[dict[str, tuple[Bar, ...]]] = None,
        failures: Optional[dict[str, Exception]] = None,
        delays: Optional[dict[str, float]] = None
    ):
        self.snapshots = dict(snapshots or {})
        self.vix = vix
        self.daily_bars = dict(daily_bars or {})
        self.failures = dict(failures or {})
        self.delays = dict(delays or {})
        self.calls: list[tuple[str, str]] = []

    def set_snapshot(self, snapshot: SymbolSnapshot) -> None:
        self.snapshots[snapshot.symbol] = snapshot

    async def _gate(self, kind: str, symbol: str) -> None:
        self.calls.append((kind, symbol))
        delay = self.delays.get(symbol)
        if delay:
            await asyncio.sleep(delay)
        failure = self.failures.get(symbol)
        if failure is not None:
            raise failure

    async def fetch_snapshot(self, symbol: str) -> SymbolSnapshot:
        await self._gate("snapshot", symbol)
        snapshot = self.snapshots.get(symbol)
        if snapshot is None:
            raise SymbolFetchError(f"No snapshot loaded for {symbol}", symbol=symbol)
        return snapshot

    async def fetch_vix(self) -> float:
        await self._gate("vix", "VIX")
        if self.vix is None:
            raise SymbolFetchError("No VIX level loaded", symbol="VIX")
        return self.vix

    async def fetch_daily_bars(self, symbol: str, days: int) -> tuple[Bar, ...]:
        await self._gate("daily_bars", symbol)
        bars = self.daily_bars.get(symbol)
        if not bars:
            raise MissingDataError(f"No daily bars loaded for {symbol}", data_type="daily_bars",
                                   context={"symbol": symbol})
        return tuple(bars[-days:])
