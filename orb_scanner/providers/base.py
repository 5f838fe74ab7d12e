"""Market data collaborator interface."""

from abc import ABC, abstractmethod

from ..data.models import Bar, Quote, SymbolSnapshot


class MarketDataProvider(ABC):
    """
    Async source of quotes, intraday bars and volatility.

    Implementations raise ``SymbolFetchError`` for transport failures and
    ``DataQualityError`` subclasses for unusable payloads; the orchestrator
    absorbs both at the symbol boundary.
    """

    @abstractmethod
    async def fetch_snapshot(self, symbol: str) -> SymbolSnapshot:
        """Quote plus today's intraday bars, oldest first."""

    @abstractmethod
    async def fetch_vix(self) -> float:
        """Latest VIX level."""

    @abstractmethod
    async def fetch_daily_bars(self, symbol: str, days: int) -> tuple[Bar, ...]:
        """Roughly ``days`` daily bars, oldest first; the last may be today's."""

    async def fetch_quote(self, symbol: str) -> Quote:
        snapshot = await self.fetch_snapshot(symbol)
        return snapshot.quote

    async def aclose(self) -> None:
        """Release transport resources."""

    async def __aenter__(self) -> "MarketDataProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
