"""Yahoo Finance chart endpoint provider."""

from typing import Any, Optional

import httpx
import structlog

from ..data.models import Bar, SymbolSnapshot
from ..data.parsers import ChartData, parse_chart_payload
from ..errors import MissingDataError, SymbolFetchError
from .base import MarketDataProvider

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://query1.finance.yahoo.com"
DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}

# Scanner symbol -> Yahoo ticker
YAHOO_SYMBOLS = {
    "SPX": "^GSPC",
    "VIX": "^VIX",
    "NDX": "^NDX",
    "RUT": "^RUT",
}


def yahoo_symbol(symbol: str) -> str:
    return YAHOO_SYMBOLS.get(symbol.upper(), symbol.upper())


def chart_range_for_days(days: int) -> str:
    """Smallest Yahoo range token covering ``days`` calendar days."""
    if days <= 5:
        return "5d"
    if days <= 31:
        return "1mo"
    if days <= 93:
        return "3mo"
    if days <= 186:
        return "6mo"
    return "1y"


class YahooChartProvider(MarketDataProvider):
    """Fetches quotes and bars from ``/v8/finance/chart``."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        intraday_interval: str = "5m"
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=DEFAULT_HEADERS,
            timeout=timeout,
        )
        self.intraday_interval = intraday_interval

    async def fetch_snapshot(self, symbol: str) -> SymbolSnapshot:
        chart = await self._fetch_chart(symbol, interval=self.intraday_interval, range_="1d")
        return SymbolSnapshot(symbol=symbol, quote=chart.quote, bars=chart.bars)

    async def fetch_vix(self) -> float:
        chart = await self._fetch_chart("VIX", interval="1d", range_="5d")
        return chart.quote.price

    async def fetch_daily_bars(self, symbol: str, days: int) -> tuple[Bar, ...]:
        chart = await self._fetch_chart(symbol, interval="1d", range_=chart_range_for_days(days))
        if not chart.bars:
            raise MissingDataError(f"No daily bars for {symbol}", data_type="daily_bars",
                                   context={"symbol": symbol})
        return chart.bars[-days:]

    async def _fetch_chart(self, symbol: str, interval: str, range_: str) -> ChartData:
        ticker = yahoo_symbol(symbol)
        params: dict[str, Any] = {"interval": interval, "range": range_}

        try:
            response = await self.client.get(f"/v8/finance/chart/{ticker}", params=params)
        except httpx.TimeoutException as e:
            raise SymbolFetchError(f"Timed out fetching {symbol}: {e}", symbol=symbol, timed_out=True)
        except httpx.HTTPError as e:
            raise SymbolFetchError(f"Transport error fetching {symbol}: {e}", symbol=symbol)

        if response.status_code != 200:
            logger.warning(
                "Chart request failed",
                symbol=symbol,
                ticker=ticker,
                status_code=response.status_code
            )
            raise SymbolFetchError(
                f"Chart request for {symbol} returned HTTP {response.status_code}",
                symbol=symbol
            )

        return parse_chart_payload(response.content, symbol)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
