"""Tests for the Yahoo chart provider."""

import asyncio

import httpx
import pytest

from orb_scanner.errors import SymbolFetchError
from orb_scanner.providers.yahoo import YahooChartProvider, chart_range_for_days, yahoo_symbol

OPEN_EPOCH = 1704292200
DAY = 86400


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url="https://query1.finance.yahoo.com",
        transport=httpx.MockTransport(handler),
    )


class TestSymbolMapping:
    """Test suite for symbol and range mapping."""

    def test_yahoo_symbols(self) -> None:
        assert yahoo_symbol("SPX") == "^GSPC"
        assert yahoo_symbol("VIX") == "^VIX"
        assert yahoo_symbol("spy") == "SPY"

    @pytest.mark.parametrize("days,expected", [
        (1, "5d"), (5, "5d"), (30, "1mo"), (60, "3mo"), (120, "6mo"), (365, "1y"),
    ])
    def test_chart_range(self, days, expected) -> None:
        assert chart_range_for_days(days) == expected


class TestYahooChartProvider:
    """Test suite for provider requests."""

    def test_fetch_snapshot(self, chart_payload) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=chart_payload(rows=[
                (OPEN_EPOCH, 100.0, 101.0, 99.5, 100.5, 1200),
                (OPEN_EPOCH + 300, 100.5, 101.5, 100.0, 101.0, 900),
            ]))

        async def run():
            async with make_client(handler) as client:
                provider = YahooChartProvider(client=client)
                return await provider.fetch_snapshot("SPX")

        snapshot = asyncio.run(run())

        assert snapshot.symbol == "SPX"
        assert snapshot.quote.price == 101.0
        assert len(snapshot.bars) == 2
        assert snapshot.flow is None
        assert requests[0].url.path == "/v8/finance/chart/^GSPC"
        assert requests[0].url.params["interval"] == "5m"
        assert requests[0].url.params["range"] == "1d"

    def test_fetch_vix(self, chart_payload) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=chart_payload(price=14.2))

        async def run():
            async with make_client(handler) as client:
                return await YahooChartProvider(client=client).fetch_vix()

        assert asyncio.run(run()) == 14.2
        assert requests[0].url.path == "/v8/finance/chart/^VIX"

    def test_fetch_daily_bars(self, chart_payload) -> None:
        requests = []
        rows = [(OPEN_EPOCH - i * DAY, 100.0, 101.0, 99.0, 100.0, 1000) for i in range(70, 0, -1)]

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=chart_payload(rows=rows))

        async def run():
            async with make_client(handler) as client:
                return await YahooChartProvider(client=client).fetch_daily_bars("QQQ", 60)

        bars = asyncio.run(run())

        assert len(bars) == 60
        assert requests[0].url.params["interval"] == "1d"
        assert requests[0].url.params["range"] == "3mo"

    def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        async def run():
            async with make_client(handler) as client:
                return await YahooChartProvider(client=client).fetch_snapshot("SPY")

        with pytest.raises(SymbolFetchError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.symbol == "SPY"
        assert not exc_info.value.timed_out

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async def run():
            async with make_client(handler) as client:
                return await YahooChartProvider(client=client).fetch_snapshot("SPY")

        with pytest.raises(SymbolFetchError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.timed_out

    def test_injected_client_stays_open(self, chart_payload) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=chart_payload())

        async def run():
            client = make_client(handler)
            async with YahooChartProvider(client=client) as provider:
                quote = await provider.fetch_quote("IWM")
            closed = client.is_closed
            await client.aclose()
            return quote, closed

        quote, closed = asyncio.run(run())
        assert quote.symbol == "IWM"
        assert not closed
