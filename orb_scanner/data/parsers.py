"""
Yahoo chart payload parsers for converting raw provider formats to normalized objects.

This module handles parsing of ``/v8/finance/chart`` responses into canonical
data structures with proper type conversion and error handling.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

import orjson

from ..errors import MalformedDataError, MissingDataError, TemporalDataError
from ..utils.time import from_epoch_seconds
from .models import Bar, Quote


class ParseError(MalformedDataError):
    """Raised when parsing fails due to invalid data format."""
    pass


class InvalidPriceError(ParseError):
    """Raised when price data is invalid."""
    pass


class OHLCConsistencyError(ParseError):
    """Raised when OHLC prices are inconsistent."""
    pass


@dataclass(frozen=True)
class ChartData:
    """Parsed chart response: latest quote plus bars, oldest first."""
    quote: Quote
    bars: tuple[Bar, ...]


def load_payload(raw: Union[bytes, str, dict[str, Any]]) -> dict[str, Any]:
    """Decode a raw response body with orjson."""
    if isinstance(raw, dict):
        return raw
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ParseError(
            f"Response body is not valid JSON: {e}",
            raw_data=str(raw)[:200],
            expected_format="json"
        )
    if not isinstance(payload, dict):
        raise ParseError("Payload must be a JSON object", expected_format="object")
    return payload


def parse_chart_payload(raw: Union[bytes, str, dict[str, Any]], symbol: str) -> ChartData:
    """
    Parse a Yahoo chart payload into a quote and normalized bars.

    Expected format:
    {
        "chart": {
            "result": [{
                "meta": {"regularMarketPrice": 5012.3, "chartPreviousClose": 4998.1,
                         "regularMarketTime": 1704205800, ...},
                "timestamp": [1704205800, ...],
                "indicators": {"quote": [{"open": [...], "high": [...], "low": [...],
                                          "close": [...], "volume": [...]}]}
            }],
            "error": null
        }
    }

    Rows with a null open or close are skipped; a null volume counts as zero.

    Args:
        raw: Response body or already decoded payload
        symbol: Scanner symbol the payload belongs to

    Returns:
        ChartData with the latest quote and bars

    Raises:
        MissingDataError: If the provider returned an error or no result
        ParseError: If the payload structure is invalid
    """
    payload = load_payload(raw)

    chart = payload.get("chart")
    if not isinstance(chart, dict):
        raise ParseError("Missing 'chart' field in payload", expected_format="chart")

    if chart.get("error"):
        raise MissingDataError(
            f"Provider error for {symbol}: {chart['error']}",
            data_type="chart",
            context={"symbol": symbol}
        )

    results = chart.get("result")
    if not isinstance(results, list) or len(results) == 0 or not isinstance(results[0], dict):
        raise MissingDataError(f"Empty chart result for {symbol}", data_type="chart",
                               context={"symbol": symbol})

    result = results[0]
    bars = _parse_bars(result)
    quote = _parse_quote(result.get("meta") or {}, symbol, bars)

    return ChartData(quote=quote, bars=bars)


def _parse_bars(result: dict[str, Any]) -> tuple[Bar, ...]:
    timestamps = result.get("timestamp") or []
    if not isinstance(timestamps, list):
        raise ParseError("'timestamp' field must be a list", expected_format="list")

    if not timestamps:
        return ()

    try:
        series = result["indicators"]["quote"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise ParseError(f"Missing quote indicators: {e}", expected_format="indicators.quote[0]")

    columns = {}
    for name in ("open", "high", "low", "close", "volume"):
        values = series.get(name) or []
        if len(values) < len(timestamps):
            raise ParseError(
                f"'{name}' series shorter than timestamps ({len(values)} < {len(timestamps)})",
                expected_format="aligned series"
            )
        columns[name] = values

    bars = []
    for i, epoch in enumerate(timestamps):
        if columns["open"][i] is None or columns["close"][i] is None:
            continue
        bars.append(_parse_single_bar(
            _parse_timestamp(epoch),
            columns["open"][i],
            columns["high"][i],
            columns["low"][i],
            columns["close"][i],
            columns["volume"][i],
        ))

    return tuple(bars)


def _parse_timestamp(epoch: Any) -> datetime:
    try:
        return from_epoch_seconds(epoch)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise TemporalDataError(f"Invalid bar timestamp {epoch!r}: {e}")


def _parse_single_bar(ts: datetime, open_: Any, high: Any, low: Any,
                      close: Any, volume: Any) -> Bar:
    """Validate one aligned OHLCV row."""
    try:
        open_price = float(open_)
        close_price = float(close)
        high_price = float(high) if high is not None else max(open_price, close_price)
        low_price = float(low) if low is not None else min(open_price, close_price)
        vol = float(volume) if volume is not None else 0.0
    except (TypeError, ValueError) as e:
        raise InvalidPriceError(f"Invalid price data at {ts.isoformat()}: {e}")

    prices = [open_price, high_price, low_price, close_price]
    if any(not math.isfinite(p) or p <= 0 for p in prices):
        raise InvalidPriceError(
            f"All prices must be positive: O={open_price}, H={high_price}, L={low_price}, C={close_price}"
        )

    if high_price < max(open_price, close_price) or low_price > min(open_price, close_price):
        raise OHLCConsistencyError(
            f"High/low prices inconsistent with open/close: O={open_price}, H={high_price}, "
            f"L={low_price}, C={close_price}"
        )

    return Bar(ts=ts, open=open_price, high=high_price, low=low_price,
               close=close_price, volume=max(vol, 0.0))


def _parse_quote(meta: dict[str, Any], symbol: str, bars: tuple[Bar, ...]) -> Quote:
    price = _optional_float(meta.get("regularMarketPrice"))
    if price is None and bars:
        price = bars[-1].close
    if price is None or price <= 0:
        raise MissingDataError(f"No market price for {symbol}", data_type="quote",
                               context={"symbol": symbol})

    market_time = meta.get("regularMarketTime")
    if market_time is not None:
        ts = from_epoch_seconds(market_time)
    elif bars:
        ts = bars[-1].ts
    else:
        raise MissingDataError(f"No market time for {symbol}", data_type="quote",
                               context={"symbol": symbol})

    previous_close = _optional_float(meta.get("chartPreviousClose"))
    if previous_close is None:
        previous_close = _optional_float(meta.get("previousClose"))

    return Quote(
        symbol=symbol,
        price=price,
        ts=ts,
        previous_close=previous_close,
        day_high=_optional_float(meta.get("regularMarketDayHigh")),
        day_low=_optional_float(meta.get("regularMarketDayLow")),
        volume=_optional_float(meta.get("regularMarketVolume")),
    )


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None
