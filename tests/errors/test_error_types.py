"""Tests for the error classification hierarchy."""

import pytest

from orb_scanner.errors import (
    ConfigurationError,
    DataQualityError,
    DegenerateRangeError,
    DeliveryError,
    InsufficientDataError,
    MalformedDataError,
    MarketDataUnavailableError,
    MissingDataError,
    RecoverableError,
    SymbolFetchError,
    SystemFailureError,
    TemporalDataError,
)


class TestDataQualityErrors:
    """Data quality errors are recovered per symbol."""

    @pytest.mark.parametrize("error", [
        TemporalDataError("bad ts", timestamp=1, expected_timestamp=2),
        MissingDataError("no quote", data_type="quote"),
        MalformedDataError("bad payload", raw_data="{}", expected_format="chart"),
        InsufficientDataError("short history", required_count=20, available_count=3),
        DegenerateRangeError("zero risk", symbol="SPY", timeframe="15min"),
    ])
    def test_recoverable(self, error) -> None:
        assert isinstance(error, DataQualityError)
        assert error.recoverable is True
        assert error.context == {}

    def test_attributes(self) -> None:
        error = InsufficientDataError("short history", required_count=20, available_count=3,
                                      context={"symbol": "QQQ"})

        assert error.required_count == 20
        assert error.available_count == 3
        assert error.context == {"symbol": "QQQ"}
        assert str(error) == "short history"


class TestSystemFailures:
    """System failures propagate to the caller."""

    def test_market_data_unavailable(self) -> None:
        error = MarketDataUnavailableError("all down", failed_symbols=["SPY", "QQQ"])

        assert isinstance(error, SystemFailureError)
        assert error.recoverable is False
        assert error.failed_symbols == ["SPY", "QQQ"]

    def test_configuration_error_keeps_details(self) -> None:
        error = ConfigurationError("invalid", errors=["symbols: empty"])
        assert error.errors == ["symbols: empty"]

    def test_delivery_error_defaults(self) -> None:
        error = DeliveryError("write failed")

        assert error.delivery_method is None
        assert error.snapshot_kind is None
        assert ConfigurationError("x").errors == []


class TestRecoverableErrors:

    def test_symbol_fetch_error(self) -> None:
        error = SymbolFetchError("timeout", symbol="IWM", timed_out=True)

        assert isinstance(error, RecoverableError)
        assert error.symbol == "IWM"
        assert error.timed_out
        assert error.max_retries == 3
        assert not isinstance(error, DataQualityError)
