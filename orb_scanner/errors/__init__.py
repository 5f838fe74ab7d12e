"""
Error classification system for the scanner.

Data quality errors are recovered per symbol, system failures propagate to
the caller of a scan, and recoverable errors mark transient provider issues.
"""

from .data_quality import (
    DataQualityError,
    TemporalDataError,
    MissingDataError,
    MalformedDataError,
    InsufficientDataError,
    DegenerateRangeError,
)
from .system_failures import (
    SystemFailureError,
    MarketDataUnavailableError,
    ConfigurationError,
    DeliveryError,
)
from .recovery import (
    RecoverableError,
    SymbolFetchError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "TemporalDataError",
    "MissingDataError",
    "MalformedDataError",
    "InsufficientDataError",
    "DegenerateRangeError",
    # System Failures
    "SystemFailureError",
    "MarketDataUnavailableError",
    "ConfigurationError",
    "DeliveryError",
    # Recovery Categories
    "RecoverableError",
    "SymbolFetchError",
]
