"""
System failure error classifications for unrecoverable errors.

These exceptions represent scan-level failures that propagate to the caller
instead of being absorbed at the symbol boundary.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class MarketDataUnavailableError(SystemFailureError):
    """No market data source could be reached for any tracked symbol."""

    def __init__(self, message: str, failed_symbols: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.failed_symbols = failed_symbols or []


class ConfigurationError(SystemFailureError):
    """Configuration failed validation and the engine cannot start."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class DeliveryError(SystemFailureError):
    """Snapshot delivery system failures."""

    def __init__(self, message: str, delivery_method: Optional[str] = None,
                 snapshot_kind: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.delivery_method = delivery_method
        self.snapshot_kind = snapshot_kind
