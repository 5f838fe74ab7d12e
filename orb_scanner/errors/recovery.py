"""
Recovery strategy classifications for error handling.

These errors are raised by market data providers and absorbed by the scan
orchestrator at the per-symbol worker boundary.
"""

from typing import Optional


class RecoverableError(Exception):
    """Errors that clear up on their own by the next scan cycle."""

    def __init__(self, message: str, retry_count: int = 0,
                 max_retries: int = 3, **kwargs):
        super().__init__(message)
        self.retry_count = retry_count
        self.max_retries = max_retries
        self.recoverable = True


class SymbolFetchError(RecoverableError):
    """Fetching market data for one symbol failed or timed out."""

    def __init__(self, message: str, symbol: Optional[str] = None,
                 timed_out: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol
        self.timed_out = timed_out
