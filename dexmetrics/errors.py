"""
Exception taxonomy for dexmetrics.

Pricing errors are raised synchronously to the caller. Ledger errors are
retryable and absorbed by the refresh scheduler.
"""

from typing import Optional


class DexMetricsError(Exception):
    """Base exception for all dexmetrics errors."""
    pass


class InvalidAmountError(DexMetricsError):
    """Raised when an amount is non-numeric, negative or too precise."""
    pass


class InsufficientLiquidityError(DexMetricsError):
    """Raised when a pool has no reserves (or no liquidity) to price against."""
    pass


class LedgerUnavailableError(DexMetricsError):
    """
    Raised when the ledger endpoint cannot be reached.

    Always retryable: the last good snapshot stays published.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return True


class InvalidPreferenceError(DexMetricsError):
    """Raised when a slippage tolerance or deadline is out of range."""

    def __init__(self, message: str, field: Optional[str] = None, value=None):
        super().__init__(message)
        self.field = field
        self.value = value


class StaleSnapshotError(DexMetricsError):
    """
    Advisory error for quotes computed against old reserves.

    Only raised when the caller requests strict freshness; otherwise the
    quote is flagged as stale.
    """

    def __init__(self, message: str, age_seconds: float, max_age_seconds: float):
        super().__init__(message)
        self.age_seconds = age_seconds
        self.max_age_seconds = max_age_seconds


class EventDecodeError(DexMetricsError):
    """Raised when a log or contract response does not match the expected ABI."""
    pass
