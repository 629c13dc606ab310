"""
Error classification and retry for ledger reads.

RPC failures are classified by message, retried with exponential backoff
when transient, and surfaced as LedgerUnavailableError once the retry
budget is spent.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from ..errors import LedgerUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorHandler:
    """
    Centralized error handling for ledger operations.

    Provides classification, logging, and retry strategies for errors
    raised by the RPC transport.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error into a category for appropriate handling.

        Args:
            error: Exception to classify

        Returns:
            One of rate_limit, network, contract, validation, unknown
        """
        if isinstance(error, (asyncio.TimeoutError, ConnectionError, TimeoutError)):
            return "network"

        error_str = str(error).lower()

        if any(keyword in error_str for keyword in ["rate limit", "too many requests", "429"]):
            return "rate_limit"

        if any(keyword in error_str for keyword in ["connection", "timeout", "timed out", "network", "dns", "503", "502"]):
            return "network"

        # Deterministic failures
        if any(keyword in error_str for keyword in ["revert", "execution reverted", "out of gas"]):
            return "contract"

        if any(keyword in error_str for keyword in ["invalid", "bad request", "400"]):
            return "validation"

        return "unknown"

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """
        Determine if an error should trigger a retry.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            max_retries: Maximum number of retries allowed
        """
        if attempt >= max_retries:
            return False
        return self.classify_error(error) in ("network", "rate_limit", "unknown")

    def get_retry_delay(self, error: Exception, attempt: int, base_delay: float = 1.0) -> float:
        """
        Delay in seconds before the next attempt.

        Exponential in attempt, capped at 60 backoff units.
        """
        error_category = self.classify_error(error)
        delay = base_delay * min(2 ** attempt, 60)

        if error_category == "rate_limit":
            return delay * 2
        if error_category == "network":
            return delay
        return delay * 1.5

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """Log error with a level matching its category."""
        error_category = self.classify_error(error)
        message = (
            f"Ledger {context.get('operation', 'operation')} failed "
            f"({error_category}, attempt {context.get('attempt', 0)}): {error}"
        )

        if error_category == "validation":
            self.logger.warning(message)
        elif error_category == "contract":
            self.logger.error(message)
        elif error_category == "rate_limit":
            self.logger.info(message)
        else:
            self.logger.warning(message)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    description: str,
    error_handler: Optional[ErrorHandler] = None,
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Await operation() until it succeeds or the error is not retryable.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        description: Operation name used in logs and the raised error
        error_handler: Classifier, a default one is created when omitted
        max_retries: Retries after the first attempt
        base_delay: Backoff unit in seconds
        sleep: Awaitable sleep, replaceable in tests

    Raises:
        LedgerUnavailableError: When the operation keeps failing
    """
    handler = error_handler or ErrorHandler()
    attempt = 0
    while True:
        try:
            return await operation()
        except LedgerUnavailableError:
            raise
        except Exception as e:
            handler.log_error(e, {"operation": description, "attempt": attempt})
            if not handler.should_retry(e, attempt, max_retries):
                raise LedgerUnavailableError(f"{description} failed: {e}", cause=e) from e
            delay = handler.get_retry_delay(e, attempt, base_delay)
            logger.debug(f"Retrying {description} in {delay:.2f}s")
            await sleep(delay)
            attempt += 1
