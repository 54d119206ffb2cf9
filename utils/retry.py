"""
Retry helper with exponential backoff and bounded jitter.

Delays grow as ``base_delay * 2 ** attempt`` with up to 30% random jitter on
top. Every failure is kept so the final error can name them all.
"""

import logging
import random
import time
from typing import Callable, List, TypeVar

from utils.error_handler import ErrorDetector, RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER_RATIO = 0.3


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before retry number ``attempt + 1`` (``attempt`` is zero based)."""
    delay = base_delay * (2 ** attempt)
    return delay + random.uniform(0, JITTER_RATIO * delay)


def retry_operation(operation: Callable[[], T], retries: int = 3,
                    base_delay: float = 2.0, operation_name: str = "operation",
                    sleep: Callable[[float], None] = time.sleep) -> T:
    """
    Run ``operation`` until it succeeds or ``retries`` attempts have failed.

    Args:
        operation: Zero-argument callable to run
        retries: Total number of attempts (at least one attempt is made)
        base_delay: Initial delay in seconds between attempts
        operation_name: Label used in logs and in the aggregate error
        sleep: Sleep function, injectable for tests

    Returns:
        The value returned by the first successful attempt

    Raises:
        RetryExhaustedError: If every attempt failed. Its message enumerates
            each attempt's error.
        ScraperError: Non-retryable engine errors propagate on first sight.
    """
    attempts = max(1, retries)
    errors: List[Exception] = []

    for attempt in range(attempts):
        try:
            return operation()
        except Exception as e:
            if not ErrorDetector.is_retryable(e):
                raise
            errors.append(e)

            if attempt == attempts - 1:
                break

            wait_time = backoff_delay(attempt, base_delay)
            logger.warning(f"{operation_name}: attempt {attempt + 1}/{attempts} failed: {e}. "
                           f"Retrying in {wait_time:.2f} seconds...")
            sleep(wait_time)

    logger.error(f"{operation_name} failed after {attempts} attempts")
    raise RetryExhaustedError(operation_name, errors)
