"""
Retry Logic for Navigation

Bounded retries with linear backoff: attempt N failing waits
`N * base_delay` seconds before attempt N+1. The last failure is never
swallowed.

Usage:
    from feedscrape_core.retry import navigate_with_retry, NavigationError

    try:
        await navigate_with_retry(source, url, max_attempts=3)
    except NavigationError as e:
        ...  # the page could not be reached at all
"""

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class RetryExhaustedError(Exception):
    """All retry attempts have been exhausted"""

    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class NavigationError(RetryExhaustedError):
    """Navigation failed on every attempt; fatal for the run."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(
            f"Navigation to {url} failed after {attempts} attempt(s): {last_error}",
            attempts,
            last_error,
        )
        self.url = url


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Linear backoff: delay after the given (1-based) failed attempt."""
    return max(0.0, attempt * base_delay)


async def execute_with_retry(
    func: Callable,
    *args,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retryable_exceptions: tuple = (Exception,),
    **kwargs,
) -> Any:
    """
    Execute an async function with retry logic.

    Args:
        func: Async function to execute
        *args: Positional arguments for func
        max_attempts: Maximum attempts (>= 1)
        base_delay: Seconds multiplied by the attempt number between attempts
        retryable_exceptions: Exceptions that trigger another attempt
        **kwargs: Keyword arguments for func

    Returns:
        Result of func

    Raises:
        RetryExhaustedError: chained to the last failure
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    last_error: Optional[BaseException] = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except retryable_exceptions as e:
            last_error = e
            if attempt < max_attempts:
                delay = backoff_delay(attempt, base_delay)
                logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed: {e}. "
                    f"Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)

    logger.error(f"Failed after {max_attempts} attempts: {last_error}")
    raise RetryExhaustedError(
        f"Failed after {max_attempts} attempts: {last_error}", max_attempts, last_error
    ) from last_error


async def navigate_with_retry(
    source,
    url: str,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    wait_until: str = "networkidle",
    timeout_ms: int = 30000,
) -> bool:
    """
    Navigate a page source to URL with automatic retry on failure.

    Args:
        source: Object with async `navigate_to(url, wait_until=..., timeout_ms=...)`
        url: URL to navigate to
        max_attempts: Maximum attempts
        base_delay: Linear backoff unit in seconds
        wait_until: Settle condition passed to the source
        timeout_ms: Per-attempt navigation timeout

    Returns:
        True if navigation succeeded

    Raises:
        NavigationError: If all attempts fail
    """
    try:
        await execute_with_retry(
            source.navigate_to,
            url,
            max_attempts=max_attempts,
            base_delay=base_delay,
            wait_until=wait_until,
            timeout_ms=timeout_ms,
        )
    except RetryExhaustedError as e:
        raise NavigationError(url, e.attempts, e.last_error) from e.last_error
    logger.debug(f"Navigation to {url} succeeded")
    return True


__all__ = [
    "RetryExhaustedError",
    "NavigationError",
    "backoff_delay",
    "execute_with_retry",
    "navigate_with_retry",
]
