"""
Retry with exponential backoff for idempotent backend calls.
"""

import functools
import time
from typing import Callable, Optional, Tuple, Type

import requests

# Request Timeout, Too Many Requests, and the transient 5xx family.
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

_TRANSPORT_ERRORS = (
    TimeoutError,
    ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
)

TRANSIENT_KEYWORDS = (
    "timeout",
    "timed out",
    "connection",
    "cannot connect",
    "temporary failure",
    "service unavailable",
    "bad gateway",
)


class RetryError(Exception):
    """Raised when all attempts are exhausted. `last_exception` holds the final failure."""

    def __init__(self, message: str, last_exception: Optional[BaseException] = None):
        super().__init__(message)
        self.last_exception = last_exception


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator retrying a call on the given exception types.

    Args:
        max_retries: Retries after the first attempt (0 = call once)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay
        exponential_base: Factor applied to the delay after each retry
        exceptions: Exception types that trigger a retry; others propagate untouched
        on_retry: Optional callback(attempt, exception, delay) invoked before sleeping
        sleep: Sleep function (injectable for tests)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}", last_exception=e
                        ) from e
                    current_delay = min(delay, max_delay)
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)
                    sleep(current_delay)
                    delay *= exponential_base
            raise AssertionError("unreachable")

        return wrapper
    return decorator


def should_retry_http_status(status_code: Optional[int]) -> bool:
    return status_code in RETRYABLE_STATUS_CODES


def is_transient_error(exception: BaseException) -> bool:
    """Heuristic: would trying the same call again later plausibly succeed?"""
    status = getattr(exception, "status_code", None)
    if status is not None:
        return should_retry_http_status(status)
    if isinstance(exception, _TRANSPORT_ERRORS):
        return True
    text = str(exception).lower()
    return any(keyword in text for keyword in TRANSIENT_KEYWORDS)
