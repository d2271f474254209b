"""Retry logic for database connections with exponential backoff.

The warehouse database may be briefly unavailable while a maintenance job
or a container restart is in progress. The decorator below retries the
wrapped call on a capped exponential schedule and logs the driver's error
code (psycopg2 `pgcode`) with every failed attempt, so a refused connection
can be told apart from a bad password in the run log.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Iterator, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def backoff_delays(
    retries: int,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: Optional[float] = None,
) -> Iterator[float]:
    """
    Yield the wait before each retry: initial_delay * backoff_factor ** n.

    Examples:
        >>> list(backoff_delays(4, initial_delay=1.0, backoff_factor=2.0, max_delay=5.0))
        [1.0, 2.0, 4.0, 5.0]
    """
    for attempt in range(retries):
        delay = initial_delay * (backoff_factor ** attempt)
        yield delay if max_delay is None else min(delay, max_delay)


def _error_context(func: Callable[..., Any], error: Exception, attempt: int) -> dict[str, Any]:
    return {
        "function": func.__name__,
        "attempt": attempt,
        "exception_type": type(error).__name__,
        "pgcode": getattr(error, "pgcode", None),
    }


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (ConnectionError, TimeoutError),
    max_delay: Optional[float] = 30.0,
) -> Callable[[F], F]:
    """Decorator to retry a function with exponential backoff.

    Args:
        max_retries: Retries after the first attempt (default: 3)
        initial_delay: Seconds before the first retry (default: 1.0)
        backoff_factor: Delay multiplier per retry (default: 2.0)
        exceptions: Exception types that trigger a retry. Anything else
                    propagates immediately.
        max_delay: Upper bound on a single wait, None for no bound

    Returns:
        Decorated function; after the last failed attempt the last
        exception is re-raised unchanged.

    Example:
        @retry_with_backoff(max_retries=2, exceptions=(psycopg2.OperationalError,))
        def _test_connection(self):
            ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delays = backoff_delays(max_retries, initial_delay, backoff_factor, max_delay)
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    delay = next(delays, None)
                    if delay is None:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            func.__name__, attempt, e,
                            extra=_error_context(func, e, attempt),
                        )
                        raise

                    logger.warning(
                        "%s failed (attempt %d/%d): %s. Retrying in %.1f seconds...",
                        func.__name__, attempt, max_retries + 1, e, delay,
                        extra={**_error_context(func, e, attempt), "delay_seconds": delay},
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper  # type: ignore

    return decorator
