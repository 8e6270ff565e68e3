"""Exponential backoff for fetching the default HGNC table.

The table download is the only network operation in genexref. Transient
failures (connection problems, timeouts, 5xx and 429 responses) are retried
with a doubling delay; other HTTP client errors fail at once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from http.client import IncompleteRead
from typing import Callable, TypeVar
from urllib.error import HTTPError, URLError

from genexref.errors import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY = 2.0  # seconds
MAX_DELAY_CAP = 60.0

# Failures worth another attempt; HTTPError is narrowed further by status
RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    URLError,
    ConnectionError,
    TimeoutError,
    IncompleteRead,
    OSError,
)

TOO_MANY_REQUESTS = 429

T = TypeVar("T")


def backoff_delays(initial: float, cap: float) -> Iterator[float]:
    """Yield ``initial``, then double it on every step, never exceeding ``cap``."""
    delay = initial
    while True:
        yield delay
        delay = min(delay * 2, cap)


def _is_client_error(status: int) -> bool:
    return 400 <= status < 500 and status != TOO_MANY_REQUESTS


class RetryHandler:
    """Runs a callable until it succeeds or the attempts run out."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        max_delay: float = MAX_DELAY_CAP,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize retry handler.

        Args:
            max_retries: Attempts after the first one.
            initial_delay: Wait before the first retry, in seconds.
            max_delay: Upper bound of the doubling wait.
            sleep: Waits between attempts; ``time.sleep`` when None.
        """
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self._sleep = sleep or time.sleep

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def execute(
        self,
        func: Callable[[], T],
        operation_name: str,
        retryable_errors: tuple[type[Exception], ...] = RETRYABLE_ERRORS,
    ) -> T:
        """Call ``func`` and return its result, retrying transient failures.

        Errors outside ``retryable_errors`` propagate unchanged.

        Raises:
            DownloadError: On an HTTP client error, or once every attempt failed.
        """
        delays = backoff_delays(self.initial_delay, self.max_delay)
        last_error: Exception | None = None

        for attempt in range(1, self.attempts + 1):
            try:
                return func()
            except retryable_errors as e:
                if isinstance(e, HTTPError) and _is_client_error(e.code):
                    raise DownloadError(f"{operation_name} failed: HTTP {e.code}") from e
                last_error = e

            if attempt == self.attempts:
                break
            delay = next(delays)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                operation_name,
                attempt,
                self.attempts,
                delay,
                last_error,
            )
            self._sleep(delay)

        raise DownloadError(
            f"{operation_name} failed after {self.attempts} attempts: {last_error}"
        ) from last_error


def with_retry(
    func: Callable[[], T],
    operation_name: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    max_delay: float = MAX_DELAY_CAP,
) -> T:
    """Run ``func`` under a one-off ``RetryHandler``."""
    handler = RetryHandler(
        max_retries=max_retries,
        initial_delay=initial_delay,
        max_delay=max_delay,
    )
    return handler.execute(func, operation_name)
