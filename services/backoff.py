# services/backoff.py

import logging
import time
from typing import Callable, TypeVar

from core.errors import RetryExhaustedError, TransientProviderError

T = TypeVar("T")

log = logging.getLogger(__name__)


def backoff_delay(attempt: int, base: float = 1.0) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
    return (2 ** attempt) * base


def call_with_backoff(
    action: Callable[[], T],
    max_retries: int = 3,
    base: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``action`` until it succeeds, retrying transient failures.

    Attempt 0 is the first call. After a TransientProviderError on attempt n
    (n < max_retries) we wait 2**n * base seconds and try again, so the
    default gives 4 tries in total. Any other exception is not retried and
    propagates unchanged. Once the retries are used up, RetryExhaustedError
    is raised from the last failure.
    """
    attempt = 0
    while True:
        try:
            return action()
        except TransientProviderError as e:
            if attempt >= max_retries:
                log.error("Attempt %d failed, giving up: %s", attempt + 1, e)
                raise RetryExhaustedError(attempt + 1, e) from e
            delay = backoff_delay(attempt, base)
            log.warning("Attempt %d failed (%s); retrying in %.1fs", attempt + 1, e, delay)
            sleep(delay)
            attempt += 1
