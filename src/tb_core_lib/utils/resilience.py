"""Resilience utilities for audit writes.

Override entries are written to an external sink (database table or the
audit service). Writes that fail transiently are retried with exponential
backoff before the recorder gives up and reports failure.
"""

import logging
from typing import Callable, Tuple, Type, TypeVar

from tenacity import (
    RetryCallState,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log each retried audit write with the failing exception."""
    if retry_state.attempt_number > 1:
        logger.warning(
            f"[Resilience] Retry attempt {retry_state.attempt_number} for "
            f"{retry_state.fn.__name__} after {retry_state.seconds_since_start:.1f}s. "
            f"Exception: {retry_state.outcome.exception() if retry_state.outcome else 'Unknown'}"
        )


def create_custom_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 4,
    multiplier: float = 0.5,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Create a custom retry decorator with specific parameters.

    Args:
        max_attempts: Maximum number of attempts (including the first)
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)
        multiplier: Exponential backoff multiplier
        retry_on: Exception types worth retrying; anything else fails fast

    Returns:
        A retry decorator configured with the specified parameters

    Example:
        ```python
        # No waiting in tests
        fast_retry = create_custom_retry(max_attempts=3, min_wait=0, max_wait=0, multiplier=0)

        @fast_retry
        async def write_entry():
            ...
        ```
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=_log_retry_attempt,
        reraise=True,
    )
