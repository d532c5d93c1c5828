"""Caller-side retry with exponential backoff.

The filter and storage never retry on their own. Callers that want retries
wrap individual calls; every operation here is safe to repeat from scratch
(adds are idempotent, checks are read-only).
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

import redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transient transport failures; anything else (bad config, bad offsets,
# script errors) is raised on the first attempt
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    redis.ConnectionError,
    redis.TimeoutError,
)


def with_backoff(
    operation: Callable[[], T],
    max_retries: int = 5,
    base_delay: float = 0.1,
    max_delay: float = 5.0,
    jitter: bool = True,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
) -> T:
    """
    Retries a given operation with exponential backoff.

    Args:
        operation: A callable that performs the operation.
        max_retries (int): Maximum number of attempts.
        base_delay (float): Initial delay in seconds.
        max_delay (float): Maximum delay between retries.
        jitter (bool): Whether to add random jitter to the delay.
        retry_on: Exception types that trigger another attempt.

    Returns:
        The result of the operation if successful.

    Raises:
        The last exception raised by the operation if all retries fail, or
        the first exception not listed in retry_on.
    """
    for attempt in range(max_retries):
        try:
            return operation()
        except retry_on as e:
            if attempt == max_retries - 1:
                raise
            delay = min(base_delay * (2**attempt), max_delay)
            if jitter:
                delay = delay * random.uniform(0.5, 1.5)
            logger.warning(f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s...")
            time.sleep(delay)
    raise ValueError(f"max_retries must be at least 1, got {max_retries}")
