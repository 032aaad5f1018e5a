"""Retry with exponential backoff for backend calls."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from cloudunify.errors import ApiError, NetworkError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


def should_retry(exc: Exception) -> bool:
    """Retry rate limits, network failures and 5xx API errors."""
    if isinstance(exc, RateLimitError):
        return True
    if isinstance(exc, NetworkError):
        return True
    if isinstance(exc, ApiError):
        status_code = getattr(exc, "details", {}).get("status_code")
        return isinstance(status_code, int) and 500 <= status_code <= 599
    return False


def call_with_retry(
    func: Callable[[], T],
    policy: RetryPolicy,
    map_exception: Callable[[Exception], Exception],
) -> T:
    """
    Run func, mapping raised exceptions with map_exception.

    Retryable mapped errors are retried up to policy.max_retries times with
    doubling delays; the final mapped error is raised from the original.
    """
    delay = policy.initial_delay_sec
    for attempt in range(policy.max_retries + 1):
        try:
            return func()
        except Exception as exc:
            mapped = map_exception(exc)
            if should_retry(mapped) and attempt < policy.max_retries:
                logger.warning(
                    "Backend call failed (attempt %d/%d): %s. Retrying in %.1fs",
                    attempt + 1,
                    policy.max_retries + 1,
                    mapped,
                    delay,
                )
                time.sleep(delay)
                delay *= 2
                continue
            if mapped is exc:
                raise
            raise mapped from exc

    raise ApiError("Unexpected retry loop termination")
