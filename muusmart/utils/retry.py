from __future__ import annotations

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from muusmart.core.exceptions import GatewayError
from muusmart.core.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_UPSTREAM_STATUSES = frozenset({502, 503, 504})


def is_retryable(exc: BaseException) -> bool:
    """Transport failures and gateway-side outages; never 401/403 or other client errors."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, GatewayError):
        return exc.upstream_status in RETRYABLE_UPSTREAM_STATUSES
    return False


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "gateway_read_retry",
        attempt=state.attempt_number,
        error=type(exc).__name__ if exc else None,
    )


def with_retry(max_retries: int = 3, backoff_factor: float = 0.5):
    """Exponential backoff for idempotent gateway reads.

    ``max_retries`` is the total number of attempts; values below 1 mean a single attempt.
    """
    return retry(
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(max(1, max_retries)),
        wait=wait_exponential(multiplier=backoff_factor, max=30),
        before_sleep=_log_retry,
        reraise=True,
    )
