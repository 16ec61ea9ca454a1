"""
Retry policy for the outbound remote call.

Only connection-level failures (the request never reached the service, or the
connection dropped mid-response) are retried. Timeouts and HTTP errors are
not retried; they reach the circuit breaker as one failure.
"""

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

RETRY_BASE_DELAY = 0.5
RETRY_MAX_DELAY = 4.0

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.ConnectError,
    httpx.RemoteProtocolError,
)


def create_retry_decorator(
    max_attempts: int = 2,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    retry_exceptions: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
):
    std_logger = logging.getLogger(__name__)  # Tenacity needs std lib logger

    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(initial=base_delay, max=max_delay),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=before_sleep_log(std_logger, logging.WARNING),
        reraise=True,
    )
