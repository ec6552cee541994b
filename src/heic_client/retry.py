"""Bounded retry with linear backoff."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

from .errors import is_retryable
from .logging_config import get_logger, log_retry_exhausted, log_retry_scheduled

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


def compute_backoff(retry_delay: float, attempt_number: int) -> float:
    """Return the wait before retry ``attempt_number`` (1-based): ``retry_delay * attempt_number``."""
    return retry_delay * attempt_number


async def request_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    retry_attempts: int,
    retry_delay: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    logger: logging.Logger | None = None,
    description: str = "request",
) -> T:
    """Run an async operation, retrying retryable failures.

    Non-retryable failures (4xx responses, validation errors, anything
    outside the client's error taxonomy) propagate immediately. Retryable
    ones are retried after a linear backoff of 1x, 2x, 3x... ``retry_delay``
    until ``retry_attempts`` retries are used up, at which point the last
    failure propagates. Cancelling the awaiting task stops further retries.

    Args:
        operation: Zero-argument coroutine function performing one attempt
        retry_attempts: Retries allowed after the first attempt
        retry_delay: Base backoff delay in seconds
        sleep: Coroutine used to wait between attempts
        logger: Optional logger instance
        description: Label used in log messages

    Returns:
        The result of the first successful attempt
    """
    logger = logger or get_logger(__name__)
    attempt = 0

    while True:
        try:
            return await operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt >= retry_attempts:
                log_retry_exhausted(logger, description, attempt + 1, e)
                raise

            attempt += 1
            delay = compute_backoff(retry_delay, attempt)
            log_retry_scheduled(logger, description, attempt, retry_attempts, delay, e)
            await sleep(delay)
