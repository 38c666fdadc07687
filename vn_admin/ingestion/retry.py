"""
Retry Module
============

Bounded exponential backoff around a fallible async operation, with
cooperative cancellation through an ``asyncio.Event``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from vn_admin.core.errors import IngestionCancelled, RetriesExhaustedError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 2.0


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay after the 0-indexed ``attempt`` fails: ``base_delay * 2**attempt``."""
    return base_delay * (2**attempt)


def check_cancelled(cancel_event: asyncio.Event | None) -> None:
    """Raise IngestionCancelled if cancellation has been requested."""
    if cancel_event is not None and cancel_event.is_set():
        raise IngestionCancelled()


async def wait_or_cancel(delay: float, cancel_event: asyncio.Event | None = None) -> None:
    """
    Sleep for ``delay`` seconds, waking early if cancellation is requested.

    Raises:
        IngestionCancelled: If the event is set before or during the sleep.
    """
    check_cancelled(cancel_event)
    if delay <= 0:
        return
    if cancel_event is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except TimeoutError:
        return
    raise IngestionCancelled()


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    cancel_event: asyncio.Event | None = None,
    retry_on: tuple[type[BaseException], ...] = (TransportError,),
    description: str = "operation",
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` are used up.

    Between attempt ``i`` and ``i + 1`` (0-indexed) waits
    ``base_delay * 2**i`` seconds. Cancellation is checked before every
    attempt and every sleep. Exceptions outside ``retry_on`` propagate
    unchanged.

    Args:
        operation: Zero-argument coroutine function to call.
        max_attempts: Total number of attempts (at least 1).
        base_delay: Delay after the first failure, in seconds.
        cancel_event: Optional cancellation signal.
        retry_on: Exception types that trigger another attempt.
        description: Label used in log messages.

    Returns:
        The operation's result.

    Raises:
        RetriesExhaustedError: If every attempt failed.
        IngestionCancelled: If cancellation was requested.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    last_error: BaseException | None = None
    for attempt in range(max_attempts):
        check_cancelled(cancel_event)
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            logger.warning(f"{description} failed (attempt {attempt + 1}/{max_attempts}): {e}")

        if attempt < max_attempts - 1:
            check_cancelled(cancel_event)
            await wait_or_cancel(backoff_delay(base_delay, attempt), cancel_event)

    assert last_error is not None
    raise RetriesExhaustedError(last_error, max_attempts) from last_error
