"""Retry with exponential backoff for store calls.

Only ``TransientStoreError`` (rate limits, dropped connections) is retried.
Any other error propagates on the first attempt.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from soa_core.exceptions import TransientStoreError

from .config import PersistenceConfig

logger = structlog.get_logger()

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    config: Optional[PersistenceConfig] = None,
    operation_name: str = "store_call",
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Run ``operation``, retrying transient store failures.

    With the default settings the delays are 1s, 2s and 4s, so an operation
    is attempted at most four times.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt
        config: Retry settings (defaults from the environment)
        operation_name: Name used in log events
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        The operation's result

    Raises:
        TransientStoreError: The last failure, once every attempt has failed
        Exception: Any non-transient error, unchanged
    """
    config = config or PersistenceConfig()
    attempt = 0
    while True:
        try:
            return await operation()
        except TransientStoreError as e:
            if attempt >= config.max_retries:
                logger.error(
                    "store_retries_exhausted",
                    operation=operation_name,
                    attempts=attempt + 1,
                    error=str(e),
                )
                raise

            delay = config.retry_delay(attempt)
            logger.warning(
                "store_call_retrying",
                operation=operation_name,
                attempt=attempt + 1,
                delay_seconds=delay,
                status_code=e.status_code,
            )
            await sleep(delay)
            attempt += 1


__all__ = ["retry_with_backoff"]
