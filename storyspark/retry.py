"""Exponential backoff for provider calls.

Every failure is retried the same way: there is no jitter and no attempt to
tell retryable errors from permanent ones. Generation calls are not
idempotent, so a retried call may be billed twice.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_INITIAL_DELAY = 1.0


@dataclass
class RetryPolicy:
    """Retry an async operation, doubling the wait after each failure.

    With the defaults an always-failing operation is attempted four times,
    waiting 1s, 2s and 4s in between, and the last exception is re-raised
    unchanged.

    Attributes:
        retries: Number of retries after the first attempt.
        initial_delay: Seconds to wait before the first retry.
        sleep: Awaitable used for waiting; replaced in tests.
    """

    retries: int = DEFAULT_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def delay_before(self, retry: int) -> float:
        """Seconds waited before the given retry (1-based)."""
        return self.initial_delay * 2 ** (retry - 1)

    async def run(self, fn: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        retry = 0
        while True:
            try:
                return await fn()
            except Exception as e:
                if retry >= self.retries:
                    logger.warning("%s failed after %d attempts: %s", label, retry + 1, e)
                    raise
                retry += 1
                delay = self.delay_before(retry)
                logger.warning("%s failed (%s), retry %d/%d in %.1fs", label, e, retry, self.retries, delay)
                await self.sleep(delay)
