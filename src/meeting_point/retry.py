"""
Bounded retries for transient provider failures.

Only ProviderTransientFailure is retried. Everything else (not-found results,
rejected requests) propagates on the first attempt.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from .errors import ProviderTransientFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    def compute_delay(self, attempt: int) -> float:
        """Exponential backoff with up to 25% jitter"""
        delay = min(self.base_delay * (2**attempt), self.max_delay)
        return delay + random.uniform(0, delay * 0.25)


async def call_with_retries(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    description: str,
) -> T:
    """
    Run an async operation, retrying it on ProviderTransientFailure.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        policy: Attempt count and backoff parameters
        description: Short label used in retry logs

    Returns:
        Result of the first successful attempt

    Raises:
        ProviderTransientFailure: If the last attempt still failed transiently
    """
    for attempt in range(policy.max_attempts):
        try:
            return await operation()
        except ProviderTransientFailure as e:
            if attempt == policy.max_attempts - 1:
                logger.error("%s failed after %d attempt(s): %s", description, policy.max_attempts, e)
                raise
            delay = policy.compute_delay(attempt)
            logger.warning(
                "%s failed transiently (attempt %d/%d), retrying in %.2fs: %s",
                description,
                attempt + 1,
                policy.max_attempts,
                delay,
                e,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Retry loop exited without a result")
