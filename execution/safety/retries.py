# retry helpers
"""Exponential backoff for provider connects"""
from typing import Awaitable, Callable, Optional, TypeVar
import asyncio
import random
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryStrategy:
    """Runs an async call up to ``max_attempts`` times with backoff in between"""

    def __init__(
        self,
        max_attempts: int = 1,
        initial_delay_seconds: float = 1.0,
        max_delay_seconds: float = 30.0,
        jitter: bool = True,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.initial_delay_seconds = initial_delay_seconds
        self.max_delay_seconds = max_delay_seconds
        self.jitter = jitter

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt + 1`` (doubling, capped, ±25% jitter)"""
        delay = min(self.initial_delay_seconds * (2 ** attempt), self.max_delay_seconds)
        if self.jitter:
            delay += random.uniform(-delay * 0.25, delay * 0.25)
        return max(0.0, delay)

    async def execute(self, func: Callable[[], Awaitable[T]], key: Optional[str] = None) -> T:
        """
        Call func until it succeeds or attempts run out

        Args:
            func: Zero-argument coroutine function
            key: Name used in log messages

        Returns:
            Result of the first successful call

        Raises:
            The last exception once every attempt failed
        """
        label = key or "operation"

        for attempt in range(self.max_attempts):
            try:
                result = await func()
            except Exception as e:
                if attempt == self.max_attempts - 1:
                    if self.max_attempts > 1:
                        logger.error(f"All {self.max_attempts} attempts failed for {label}: {e}")
                    raise

                delay = self.delay_for(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_attempts} for {label} failed: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await asyncio.sleep(delay)
                continue

            if attempt > 0:
                logger.info(f"{label} succeeded on attempt {attempt + 1}/{self.max_attempts}")
            return result
