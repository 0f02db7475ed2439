# Timeout handling
"""Time budgets for provider connects and summary start"""
import asyncio
from typing import Awaitable, Optional, TypeVar
from datetime import datetime

from execution.models import ToolTimeoutError

T = TypeVar('T')


class TimeoutHandler:
    """Awaits with a time budget and reports overruns as ToolTimeoutError"""

    def __init__(self, timeout_seconds: float = 30):
        self.timeout_seconds = timeout_seconds

    async def run(
        self,
        awaitable: Awaitable[T],
        key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> T:
        """
        Await with a timeout

        Args:
            awaitable: Coroutine or future to await
            key: Name used in the error
            timeout_seconds: Override for this call

        Returns:
            Result of the awaitable

        Raises:
            ToolTimeoutError if timeout exceeded
        """
        timeout = timeout_seconds or self.timeout_seconds
        start_time = datetime.utcnow()

        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)

        except asyncio.TimeoutError:
            elapsed = (datetime.utcnow() - start_time).total_seconds()
            raise ToolTimeoutError(
                message=f"{key or 'operation'} exceeded timeout of {timeout}s (elapsed: {elapsed:.2f}s)",
                provider_name=key,
                details={"timeout_seconds": timeout},
            )
