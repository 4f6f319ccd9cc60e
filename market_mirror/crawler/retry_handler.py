"""
Retry handler for request retries with configurable backoff strategies.

Host failover covers a single attempt across hosts; this handler repeats the
whole attempt a few times with a delay in between, for endpoints (such as
review pages) that fail intermittently on every host at once.
"""

import asyncio
import logging
import random
from typing import Any, Callable, Optional, Sequence, Tuple, Type

logger = logging.getLogger(__name__)


class RetryStrategy:
    """
    Enumeration of available retry delay strategies.
    """
    FIXED = "fixed"  # Fixed delay between retries
    LINEAR = "linear"  # Linear increase in delay
    EXPONENTIAL = "exponential"  # Exponential backoff


class RetryHandler:
    """
    Handler for retrying operations with configurable backoff strategies.
    """

    def __init__(
        self,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        strategy: str = RetryStrategy.LINEAR,
        backoff_factor: float = 1.0,
        jitter: float = 0.0,
        retry_exceptions: Optional[Sequence[Type[BaseException]]] = None,
    ):
        """
        Initialize the retry handler with configurable settings.

        Args:
            max_retries: Maximum number of retry attempts after the first call.
            retry_delay: Base delay between retries in seconds.
            strategy: Backoff strategy to use (fixed, linear, exponential).
            backoff_factor: Multiplication factor for backoff calculation.
            jitter: Random jitter factor to add to retry delays (0-1).
            retry_exceptions: Exception types that should trigger a retry.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.strategy = strategy
        self.backoff_factor = backoff_factor
        self.jitter = jitter
        self.retry_exceptions: Tuple[Type[BaseException], ...] = tuple(
            retry_exceptions or [Exception]
        )

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay before next retry based on the selected strategy.

        Args:
            attempt: The current retry attempt number (0-indexed).

        Returns:
            Delay in seconds before next retry.
        """
        if self.strategy == RetryStrategy.FIXED:
            delay = self.retry_delay
        elif self.strategy == RetryStrategy.LINEAR:
            delay = self.retry_delay * (1 + attempt * self.backoff_factor)
        else:
            delay = self.retry_delay * (self.backoff_factor ** attempt)

        if self.jitter > 0:
            delay += random.uniform(0, self.jitter * delay)

        return delay

    async def execute(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Execute a coroutine function with retry logic.

        Args:
            func: The coroutine function to execute.
            *args: Positional arguments to pass to the function.
            **kwargs: Keyword arguments to pass to the function.

        Returns:
            The result of the first successful call.

        Raises:
            Exception: The last exception raised if every attempt fails, or
                the first non-retryable exception.
        """
        last_exception: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                delay = self._calculate_delay(attempt - 1)
                logger.info(f"Retry {attempt}/{self.max_retries} in {delay:.2f} seconds")
                await asyncio.sleep(delay)
            try:
                return await func(*args, **kwargs)
            except self.retry_exceptions as e:
                last_exception = e
                logger.warning(
                    f"Retryable error (attempt {attempt + 1}/{self.max_retries + 1}): {e}"
                )

        logger.error(f"Failed after {self.max_retries} retries. Last error: {last_exception}")
        raise last_exception


def create_linear_retry_handler(attempts: int = 3, delay: float = 0.5) -> RetryHandler:
    """Create a handler making ``attempts`` calls, waiting ``delay * n`` before call n+1."""
    return RetryHandler(
        max_retries=max(0, attempts - 1),
        retry_delay=delay,
        strategy=RetryStrategy.LINEAR,
        backoff_factor=1.0,
    )
