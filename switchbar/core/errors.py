"""Error types and retry handling for the switchbar core.

Search-time problems with a single candidate (bad URL) are isolated to that
candidate; favicon I/O goes through a retry policy and degrades to a default
icon rather than failing the pipeline.
"""

import asyncio
import inspect
import random
from typing import Any, Callable, Tuple, Type

from loguru import logger


class SwitchbarError(Exception):
    """Base class for switchbar errors."""


class InvalidURLError(SwitchbarError, ValueError):
    """Raised when a candidate URL cannot be split into indexable parts."""

    def __init__(self, url: str, reason: str = "not an absolute URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class FaviconFetchError(SwitchbarError):
    """Raised when a favicon could not be downloaded."""


class ConfigError(SwitchbarError):
    """Raised for unreadable or invalid configuration files."""


class RetryPolicy:
    """Retry policy with exponential backoff."""

    def __init__(self,
                 max_retries: int = 1,
                 base_delay: float = 0.2,
                 max_delay: float = 2.0,
                 exponential_base: float = 2.0,
                 jitter: bool = True,
                 retry_on: Tuple[Type[BaseException], ...] = (Exception,)):
        """
        Initialize retry policy.

        Args:
            max_retries: Maximum retry attempts after the first call
            base_delay: Base delay in seconds
            max_delay: Maximum delay in seconds
            exponential_base: Base for exponential backoff
            jitter: Whether to add jitter
            retry_on: Exception types that trigger a retry
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retry_on = retry_on

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (0-based)."""
        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay

    async def execute(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with retry policy.

        Args:
            func: Function or coroutine function to execute
            *args: Function arguments
            **kwargs: Function keyword arguments

        Returns:
            Function result

        Raises:
            Exception: The last error once all retries are exhausted
        """
        attempt = 0
        while True:
            try:
                if inspect.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                return func(*args, **kwargs)
            except self.retry_on as e:
                if attempt >= self.max_retries:
                    logger.debug(f"All {attempt + 1} attempts failed: {e}")
                    raise
                delay = self.calculate_delay(attempt)
                attempt += 1
                logger.debug(f"Retry {attempt}/{self.max_retries} after {delay:.2f}s: {e}")
                await asyncio.sleep(delay)
