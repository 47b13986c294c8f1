"""Retry mechanism with exponential backoff.

Retries are strictly sequential: an attempt starts only after the previous
one failed and the backoff sleep has elapsed. Whether a failure is retried is
decided by its kind (see ``InvocationError.kind``), never by inspecting the
message.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..models.exceptions import InvocationError
from .structured_logging import LoggerFactory

logger = LoggerFactory.get_logger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: float = 60.0  # seconds
    exponential_base: float = 2.0


class RetryExhausted(Exception):
    """Raised when all retry attempts are exhausted."""
    def __init__(self, message: str, last_exception: Optional[Exception] = None, attempts: int = 0):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


class RetryManager:
    """Run an async operation, retrying transient failures with backoff."""

    def __init__(self,
                 config: Optional[RetryConfig] = None,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        self.config = config or RetryConfig()
        self._sleep = sleep or asyncio.sleep

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retrying a failed ``attempt`` (0-based): 1s, 2s, 4s..."""
        return min(
            self.config.initial_delay * (self.config.exponential_base ** attempt),
            self.config.max_delay
        )

    def should_retry(self, exception: Exception, attempt: int) -> bool:
        """Only transient invocation errors are retried, and only while budget remains."""
        if attempt >= self.config.max_retries:
            return False
        return isinstance(exception, InvocationError) and exception.transient

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[Any]],
        *args,
        start_attempt: int = 0,
        operation_name: Optional[str] = None,
        **kwargs
    ) -> Any:
        """Await ``func(*args, **kwargs)`` until it succeeds or retrying stops.

        Permanent failures propagate unchanged. Transient failures that run out
        of attempts raise ``RetryExhausted`` carrying the last exception.
        """
        operation_name = operation_name or getattr(func, "__name__", "operation")
        attempt = start_attempt

        while True:
            try:
                if attempt > start_attempt:
                    logger.info(
                        f"Retry attempt {attempt + 1}/{self.config.max_retries + 1} for {operation_name}",
                        attempt=attempt,
                    )

                result = await func(*args, **kwargs)

                if attempt > start_attempt:
                    logger.info(
                        f"Operation {operation_name} succeeded after {attempt - start_attempt + 1} attempts",
                        attempt=attempt,
                    )
                return result

            except InvocationError as e:
                if not e.transient:
                    logger.error(
                        f"Operation {operation_name} failed with non-retryable error: {e}",
                        attempt=attempt,
                        error_kind=e.kind,
                    )
                    raise

                if not self.should_retry(e, attempt):
                    logger.error(
                        f"Operation {operation_name} failed after {attempt - start_attempt + 1} attempts",
                        attempt=attempt,
                    )
                    raise RetryExhausted(
                        f"Operation {operation_name} failed after {attempt - start_attempt + 1} attempts: {e}",
                        e,
                        attempts=attempt - start_attempt + 1,
                    ) from e

                delay = self.calculate_delay(attempt)
                logger.warning(
                    f"Operation {operation_name} failed (attempt {attempt + 1}), "
                    f"retrying in {delay:.2f}s: {e}",
                    attempt=attempt,
                    delay_seconds=delay,
                    error_kind=e.kind,
                )

                await self._sleep(delay)
                attempt += 1
