"""Retry handler with exponential backoff and jitter."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from marketmind_ai.config.settings import Settings

logger = structlog.get_logger()

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """Errors flagged ``retryable=False`` skip straight to the caller; cancellation is never retried."""
    if not isinstance(exc, Exception):
        return False
    return getattr(exc, "retryable", True)


class RetryHandler:
    """Runs one async operation with bounded, sequential retries.

    The wait before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)`` plus a
    uniform jitter in ``[0, jitter]``. Holds no per-call state, so a single
    instance is shared by all concurrent requests.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_ms: int = 1000,
        jitter_ms: int = 500,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize retry handler."""
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay_ms / 1000.0
        self.jitter = jitter_ms / 1000.0
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RetryHandler":
        return cls(
            max_attempts=settings.max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            jitter_ms=settings.retry_jitter_ms,
            **kwargs,
        )

    def _wait_strategy(self):
        return wait_exponential(multiplier=self.base_delay, exp_base=2) + wait_random(0, self.jitter)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str = "upstream_call",
    ) -> T:
        """Execute ``operation`` with retry logic.

        The last error is re-raised unchanged once attempts run out or a
        non-retryable error is seen.
        """
        log = logger.bind(operation=operation_name, max_attempts=self.max_attempts)

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait_strategy(),
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                log.debug("attempt_started", attempt=attempt_number)
                try:
                    return await operation()
                except Exception as e:
                    log.warning(
                        "attempt_failed",
                        attempt=attempt_number,
                        error=str(e),
                        error_type=type(e).__name__,
                        retryable=is_retryable(e),
                    )
                    raise

        # This should never be reached
        raise RuntimeError("Retry loop completed without returning")
