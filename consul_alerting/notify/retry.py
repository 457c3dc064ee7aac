"""Bounded retry with a pluggable delay strategy.

Handlers describe *how* to retry with a :class:`RetryPolicy` value instead of
inline sleeps, so tests can drive the loop without waiting in real time::

    policy = RetryPolicy(max_retries=2, sleep=fake_sleep)
    result = await policy.run(send_once, log=logger, event="email_send")
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_RETRY_DELAY_SECS = 5.0

logger = structlog.get_logger(__name__)


@dataclass
class RetryResult(Generic[T]):
    """Result of driving an operation through a :class:`RetryPolicy`."""

    succeeded: bool
    attempts: int
    errors: list[str] = field(default_factory=list)
    value: T | None = None


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry: one attempt plus up to ``max_retries`` more."""

    max_retries: int = 0
    delay_secs: float = DEFAULT_RETRY_DELAY_SECS
    sleep: Sleep | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.delay_secs < 0:
            raise ValueError(f"delay_secs must be >= 0, got {self.delay_secs}")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed *attempt* (1-based) before the next."""
        return self.delay_secs

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        log: Any = None,
        event: str = "operation",
        **context: Any,
    ) -> RetryResult[T]:
        """Await *operation* until it returns without raising.

        Every failure is logged as ``<event>_failed``. No delay follows the
        final failed attempt; ``<event>_retries_exhausted`` is logged instead.
        """
        log = log if log is not None else logger
        errors: list[str] = []

        for attempt in range(1, self.max_attempts + 1):
            try:
                value = await operation()
            except Exception as exc:
                errors.append(str(exc) or type(exc).__name__)
                log.error(
                    f"{event}_failed",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=errors[-1],
                    error_type=type(exc).__name__,
                    **context,
                )
                if attempt < self.max_attempts:
                    delay = self.delay_for(attempt)
                    log.info(f"{event}_retrying", delay_secs=delay, **context)
                    await (self.sleep or asyncio.sleep)(delay)
                continue

            return RetryResult(
                succeeded=True, attempts=attempt, errors=errors, value=value
            )

        log.error(
            f"{event}_retries_exhausted",
            attempts=self.max_attempts,
            **context,
        )
        return RetryResult(succeeded=False, attempts=self.max_attempts, errors=errors)
