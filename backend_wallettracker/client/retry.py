"""
Retry-with-backoff controller.

Wraps any async operation with one delayed attempt per call:
delay = min(base_delay_ms * 2**attempt_count, max_delay_ms). schedule() runs
attempts in one background task for as long as the owner's "again" predicate
asks for another; the owner resets attempt_count when its operation succeeds.

States: idle (is_retrying False) and retrying (a delayed attempt is pending or
running). A pending attempt can be cancelled; once cancelled it never touches
the controller's state again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 5000

Operation = Callable[[], Awaitable[Any]]
Predicate = Callable[[], bool]
Sleeper = Callable[[float], Awaitable[Any]]


class RetryController:
    """Bounded exponential-backoff retry state for one data owner."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        max_delay_ms: int = DEFAULT_MAX_DELAY_MS,
        *,
        sleep: Sleeper = asyncio.sleep,
        name: str = "retry",
    ) -> None:
        """
        Args:
            max_attempts: Attempts allowed before retry_with_backoff stops running.
            base_delay_ms: Delay before the first retry.
            max_delay_ms: Cap for the doubled delay.
            sleep: Awaitable sleep taking seconds (replaced in tests).
            name: Label for log lines.
        """
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if base_delay_ms < 0 or max_delay_ms < 0:
            raise ValueError("delays must be >= 0")
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._sleep = sleep
        self._name = name
        self.attempt_count = 0
        self.is_retrying = False
        self._generation = 0
        self._task: asyncio.Task[bool] | None = None

    @property
    def max_retries_reached(self) -> bool:
        return self.attempt_count >= self.max_attempts

    @property
    def pending_task(self) -> asyncio.Task[bool] | None:
        """The scheduled attempt, if one is still pending or running."""
        if self._task is not None and not self._task.done():
            return self._task
        return None

    @property
    def has_pending(self) -> bool:
        return self.pending_task is not None

    def compute_delay_ms(self, attempt_count: int | None = None) -> int:
        n = self.attempt_count if attempt_count is None else attempt_count
        return min(self.base_delay_ms * (2 ** n), self.max_delay_ms)

    def delay_schedule(self) -> list[int]:
        """Delays for attempts 0..max_attempts-1."""
        return [self.compute_delay_ms(n) for n in range(self.max_attempts)]

    async def retry_with_backoff(self, operation: Operation) -> bool:
        """
        Wait the backoff delay, then invoke operation exactly once.

        Returns True if the operation completed, False if it raised or the
        attempt bound was already reached (in which case nothing waits or runs).
        attempt_count is incremented right before the invocation.
        """
        if self.max_retries_reached:
            return False
        generation = self._generation
        delay_ms = self.compute_delay_ms()
        self.is_retrying = True
        logger.debug(
            "retry_scheduled",
            retry=self._name,
            attempt=self.attempt_count + 1,
            delay_ms=delay_ms,
        )
        try:
            await self._sleep(delay_ms / 1000.0)
            if generation != self._generation:
                return False
            self.attempt_count += 1
            try:
                await operation()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.info("retry_attempt_failed", retry=self._name, attempt=self.attempt_count, error=str(e))
                return False
            return True
        finally:
            if generation == self._generation:
                self.is_retrying = False

    def schedule(self, operation: Operation, *, again: Predicate | None = None) -> asyncio.Task[bool]:
        """
        Run retry_with_backoff(operation) as a task and remember it so cancel()
        can drop it. Any earlier pending task is cancelled first.

        With ``again``, the same task keeps going: after each settled attempt
        the predicate decides whether another one follows. The task is done
        only once the whole chain has stopped.
        """
        self.cancel()
        self._task = asyncio.ensure_future(self._run_chain(operation, again))
        return self._task

    async def _run_chain(self, operation: Operation, again: Predicate | None) -> bool:
        generation = self._generation
        while True:
            ok = await self.retry_with_backoff(operation)
            if generation != self._generation or again is None or not again():
                return ok
            if self.max_retries_reached:
                return ok

    def cancel(self) -> None:
        """Cancel the pending attempt (if any) and return to idle."""
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("retry_cancelled", retry=self._name)
        self.is_retrying = False

    def reset(self) -> None:
        """Back to zero attempts; called by the owner after a successful operation."""
        self.attempt_count = 0
