# =============================================================================
# resilient_ws -- Reconnect Policy
# =============================================================================
#
# Exponential backoff with a hard attempt cap.  Owns the single pending
# reconnect timer; the manager decides *when* to schedule.
# =============================================================================

from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol

from ._logging import logger
from .constants import (
    RECONNECT_BASE_DELAY_MS,
    RECONNECT_FACTOR,
    RECONNECT_MAX_ATTEMPTS,
)
from .errors import ReconnectExhaustedError
from .types import ReconnectContext


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], Any]], TimerHandle]


def _loop_call_later(delay: float, callback: Callable[[], Any]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class ReconnectPolicy:
    """Backoff calculator and one-shot timer owner.

    ``delay = base_delay_ms * factor ** attempts`` with the attempt counter
    starting at 0, so the first retry waits exactly ``base_delay_ms``.

    Args:
        max_attempts: Retries allowed before giving up (default 5).
        base_delay_ms: Delay of the first retry in milliseconds.
        factor: Growth per attempt (default 1.5).
        scheduler: ``call_later(seconds, fn) -> handle`` used to start
            timers. Defaults to the running asyncio loop.
    """

    def __init__(
        self,
        max_attempts: int = RECONNECT_MAX_ATTEMPTS,
        base_delay_ms: float = RECONNECT_BASE_DELAY_MS,
        factor: float = RECONNECT_FACTOR,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._ctx = ReconnectContext(
            max_attempts=max_attempts,
            base_delay_ms=base_delay_ms,
            factor=factor,
        )
        self._scheduler = scheduler or _loop_call_later

    # -- Properties -----------------------------------------------------------

    @property
    def context(self) -> ReconnectContext:
        return self._ctx

    @property
    def attempts(self) -> int:
        return self._ctx.attempts

    @property
    def max_attempts(self) -> int:
        return self._ctx.max_attempts

    @property
    def exhausted(self) -> bool:
        return self._ctx.attempts >= self._ctx.max_attempts

    @property
    def pending(self) -> bool:
        return self._ctx.pending is not None

    # -- Configuration --------------------------------------------------------

    def configure(self, base_delay_ms: float) -> None:
        self._ctx.base_delay_ms = base_delay_ms

    def reset(self) -> None:
        self._ctx.attempts = 0

    def delay_for(self, attempt: int) -> float:
        """Delay in milliseconds before retry number ``attempt + 1``."""
        return self._ctx.base_delay_ms * (self._ctx.factor**attempt)

    # -- Timer ----------------------------------------------------------------

    def schedule(self, reconnect_fn: Callable[[], Any]) -> float:
        """Start the timer for the next attempt and return its delay (ms).

        Raises:
            ReconnectExhaustedError: If no attempts are left. No timer is
                created in that case.
        """
        ctx = self._ctx
        if self.exhausted:
            raise ReconnectExhaustedError(ctx.attempts)

        self.cancel()
        delay = self.delay_for(ctx.attempts)
        ctx.attempts += 1
        logger.info(
            "Reconnecting in %.0fms (attempt %d/%d)",
            delay,
            ctx.attempts,
            ctx.max_attempts,
        )

        def _fire() -> None:
            ctx.pending = None
            reconnect_fn()

        ctx.pending = self._scheduler(delay / 1000.0, _fire)
        return delay

    def cancel(self) -> None:
        """Cancel the pending timer, if any.  Safe to call repeatedly."""
        handle = self._ctx.pending
        if handle is not None:
            self._ctx.pending = None
            handle.cancel()
