"""
Retry policy for failed page fetches.

After a failure the controller schedules exactly one automatic recovery,
which fires after a fixed delay. Scheduling again, or a manual retry,
supersedes whatever was pending, so at most one recovery ever fires per
failure.
"""

import asyncio
import logging
from collections.abc import Callable

from pokegallery.config import settings

logger = logging.getLogger(__name__)


class RetryPolicy:
    """Single-shot delayed recovery on the running event loop."""

    def __init__(self, delay: float | None = None) -> None:
        self.delay = settings.recovery_delay if delay is None else delay
        if self.delay < 0:
            raise ValueError(f"Recovery delay must be non-negative, got {self.delay}")
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether an automatic recovery is waiting to fire."""
        return self._handle is not None

    def schedule(self, recover: Callable[[], None]) -> None:
        """
        Schedule `recover` to run once after the recovery delay.

        Must be called from inside the event loop. Replaces any recovery
        that is already pending.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, recover)
        logger.info("recovery_scheduled", extra={"delay": self.delay})

    def cancel(self) -> bool:
        """
        Drop the pending recovery, if any.

        Returns:
            True if a pending recovery was cancelled
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self, recover: Callable[[], None]) -> None:
        self._handle = None
        recover()
