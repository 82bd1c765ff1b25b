"""
Gallery session.

One browsing session: a pagination controller, the scroll trigger feeding
it, and the visibility watcher the trigger observes. The session owns all
three and releases them on teardown, on every exit path.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from types import TracebackType
from uuid import uuid4

from pokegallery.config import settings
from pokegallery.models.failure import FailureKind, KnownError
from pokegallery.services.page_fetcher import PageSource
from pokegallery.services.pagination_controller import PaginationController
from pokegallery.services.retry_policy import RetryPolicy
from pokegallery.services.scroll_trigger import (
    ManualVisibilityWatcher,
    ScrollTrigger,
    VisibilityWatcher,
)

logger = logging.getLogger(__name__)


class SessionNotFoundError(KnownError):
    """Raised when a session id is not registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            kind=FailureKind.SESSION_NOT_FOUND,
            message=f"Session '{session_id}' not found",
            suggestion="Create a new session.",
            status_code=404,
        )


class GallerySession:
    """Wires watcher -> scroll trigger -> controller for one viewer."""

    def __init__(
        self,
        source: PageSource,
        watcher: VisibilityWatcher | None = None,
        page_size: int | None = None,
        session_id: str | None = None,
        retry_policy: RetryPolicy | None = None,
        scroll_margin: float | None = None,
        scroll_debounce: float | None = None,
    ) -> None:
        self.id = session_id or uuid4().hex
        self.watcher = watcher or ManualVisibilityWatcher()
        self.controller = PaginationController(source, page_size, retry_policy)
        self.trigger = ScrollTrigger(
            self.watcher,
            guard=self.controller.should_fetch_more,
            on_fetch_requested=self.controller.trigger,
            margin=scroll_margin,
            debounce=scroll_debounce,
        )
        self.controller.add_listener(self.trigger.rearm)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Watch the sentinel and load the first page."""
        self.trigger.attach()
        await self.controller.load_more()

    def report_sentinel(self, visible: bool, distance: float | None = None) -> None:
        """
        Feed a sentinel visibility report into a manually driven watcher.

        Raises:
            KnownError: If the session's watcher is not report-driven
        """
        if not isinstance(self.watcher, ManualVisibilityWatcher):
            raise KnownError(
                kind=FailureKind.INVALID_STATE,
                message="This session observes visibility directly",
                status_code=409,
            )
        self.watcher.report(self.trigger.region, visible, distance)

    async def close(self) -> None:
        """Deregister the visibility watch, drop timers and cancel fetches."""
        if self._closed:
            return
        self._closed = True
        try:
            self.trigger.close()
        finally:
            await self.controller.close()
        logger.info("session_closed", extra={"session_id": self.id})

    async def __aenter__(self) -> "GallerySession":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


class SessionRegistry:
    """
    In-memory registry of live sessions for the HTTP surface.

    Every lookup refreshes a session's last-access time. Sessions left idle
    for longer than the TTL (a viewer that closed its tab without deleting
    its session) are closed and dropped by `sweep`, which runs before each
    create and periodically from the app lifespan.
    """

    def __init__(
        self,
        source_factory: Callable[[], PageSource],
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source_factory = source_factory
        self.ttl = settings.session_ttl if ttl is None else ttl
        if self.ttl <= 0:
            raise ValueError(f"Session TTL must be positive, got {self.ttl}")
        self._clock = clock
        self._sessions: dict[str, GallerySession] = {}
        self._last_access: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self, page_size: int | None = None) -> GallerySession:
        """Create, register and start a session."""
        await self.sweep()
        session = GallerySession(self._source_factory(), page_size=page_size)
        self._sessions[session.id] = session
        self._last_access[session.id] = self._clock()
        try:
            await session.start()
        except BaseException:
            self._forget(session.id)
            await session.close()
            raise
        logger.info("session_created", extra={"session_id": session.id})
        return session

    def get(self, session_id: str) -> GallerySession:
        """
        Raises:
            SessionNotFoundError: If the id is unknown
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._last_access[session_id] = self._clock()
        return session

    async def remove(self, session_id: str) -> None:
        """
        Tear down and forget a session.

        Raises:
            SessionNotFoundError: If the id is unknown
        """
        session = self._forget(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        await session.close()

    async def sweep(self) -> int:
        """
        Close and drop sessions idle for longer than the TTL.

        Returns:
            Number of sessions expired
        """
        now = self._clock()
        idle = [sid for sid, seen in self._last_access.items() if now - seen > self.ttl]
        expired = 0
        for session_id in idle:
            session = self._forget(session_id)
            if session is None:
                continue
            await session.close()
            expired += 1
            logger.info("session_expired", extra={"session_id": session_id})
        return expired

    async def run_sweeper(self, interval: float | None = None) -> None:
        """Sweep forever at a fixed interval. Runs until cancelled."""
        period = settings.session_sweep_interval if interval is None else interval
        while True:
            await asyncio.sleep(period)
            await self.sweep()

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        self._last_access.clear()
        for session in sessions:
            await session.close()

    def _forget(self, session_id: str) -> GallerySession | None:
        self._last_access.pop(session_id, None)
        return self._sessions.pop(session_id, None)
