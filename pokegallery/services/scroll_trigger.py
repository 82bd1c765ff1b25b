"""
Scroll trigger.

Watches the sentinel at the end of the rendered list and asks for the next
page when it comes within the configured margin of the viewport. Rapid
visibility toggles inside the debounce window collapse into one request.

Visibility itself comes from a `VisibilityWatcher` port, so the trigger
works the same behind a browser bridge, an HTTP endpoint or a test fake.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from pokegallery.config import settings

logger = logging.getLogger(__name__)

SENTINEL_REGION = "sentinel"


@dataclass(frozen=True, slots=True)
class VisibilityEvent:
    """
    A visibility change of an observed region.

    Attributes:
        is_intersecting: The region overlaps the viewport
        distance: Layout units between the region and the viewport edge,
                  None when the observer does not measure it
    """

    is_intersecting: bool
    distance: float | None = None


VisibilityCallback = Callable[[VisibilityEvent], None]


class VisibilityWatcher(Protocol):
    """Port for a visibility observer (an intersection observer in a browser)."""

    def observe(self, region: str, callback: VisibilityCallback) -> None: ...

    def unobserve(self, region: str) -> None: ...


class ManualVisibilityWatcher:
    """
    Visibility watcher driven by explicit reports.

    Used when visibility is measured elsewhere and reported in, e.g. by
    an HTTP client posting sentinel events.
    """

    def __init__(self) -> None:
        self._callbacks: dict[str, VisibilityCallback] = {}

    @property
    def observed_regions(self) -> list[str]:
        return list(self._callbacks)

    def observe(self, region: str, callback: VisibilityCallback) -> None:
        self._callbacks[region] = callback

    def unobserve(self, region: str) -> None:
        self._callbacks.pop(region, None)

    def report(self, region: str, visible: bool, distance: float | None = None) -> bool:
        """
        Deliver a visibility event for `region`.

        Returns:
            False if nothing observes the region (the event is dropped)
        """
        callback = self._callbacks.get(region)
        if callback is None:
            return False
        callback(VisibilityEvent(is_intersecting=visible, distance=distance))
        return True


class ScrollTrigger:
    """
    Emits "fetch requested" when the sentinel approaches the viewport.

    The guard is checked when arming and again when the debounce window
    closes, so a request is never emitted against a controller that has
    started loading, exhausted or entered an error meanwhile.
    """

    def __init__(
        self,
        watcher: VisibilityWatcher,
        guard: Callable[[], bool],
        on_fetch_requested: Callable[[], object],
        region: str = SENTINEL_REGION,
        margin: float | None = None,
        debounce: float | None = None,
    ) -> None:
        self._watcher = watcher
        self._guard = guard
        self._on_fetch_requested = on_fetch_requested
        self.region = region
        self.margin = settings.scroll_margin if margin is None else margin
        self.debounce = settings.scroll_debounce if debounce is None else debounce

        self._pending: asyncio.TimerHandle | None = None
        self._attached = False
        self._closed = False
        self.sentinel_visible = False
        self.requests_emitted = 0

    @property
    def pending(self) -> bool:
        """Whether a debounced request is waiting to fire."""
        return self._pending is not None

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        """Start watching the sentinel region."""
        if self._closed:
            raise RuntimeError("Scroll trigger is closed")
        if not self._attached:
            self._watcher.observe(self.region, self._on_visibility)
            self._attached = True

    def close(self) -> None:
        """Stop watching and discard any pending request. Safe to call twice."""
        self._closed = True
        self._cancel_pending()
        if self._attached:
            self._attached = False
            self._watcher.unobserve(self.region)

    def rearm(self) -> None:
        """
        Re-evaluate after the controller's state changed.

        If the sentinel is still in range once a fetch settles (or filters
        are cleared), another debounced request is armed.
        """
        if self.sentinel_visible and self._pending is None:
            self._arm()

    def _on_visibility(self, event: VisibilityEvent) -> None:
        if self._closed:
            return
        self.sentinel_visible = event.is_intersecting or (
            event.distance is not None and event.distance <= self.margin
        )
        if self.sentinel_visible:
            self._arm()
        else:
            self._cancel_pending()

    def _arm(self) -> None:
        if self._closed or not self._guard():
            return
        self._cancel_pending()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.debounce, self._fire)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self) -> None:
        self._pending = None
        if self._closed or not self.sentinel_visible or not self._guard():
            return
        self.requests_emitted += 1
        logger.debug("fetch_requested", extra={"region": self.region})
        self._on_fetch_requested()
