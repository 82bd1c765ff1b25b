"""
Pagination controller.

Owns the master collection and the pagination state, and is the only code
that mutates either. It decides whether and when to fetch the next page,
folds fetched pages in through the collection merger, detects exhaustion
and recovers from failures.

States:
    IDLE --trigger (guard holds)--> FETCHING
    FETCHING --success--> IDLE (offset += limit) | EXHAUSTED
    FETCHING --failure--> ERROR --recovery delay--> IDLE
    ERROR --manual retry--> FETCHING
    any --reset--> IDLE (offset 0, empty collection, new epoch)

All transitions run on one event loop. At most one fetch of the current
epoch is in flight; `loading` is both the gate and the signal the scroll
trigger reads. A reset bumps the epoch, and a fetch that completes under
an old epoch is discarded instead of merged.
"""

import asyncio
import logging
from collections.abc import Callable

from pokegallery.config import settings
from pokegallery.models.failure import FailureKind, FetchError
from pokegallery.models.pagination import FetchFailure, PaginationState, SyncStatus
from pokegallery.models.record import Record
from pokegallery.services.collection_merger import merge
from pokegallery.services.filter_engine import (
    available_categories,
    filter_records,
    is_filter_active,
)
from pokegallery.services.page_fetcher import PageResult, PageSource
from pokegallery.services.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class PaginationController:
    """Incremental synchronization of a remote paginated catalog."""

    def __init__(
        self,
        source: PageSource,
        page_size: int | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._source = source
        self._retry = retry_policy or RetryPolicy()
        self.state = PaginationState(limit=page_size or settings.default_page_size)
        self._records: tuple[Record, ...] = ()
        self.search_term = ""
        self.category = ""

        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[Listener] = []
        self._closed = False

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def records(self) -> tuple[Record, ...]:
        """The master collection (unique by identity key)."""
        return self._records

    @property
    def status(self) -> SyncStatus:
        return self.state.status

    @property
    def view(self) -> list[Record]:
        """The filtered view, recomputed from the current inputs."""
        return filter_records(self._records, self.search_term, self.category)

    @property
    def categories(self) -> list[str]:
        return available_categories(self._records)

    @property
    def error_message(self) -> str | None:
        failure = self.state.last_error
        return failure.message if failure else None

    def should_fetch_more(self) -> bool:
        """
        Guard for automatic fetches.

        True iff more data may exist, nothing is loading, the controller is
        idle (not exhausted or waiting out an error), no filter is active,
        and the advisory total count (if any) has not been reached.

        Filtering is purely local: while a filter is active the collection
        fetched so far is what gets filtered, and no request is made.
        """
        s = self.state
        if self._closed or not s.has_more or s.loading or s.status is not SyncStatus.IDLE:
            return False
        if is_filter_active(self.search_term, self.category):
            return False
        if s.total_count is not None and len(self._records) >= s.total_count:
            return False
        return True

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        """Register a callback run after every state change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def trigger(self) -> asyncio.Task[None] | None:
        """
        Start fetching the next page if the guard holds.

        Returns:
            The fetch task, or None when no fetch was started
        """
        if not self.should_fetch_more():
            return None
        return self._start_fetch()

    async def load_more(self) -> bool:
        """
        Trigger a fetch and wait for it to settle.

        Returns:
            False if the guard refused the fetch
        """
        task = self.trigger()
        if task is None:
            return False
        await task
        return True

    @property
    def can_retry(self) -> bool:
        """
        Whether the error banner's retry action applies.

        True in ERROR, and also after automatic recovery while the failure
        message is still shown.
        """
        s = self.state
        if self._closed or s.loading:
            return False
        if s.status is SyncStatus.ERROR:
            return True
        return s.status is SyncStatus.IDLE and s.last_error is not None

    def retry(self) -> asyncio.Task[None] | None:
        """
        Manual retry from the error banner.

        Fetches the failed page again immediately, clears the error and
        supersedes the scheduled automatic recovery. Filters do not block
        a manual retry.

        Returns:
            The fetch task, or None when there is no failure to retry
        """
        if not self.can_retry:
            return None
        self._retry.cancel()
        logger.info("manual_retry", extra={"offset": self.state.offset})
        return self._start_fetch()

    def reset(self, page_size: int | None = None) -> None:
        """
        Return to a fresh IDLE state, discarding the master collection.

        Any fetch still in flight belongs to the previous epoch and its
        result will be discarded when it arrives.

        Raises:
            ValueError: If page_size is not positive
        """
        limit = self.state.limit if page_size is None else page_size
        fresh = PaginationState(limit=limit, epoch=self.state.epoch + 1)

        self._retry.cancel()
        self.state = fresh
        self._records = ()
        logger.info("pagination_reset", extra={"limit": limit, "epoch": fresh.epoch})
        self._notify()

    def change_page_size(self, page_size: int) -> asyncio.Task[None] | None:
        """
        Apply a new page size: reset, then load the first page of the new epoch.

        Returns:
            The fetch task for the first page, or None if the guard refused it
        """
        self.reset(page_size)
        return self.trigger()

    def set_search_term(self, search_term: str) -> None:
        self.search_term = search_term
        self._notify()

    def set_category(self, category: str) -> None:
        self.category = category
        self._notify()

    def set_filters(self, search_term: str, category: str) -> None:
        self.search_term = search_term
        self.category = category
        self._notify()

    async def close(self) -> None:
        """
        Tear down: drop the pending recovery and cancel outstanding fetches.

        Safe to call more than once.
        """
        self._closed = True
        self._retry.cancel()
        self._listeners.clear()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Fetch lifecycle
    # -------------------------------------------------------------------------

    def _start_fetch(self) -> asyncio.Task[None]:
        s = self.state
        s.loading = True
        s.status = SyncStatus.FETCHING
        s.last_error = None

        task = asyncio.create_task(self._run_fetch(s.epoch, s.limit, s.offset))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._notify()
        return task

    async def _run_fetch(self, epoch: int, limit: int, offset: int) -> None:
        try:
            page = await self._source.fetch_page(limit, offset)
        except FetchError as e:
            failure = FetchFailure(message=e.message, kind=e.kind, status=e.status, offset=offset)
            self._on_failure(epoch, failure)
            return
        except Exception as e:
            logger.exception("fetch_unexpected_error", extra={"offset": offset})
            failure = FetchFailure(
                message=f"Unexpected error while loading: {e.__class__.__name__}",
                kind=FailureKind.UNKNOWN,
                offset=offset,
            )
            self._on_failure(epoch, failure)
            return

        self._on_success(epoch, limit, offset, page)

    def _is_stale(self, epoch: int, offset: int) -> bool:
        if epoch == self.state.epoch and not self._closed:
            return False
        logger.info(
            "stale_page_discarded",
            extra={"fetch_epoch": epoch, "current_epoch": self.state.epoch, "offset": offset},
        )
        return True

    def _on_success(self, epoch: int, limit: int, offset: int, page: PageResult) -> None:
        if self._is_stale(epoch, offset):
            return

        s = self.state
        result = merge(self._records, page.records)
        self._records = result.records
        s.loading = False
        if page.total_count is not None:
            s.total_count = page.total_count

        total_reached = s.total_count is not None and len(self._records) >= s.total_count
        short_page = len(page.records) < limit

        logger.info(
            "page_merged",
            extra={
                "offset": offset,
                "received": len(page.records),
                "inserted": result.inserted_count,
                "master_size": len(self._records),
            },
        )

        if short_page or result.inserted_count == 0 or total_reached:
            s.has_more = False
            s.status = SyncStatus.EXHAUSTED
            logger.info(
                "pagination_exhausted",
                extra={
                    "short_page": short_page,
                    "no_new_records": result.inserted_count == 0,
                    "total_reached": total_reached,
                    "master_size": len(self._records),
                },
            )
        else:
            s.offset += limit
            s.status = SyncStatus.IDLE

        self._notify()

    def _on_failure(self, epoch: int, failure: FetchFailure) -> None:
        if self._is_stale(epoch, failure.offset):
            return

        s = self.state
        s.loading = False
        s.status = SyncStatus.ERROR
        s.last_error = failure
        logger.warning(
            "fetch_failed",
            extra={"offset": failure.offset, "status": failure.status, "error": failure.message},
        )
        self._retry.schedule(self._recover)
        self._notify()

    def _recover(self) -> None:
        # Back to IDLE so the next trigger retries the same offset; the
        # message stays visible until that fetch starts.
        if self._closed or self.state.status is not SyncStatus.ERROR:
            return
        self.state.status = SyncStatus.IDLE
        logger.info("recovered", extra={"offset": self.state.offset})
        self._notify()
