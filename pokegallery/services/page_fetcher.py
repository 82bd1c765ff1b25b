"""
Page fetcher.

Issues one paginated request against the remote list endpoint and
normalizes its response body. There are no retries here; recovery is the
pagination controller's job.

Accepted body shapes:
- a bare list of records
- an object carrying the list under one of PAGE_LIST_KEYS, optionally
  alongside an integer total count under one of TOTAL_COUNT_KEYS
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from pokegallery.config import PAGE_LIST_KEYS, TOTAL_COUNT_KEYS, settings
from pokegallery.models.failure import HttpStatusError, ShapeError, TransportError
from pokegallery.models.record import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PageResult:
    """
    One fetched page.

    Attributes:
        records: Normalized records in wire order
        total_count: Server-reported total, when present and usable
        malformed: True when the body matched no known shape and was
                   treated as an empty page
    """

    records: tuple[Record, ...] = ()
    total_count: int | None = None
    malformed: bool = False


class PageSource(Protocol):
    """Anything that can fetch a page. The controller depends only on this."""

    async def fetch_page(self, limit: int, offset: int) -> PageResult: ...


def _extract_total_count(body: Mapping[str, Any]) -> int | None:
    for key in TOTAL_COUNT_KEYS:
        value = body.get(key)
        # Advisory only: ignore flags, negatives and non-integers
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
    return None


def parse_page_body(body: Any) -> PageResult:
    """
    Normalize a decoded list-endpoint body.

    Args:
        body: Decoded JSON body

    Returns:
        PageResult with normalized records and optional total count

    Raises:
        ShapeError: If the body matches none of the known shapes
    """
    if isinstance(body, list):
        return PageResult(records=tuple(Record.from_payload(item) for item in body))

    if isinstance(body, Mapping):
        for key in PAGE_LIST_KEYS:
            items = body.get(key)
            if isinstance(items, list):
                return PageResult(
                    records=tuple(Record.from_payload(item) for item in items),
                    total_count=_extract_total_count(body),
                )
        raise ShapeError(f"object without a record list (keys: {sorted(body)[:10]})")

    raise ShapeError(f"unexpected body type {type(body).__name__}")


class PageFetcher:
    """
    Fetches pages from `GET {base_url}{items_path}?limit={limit}&offset={offset}`.

    The HTTP client is injected so a session (or the app) can share one
    connection pool; the fetcher never closes a client it did not create.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str | None = None,
        items_path: str | None = None,
    ) -> None:
        self._client = client
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.items_path = items_path or settings.items_path

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.items_path}"

    async def fetch_page(self, limit: int, offset: int) -> PageResult:
        """
        Fetch one page of `limit` records starting at `offset`.

        Returns:
            PageResult. An unrecognized body yields an empty, malformed page.

        Raises:
            TransportError: If the request could not complete
            HttpStatusError: If the response status is not 2xx
        """
        try:
            response = await self._client.get(self.url, params={"limit": limit, "offset": offset})
        except httpx.RequestError as e:
            raise TransportError(self.url, f"{e.__class__.__name__}: {e!s}") from e

        if not response.is_success:
            raise HttpStatusError(self.url, response.status_code, response.text)

        try:
            page = parse_page_body(response.json())
        except (json.JSONDecodeError, UnicodeDecodeError, ShapeError) as e:
            logger.warning(
                "page_shape_unrecognized",
                extra={"limit": limit, "offset": offset, "reason": str(e)},
            )
            return PageResult(malformed=True)

        logger.debug(
            "page_fetched",
            extra={
                "limit": limit,
                "offset": offset,
                "received": len(page.records),
                "total_count": page.total_count,
            },
        )
        return page


def build_client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create the HTTP client used for catalog requests."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout or settings.request_timeout),
        headers={"Accept": "application/json", "User-Agent": settings.user_agent},
        follow_redirects=True,
    )
