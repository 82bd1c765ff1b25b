"""
Single-record fetch for the detail view.

Independent from the pagination controller's retry policy: a detail fetch
retries in place a bounded number of times with linearly increasing delay.
A 404 is final and is not retried.
"""

import asyncio
import json
import logging
from collections.abc import Mapping
from urllib.parse import quote

import httpx

from pokegallery.config import settings
from pokegallery.models.detail import RecordDetail
from pokegallery.models.failure import (
    FetchError,
    HttpStatusError,
    RecordNotFoundError,
    ShapeError,
    TransportError,
)

logger = logging.getLogger(__name__)


def detail_url(id_or_name: str | int, base_url: str | None = None) -> str:
    base = (base_url or settings.api_base_url).rstrip("/")
    return f"{base}{settings.items_path}/{quote(str(id_or_name), safe='')}"


async def _fetch_once(client: httpx.AsyncClient, url: str, id_or_name: str | int) -> RecordDetail:
    try:
        response = await client.get(url)
    except httpx.RequestError as e:
        raise TransportError(url, f"{e.__class__.__name__}: {e!s}") from e

    if response.status_code == 404:
        raise RecordNotFoundError(str(id_or_name))
    if not response.is_success:
        raise HttpStatusError(url, response.status_code, response.text)

    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ShapeError("detail body is not JSON") from e
    if not isinstance(body, Mapping):
        raise ShapeError(f"detail body is a {type(body).__name__}, expected an object")

    return RecordDetail.from_payload(body)


async def fetch_record_detail(
    client: httpx.AsyncClient,
    id_or_name: str | int,
    base_url: str | None = None,
    max_attempts: int | None = None,
    base_delay: float | None = None,
) -> RecordDetail:
    """
    Fetch one record by id or name.

    Args:
        client: HTTP client
        id_or_name: Record id or name
        base_url: Catalog service base URL (defaults to settings)
        max_attempts: Attempts before giving up (defaults to settings)
        base_delay: Delay unit; the wait after attempt n is n * base_delay

    Returns:
        Normalized RecordDetail

    Raises:
        RecordNotFoundError: If the service reports 404
        FetchError: The last failure once all attempts are used
    """
    attempts = max(1, settings.detail_max_attempts if max_attempts is None else max_attempts)
    delay_unit = settings.detail_retry_base_delay if base_delay is None else base_delay
    url = detail_url(id_or_name, base_url)

    for attempt in range(1, attempts):
        try:
            return await _fetch_once(client, url, id_or_name)
        except FetchError:
            delay = attempt * delay_unit
            logger.warning(
                "detail_fetch_retry",
                extra={"id_or_name": str(id_or_name), "attempt": attempt, "delay": delay},
            )
            await asyncio.sleep(delay)

    try:
        return await _fetch_once(client, url, id_or_name)
    except FetchError as e:
        logger.error(
            "detail_fetch_failed",
            extra={"id_or_name": str(id_or_name), "attempts": attempts, "error": e.message},
        )
        raise
