"""
Headless catalog sync.

Drives a pagination controller page by page until the catalog is exhausted
(or a fetch fails) and reports how many unique records were collected.
Useful to check the upstream service and its paging behaviour without a UI.
"""

import argparse
import asyncio
import logging

import httpx

from pokegallery.models.pagination import SyncStatus
from pokegallery.services.page_fetcher import PageFetcher, build_client
from pokegallery.services.pagination_controller import PaginationController

logger = logging.getLogger(__name__)


async def run_sync(
    page_size: int | None = None,
    max_pages: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> int:
    """
    Page through the catalog.

    Args:
        page_size: Records per request (defaults to settings)
        max_pages: Stop after this many pages, None for no limit
        client: HTTP client to use; one is created (and closed) if omitted

    Returns:
        Number of unique records collected
    """
    owns_client = client is None
    http = client or build_client()
    controller = PaginationController(PageFetcher(http), page_size=page_size)

    try:
        pages = 0
        while max_pages is None or pages < max_pages:
            if not await controller.load_more():
                break
            pages += 1

        if controller.status is SyncStatus.ERROR:
            logger.error(
                "Sync stopped at offset %d: %s",
                controller.state.offset,
                controller.error_message,
            )
        else:
            logger.info("Fetched %d pages (status: %s)", pages, controller.status.value)

        count = len(controller.records)
        logger.info("Collected %d unique records", count)
        return count
    finally:
        await controller.close()
        if owns_client:
            await http.aclose()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Page through the remote catalog.")
    parser.add_argument("--page-size", type=int, default=None, help="Records per request")
    parser.add_argument("--max-pages", type=int, default=None, help="Stop after N pages")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_sync(page_size=args.page_size, max_pages=args.max_pages))


if __name__ == "__main__":
    main()
