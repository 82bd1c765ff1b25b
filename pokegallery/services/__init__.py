"""
Gallery services.

Incremental synchronization of the remote catalog: page fetching, merging,
pagination, scroll triggering, filtering and recovery.
"""

from pokegallery.services.collection_merger import MergeResult, merge
from pokegallery.services.detail_fetcher import detail_url, fetch_record_detail
from pokegallery.services.filter_engine import (
    available_categories,
    filter_records,
    is_filter_active,
    matches_category,
    matches_name,
)
from pokegallery.services.gallery_session import (
    GallerySession,
    SessionNotFoundError,
    SessionRegistry,
)
from pokegallery.services.page_fetcher import (
    PageFetcher,
    PageResult,
    PageSource,
    build_client,
    parse_page_body,
)
from pokegallery.services.pagination_controller import PaginationController
from pokegallery.services.retry_policy import RetryPolicy
from pokegallery.services.scroll_trigger import (
    SENTINEL_REGION,
    ManualVisibilityWatcher,
    ScrollTrigger,
    VisibilityEvent,
    VisibilityWatcher,
)

__all__ = [
    "GallerySession",
    "ManualVisibilityWatcher",
    "MergeResult",
    "PageFetcher",
    "PageResult",
    "PageSource",
    "PaginationController",
    "RetryPolicy",
    "SENTINEL_REGION",
    "ScrollTrigger",
    "SessionNotFoundError",
    "SessionRegistry",
    "VisibilityEvent",
    "VisibilityWatcher",
    "available_categories",
    "build_client",
    "detail_url",
    "fetch_record_detail",
    "filter_records",
    "is_filter_active",
    "matches_category",
    "matches_name",
    "merge",
    "parse_page_body",
]
