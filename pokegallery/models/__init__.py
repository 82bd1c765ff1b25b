from pokegallery.models.detail import (
    AbilityEntry,
    RecordDetail,
    StatEntry,
    normalize_abilities,
    normalize_moves,
    normalize_stats,
)
from pokegallery.models.failure import (
    FailureKind,
    FetchError,
    HttpStatusError,
    KnownError,
    RecordNotFoundError,
    ShapeError,
    TransportError,
)
from pokegallery.models.pagination import FetchFailure, PaginationState, SyncStatus
from pokegallery.models.record import IdentityKey, Record, normalize_category

__all__ = [
    "AbilityEntry",
    "FailureKind",
    "FetchError",
    "FetchFailure",
    "HttpStatusError",
    "IdentityKey",
    "KnownError",
    "PaginationState",
    "Record",
    "RecordDetail",
    "RecordNotFoundError",
    "ShapeError",
    "StatEntry",
    "SyncStatus",
    "TransportError",
    "normalize_abilities",
    "normalize_category",
    "normalize_moves",
    "normalize_stats",
]
