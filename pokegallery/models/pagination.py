from dataclasses import dataclass
from enum import Enum

from pokegallery.models.failure import FailureKind


class SyncStatus(str, Enum):
    """States of the pagination state machine."""

    IDLE = "idle"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """Snapshot of the last failed fetch, shown in the error banner."""

    message: str
    kind: FailureKind
    status: int | None = None
    offset: int = 0


@dataclass
class PaginationState:
    """
    Pagination state owned by a single controller.

    INVARIANT: `loading` is True for at most one fetch of the current epoch.
    INVARIANT: `offset` only advances after a successful, non-exhausting fetch.
    INVARIANT: `has_more` only goes False -> True through a reset.
    """

    limit: int
    offset: int = 0
    has_more: bool = True
    total_count: int | None = None
    loading: bool = False
    last_error: FetchFailure | None = None
    status: SyncStatus = SyncStatus.IDLE
    epoch: int = 0

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError(f"Page size must be positive, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"Offset must be non-negative, got {self.offset}")
