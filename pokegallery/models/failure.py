"""
Failure taxonomy for catalog fetches.

Every failure that can reach the user is classified. Fetch failures are
recovered at the pagination controller boundary and surfaced as a single
human-readable message; none of them are fatal to the process.

Classes:
- TransportError: the request could not complete
- HttpStatusError: the server answered with a non-success status
- ShapeError: the body matched no known response shape (treated as empty)
- RecordNotFoundError: the detail endpoint has no such record
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"
    SESSION_NOT_FOUND = "session_not_found"

    # Upstream failures
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    UNRECOGNIZED_SHAPE = "unrecognized_shape"

    # State machine refusals
    INVALID_STATE = "invalid_state"

    UNKNOWN = "unknown"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    `status_code` is the HTTP status the API layer answers with.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)


# =============================================================================
# FETCH FAILURES
# =============================================================================


class FetchError(KnownError):
    """
    A page or record fetch that did not produce usable data.

    Attributes:
        status: Upstream HTTP status, or None when no response was received
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        status: int | None = None,
        detail: str | None = None,
        status_code: int = 502,
    ):
        self.status = status
        super().__init__(
            kind=kind,
            message=message,
            detail=detail,
            suggestion="Retry now or wait for automatic recovery.",
            status_code=status_code,
        )


class TransportError(FetchError):
    """Raised when the request could not complete (network, DNS, timeout)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(
            kind=FailureKind.TRANSPORT,
            message=f"Could not reach the catalog service: {reason}",
            detail=f"GET {url}",
        )


class HttpStatusError(FetchError):
    """Raised when the catalog service answers with a non-success status."""

    def __init__(self, url: str, status: int, body: str = ""):
        self.url = url
        super().__init__(
            kind=FailureKind.HTTP_STATUS,
            message=f"Failed to fetch Pokémon (status: {status})",
            status=status,
            detail=body[:200] or f"GET {url}",
        )


class ShapeError(FetchError):
    """
    Raised when a response body matches none of the known shapes.

    The page fetcher downgrades this to an empty page; it is never
    surfaced as a controller error.
    """

    def __init__(self, reason: str):
        super().__init__(
            kind=FailureKind.UNRECOGNIZED_SHAPE,
            message=f"Unrecognized response shape: {reason}",
        )


class RecordNotFoundError(KnownError):
    """Raised when the detail endpoint reports that a record does not exist."""

    def __init__(self, id_or_name: str):
        self.id_or_name = id_or_name
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Pokémon '{id_or_name}' not found",
            suggestion="Check the id or name and try again.",
            status_code=404,
        )
