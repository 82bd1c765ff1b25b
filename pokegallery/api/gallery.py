"""
Gallery API endpoints.

Backend-for-frontend for the infinite-scroll gallery. Each browser view
opens a session; the client reports sentinel visibility, filter changes,
page-size changes and manual retries, and reads back the filtered view
and pagination state.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from pokegallery.api.dependencies import get_registry
from pokegallery.config import settings
from pokegallery.models.failure import KnownError
from pokegallery.models.pagination import SyncStatus
from pokegallery.models.record import Record
from pokegallery.services.gallery_session import GallerySession, SessionRegistry

router = APIRouter(prefix="/gallery", tags=["gallery"])


class RecordSummary(BaseModel):
    """A record as shown on a gallery card."""

    key: int | str
    id: int | None = None
    name: str
    image: str | None = None
    categories: list[str] = Field(default_factory=list)


class PaginationSnapshot(BaseModel):
    """Pagination state as seen by the client."""

    limit: int
    offset: int
    has_more: bool
    total_count: int | None = None
    loading: bool
    status: SyncStatus
    epoch: int


class SessionSnapshot(BaseModel):
    """Everything the gallery view renders."""

    session_id: str
    pagination: PaginationSnapshot
    master_size: int
    view: list[RecordSummary] = Field(default_factory=list)
    view_size: int = 0
    search_term: str = ""
    category: str = ""
    categories: list[str] = Field(
        default_factory=list,
        description="Category names present in the loaded collection",
    )
    error: str | None = Field(default=None, description="Error banner message")
    error_status: int | None = None


class SessionCreateRequest(BaseModel):
    """Request model for opening a session."""

    page_size: int | None = Field(default=None, ge=1, examples=[50])


class FiltersRequest(BaseModel):
    """Request model for updating the local filters."""

    search_term: str = Field(default="", max_length=100, examples=["char"])
    category: str = Field(default="", max_length=50, examples=["fire"])


class PageSizeRequest(BaseModel):
    """Request model for changing the page size."""

    page_size: int = Field(..., ge=1, examples=[25])


class SentinelRequest(BaseModel):
    """Sentinel visibility report from the client."""

    visible: bool
    distance: float | None = Field(
        default=None,
        description="Layout units between the sentinel and the viewport edge",
    )


def _summarize(record: Record) -> RecordSummary:
    return RecordSummary(
        key=record.identity_key,
        id=record.id,
        name=record.name,
        image=record.image,
        categories=list(record.categories),
    )


def build_snapshot(session: GallerySession) -> SessionSnapshot:
    controller = session.controller
    state = controller.state
    view = controller.view
    return SessionSnapshot(
        session_id=session.id,
        pagination=PaginationSnapshot(
            limit=state.limit,
            offset=state.offset,
            has_more=state.has_more,
            total_count=state.total_count,
            loading=state.loading,
            status=state.status,
            epoch=state.epoch,
        ),
        master_size=len(controller.records),
        view=[_summarize(r) for r in view],
        view_size=len(view),
        search_term=controller.search_term,
        category=controller.category,
        categories=controller.categories,
        error=controller.error_message,
        error_status=state.last_error.status if state.last_error else None,
    )


def _get_session(registry: SessionRegistry, session_id: str) -> GallerySession:
    try:
        return registry.get(session_id)
    except KnownError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e


@router.post(
    "/sessions",
    response_model=SessionSnapshot,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    registry: Annotated[SessionRegistry, Depends(get_registry)],
    request: SessionCreateRequest | None = None,
) -> SessionSnapshot:
    """
    Open a gallery session and load its first page.

    A failing first page does not fail the request; the snapshot carries
    the error banner instead.
    """
    page_size = request.page_size if request else None
    if page_size is not None and page_size not in settings.allowed_page_sizes:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid page size {page_size}. Allowed: {list(settings.allowed_page_sizes)}",
        )
    session = await registry.create(page_size=page_size)
    return build_snapshot(session)


@router.get("/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionSnapshot:
    """Current view and pagination state."""
    return build_snapshot(_get_session(registry, session_id))


@router.put("/sessions/{session_id}/filters", response_model=SessionSnapshot)
async def update_filters(
    session_id: str,
    request: FiltersRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionSnapshot:
    """
    Set the search term and category.

    Filtering is local to the loaded collection; no request is made to
    the catalog service.
    """
    session = _get_session(registry, session_id)
    session.controller.set_filters(request.search_term, request.category)
    return build_snapshot(session)


@router.put("/sessions/{session_id}/page-size", response_model=SessionSnapshot)
async def change_page_size(
    session_id: str,
    request: PageSizeRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionSnapshot:
    """
    Change the page size.

    Discards the loaded collection and loads the first page again with the
    new size. Results of any request still in flight are dropped.
    """
    if request.page_size not in settings.allowed_page_sizes:
        raise HTTPException(
            status_code=422,
            detail=(
                f"Invalid page size {request.page_size}. "
                f"Allowed: {list(settings.allowed_page_sizes)}"
            ),
        )
    session = _get_session(registry, session_id)
    task = session.controller.change_page_size(request.page_size)
    if task is not None:
        await task
    return build_snapshot(session)


@router.post("/sessions/{session_id}/sentinel", response_model=SessionSnapshot)
async def report_sentinel(
    session_id: str,
    request: SentinelRequest,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionSnapshot:
    """
    Report sentinel visibility.

    Loading happens in the background after the debounce window; poll the
    session to see the result.
    """
    session = _get_session(registry, session_id)
    try:
        session.report_sentinel(request.visible, request.distance)
    except KnownError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return build_snapshot(session)


@router.post("/sessions/{session_id}/retry", response_model=SessionSnapshot)
async def retry(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> SessionSnapshot:
    """
    Retry the failed page now.

    Returns 409 if no failure is shown (neither in error nor showing a
    failure left over from automatic recovery).
    """
    session = _get_session(registry, session_id)
    task = session.controller.retry()
    if task is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Nothing to retry (status: {session.controller.status.value})",
        )
    await task
    return build_snapshot(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> Response:
    """Tear the session down."""
    try:
        await registry.remove(session_id)
    except KnownError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
