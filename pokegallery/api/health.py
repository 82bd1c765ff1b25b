"""
Health check endpoint.

Provides a liveness probe.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pokegallery.api.dependencies import get_registry
from pokegallery.services.gallery_session import SessionRegistry

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    active_sessions: int = 0


@router.get("/health", response_model=HealthResponse)
async def health(
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running. Does not contact the
    catalog service.
    """
    return HealthResponse(status="healthy", active_sessions=len(registry))
