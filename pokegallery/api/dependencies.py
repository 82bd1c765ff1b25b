"""
Request dependencies.

The app lifespan places the shared HTTP client and the session registry on
`app.state`; endpoints receive them through these functions so tests can
override them.
"""

import httpx
from fastapi import Request

from pokegallery.services.gallery_session import SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    """
    Dependency that provides the session registry.

    Usage in FastAPI:
        @router.get("/items")
        async def get_items(registry: SessionRegistry = Depends(get_registry)):
            ...
    """
    registry: SessionRegistry = request.app.state.registry
    return registry


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency that provides the shared catalog HTTP client."""
    client: httpx.AsyncClient = request.app.state.http_client
    return client
