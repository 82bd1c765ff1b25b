import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pokegallery.api import gallery_router, health_router, pokemon_router
from pokegallery.config import settings
from pokegallery.services.gallery_session import SessionRegistry
from pokegallery.services.page_fetcher import PageFetcher, build_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: shared HTTP client, idle-session sweeper, teardown on exit."""
    client = build_client()
    registry = SessionRegistry(lambda: PageFetcher(client))
    app.state.http_client = client
    app.state.registry = registry
    sweeper = asyncio.create_task(registry.run_sweeper())
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        await registry.close_all()
        await client.aclose()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("pokegallery"),
    lifespan=lifespan,
)

app.include_router(gallery_router)
app.include_router(health_router)
app.include_router(pokemon_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
