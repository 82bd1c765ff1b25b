from pokegallery.api.gallery import router as gallery_router
from pokegallery.api.health import router as health_router
from pokegallery.api.pokemon import router as pokemon_router

__all__ = [
    "gallery_router",
    "health_router",
    "pokemon_router",
]
