"""API route modules."""

from contentlab.api.routes.health import router as health_router
from contentlab.api.routes.content import router as content_router
from contentlab.api.routes.keywords import router as keywords_router
from contentlab.api.routes.library import router as library_router

__all__ = [
    "health_router",
    "content_router",
    "keywords_router",
    "library_router",
]
