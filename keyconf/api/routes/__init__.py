"""API route modules."""

from .configs import router as configs_router
from .health import router as health_router
from .sessions import router as sessions_router

__all__ = [
    "configs_router",
    "health_router",
    "sessions_router",
]
