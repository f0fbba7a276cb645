"""API routers."""

from .batch import router as batch_router
from .health import router as health_router
from .providers import router as providers_router
from .scripts import router as scripts_router

__all__ = [
    "batch_router",
    "health_router",
    "providers_router",
    "scripts_router",
]
