"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    batch_router,
    health_router,
    providers_router,
    scripts_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(scripts_router)
api_router.include_router(batch_router)
api_router.include_router(providers_router)

__all__ = ["api_router"]
