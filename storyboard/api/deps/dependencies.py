"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived objects (session
factory, image service, job manager) are built once in the application
lifespan and stored on app.state; these functions hand them to routes.

Dependencies: fastapi, storyboard.application, storyboard.core
System role: DI container for service injection
"""

from typing import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storyboard.application.services.image_service import ImageService
from storyboard.application.services.script_service import ScriptService
from storyboard.core.job_manager import JobManager


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Get the shared async session factory."""
    return request.app.state.session_factory


async def get_db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncIterator[AsyncSession]:
    """
    Yield a request-scoped async session.

    Args:
        session_factory: Injected session factory

    Yields:
        AsyncSession: Closed automatically after the request
    """
    async with session_factory() as session:
        yield session


def get_image_service(request: Request) -> ImageService:
    """Get the shared image service."""
    return request.app.state.image_service


def get_job_manager(request: Request) -> JobManager:
    """Get the process-wide job manager."""
    return request.app.state.job_manager


def get_script_service(
    db: AsyncSession = Depends(get_db_session),
    image_service: ImageService = Depends(get_image_service),
) -> ScriptService:
    """
    Get script service instance.

    Args:
        db: Async database session (injected via Depends)
        image_service: Shared image service (injected via Depends)

    Returns:
        ScriptService: Script service instance
    """
    return ScriptService(db=db, image_service=image_service)
