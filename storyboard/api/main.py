"""
FastAPI application with assembled routers.

Initializes the FastAPI app, wires shared resources (database, image
providers, job manager) onto app.state in the lifespan, and configures
the uvicorn server.

Dependencies: fastapi, uvicorn, storyboard.api.routers, storyboard.core.job_manager
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storyboard.api import api_router
from storyboard.application.services.image_service import ImageService
from storyboard.boundary.db.connection import get_async_engine, get_async_session_factory
from storyboard.boundary.db.create_tables import create_all_tables
from storyboard.boundary.image_providers import build_provider_registry
from storyboard.boundary.llm import SceneAnalyzer
from storyboard.boundary.storage import build_asset_store
from storyboard.configs import get_settings
from storyboard.core.job_manager import JobManager
from storyboard.observability.logger import configure_logging
from storyboard.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup builds the engine, creates tables, assembles the image service
    and starts the job manager loop. Startup fails if interrupted jobs
    cannot be reconciled. Shutdown stops the loop before closing clients.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"{__name__}:lifespan - START environment={settings.environment}")

    engine = get_async_engine()
    await create_all_tables(engine)
    session_factory = get_async_session_factory(engine)

    asset_store = build_asset_store(settings.storage)
    registry = build_provider_registry(settings.providers, asset_store)
    scene_analyzer = SceneAnalyzer(
        api_key=settings.providers.openai_api_key,
        model=settings.providers.scene_analysis_model,
    )
    image_service = ImageService(registry, scene_analyzer)
    job_manager = JobManager(session_factory, image_service, settings.worker)

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.image_service = image_service
    app.state.job_manager = job_manager

    if settings.worker.enabled:
        await job_manager.start()
    else:
        logger.info(f"{__name__}:lifespan - Job loop disabled by configuration")

    logger.info(
        f"{__name__}:lifespan - END startup, providers available: "
        f"{image_service.available_providers()}"
    )

    yield

    # Shutdown
    await job_manager.stop()
    await image_service.aclose()
    await engine.dispose()
    logger.info(f"{__name__}:lifespan - Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()

    app = FastAPI(
        title="Storyboard API",
        description="Batch image generation for script-to-storyboard videos",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Serve locally stored images
    if settings.storage.backend.lower() == "local":
        images_dir = Path(settings.storage.local_dir)
        images_dir.mkdir(parents=True, exist_ok=True)
        app.mount(
            settings.storage.public_path,
            StaticFiles(directory=images_dir),
            name="images",
        )

    # Register API routes
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "storyboard.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
