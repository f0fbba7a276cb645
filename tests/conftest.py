"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, seeded script, fake image providers,
worker settings without delays, FastAPI app with overridable dependencies
Dependencies: pytest, sqlalchemy, aiosqlite, fastapi
System role: Test infrastructure and fixture management
"""

import uuid
from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storyboard.api.main import create_app
from storyboard.application.services.image_service import ImageService
from storyboard.boundary.db.base import Base
from storyboard.boundary.db.CRUD.script_crud import script_crud
from storyboard.boundary.db.models.job_model import JobModel
from storyboard.boundary.image_providers.base import (
    GeneratedAsset,
    GenerationOptions,
    ImageProvider,
    ImageProviderAdapter,
    ImageStyle,
)
from storyboard.boundary.image_providers.registry import ProviderRegistry
from storyboard.configs.worker import WorkerSettings
from storyboard.core.exceptions import ProviderFailureError
from storyboard.models.job import JobItemSnapshot, JobStatusSnapshot

SAMPLE_CHUNKS = [
    {
        "chunk_id": "chunk_1",
        "content": "The rocket engines ignite on the launch pad",
        "start_time": 0.0,
        "end_time": 4.5,
        "topic": "Launch",
    },
    {
        "chunk_id": "chunk_2",
        "content": "The capsule separates high above the clouds",
        "start_time": 4.5,
        "end_time": 9.0,
        "topic": "Separation",
    },
    {
        "chunk_id": "chunk_3",
        "content": "Astronauts float inside the station",
        "start_time": 9.0,
        "end_time": 14.0,
        "topic": "Orbit",
    },
]


async def count_jobs(session: AsyncSession) -> int:
    """Number of job rows, any status."""
    return await session.scalar(select(func.count()).select_from(JobModel))


class FakeImageProvider(ImageProviderAdapter):
    """
    In-memory provider adapter.

    Records every call and fails for descriptions listed in failing.
    """

    provider = ImageProvider.OPENAI
    display_name = "Fake OpenAI"
    description = "Test double"

    def __init__(self, available: bool = True, failing: set[str] | None = None) -> None:
        super().__init__(asset_store=None)
        self.available = available
        self.failing = failing or set()
        self.calls: list[tuple[str, GenerationOptions]] = []
        self._ids = count(1)

    def is_available(self) -> bool:
        return self.available

    async def generate(self, description: str, options: GenerationOptions) -> GeneratedAsset:
        self.calls.append((description, options))
        if description in self.failing:
            raise ProviderFailureError("Provider rejected the prompt", provider=self.provider.value)
        return GeneratedAsset(
            url=f"/api/images/{options.kind.value}_{next(self._ids)}.png",
            provider=self.provider,
            prompt=description,
        )


class FakeSceneProvider(FakeImageProvider):
    """Fake NanoBanana adapter that uses the scene pipeline for infographics."""

    provider = ImageProvider.NANOBANANA
    display_name = "Fake NanoBanana"
    scene_pipeline_styles = frozenset({ImageStyle.INFOGRAPHIC})


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine sharing one connection (StaticPool)
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application one."""
    return async_sessionmaker(db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Create a test session.

    Yields:
        AsyncSession: Test database session with rollback cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def seeded_script(session_factory):
    """Script with three chunks and no images, committed."""
    async with session_factory() as session:
        script = await script_crud.create_with_chunks(
            session,
            title="Space Launch",
            original_script="The rocket engines ignite...",
            chunks=[dict(chunk) for chunk in SAMPLE_CHUNKS],
        )
        await session.commit()
        return script


@pytest.fixture
def worker_settings() -> WorkerSettings:
    """Worker settings with all delays disabled."""
    return WorkerSettings(
        enabled=False,
        poll_interval_seconds=0,
        item_delay_seconds=0,
        error_backoff_seconds=0,
        item_timeout_seconds=5,
        max_item_attempts=3,
        retry_base_delay_seconds=0,
    )


@pytest.fixture
def fake_provider() -> FakeImageProvider:
    return FakeImageProvider()


@pytest.fixture
def image_service(fake_provider) -> ImageService:
    """ImageService over the fake provider without a scene analyzer."""
    return ImageService(ProviderRegistry([fake_provider]))


@pytest.fixture
def app():
    """App without lifespan; tests replace services via dependency_overrides."""
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def script_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def job_snapshot(script_id) -> JobStatusSnapshot:
    """Processing job with one of three chunks done."""
    now = datetime.now(timezone.utc)
    return JobStatusSnapshot(
        job_id=uuid.uuid4(),
        script_id=script_id,
        kind="batch_image_generation",
        status="processing",
        config={"provider": "openai", "style": "drawing", "color": "white", "quality": "high", "options": {}},
        total_chunks=3,
        processed_chunks=1,
        failed_chunks=0,
        completion_percentage=33,
        is_complete=False,
        created_at=now,
        updated_at=now,
        items=[
            JobItemSnapshot(chunk_id="chunk_1", position=0, status="completed", attempts=1,
                            image_url="/api/images/chunk_1.png"),
            JobItemSnapshot(chunk_id="chunk_2", position=1, status="processing", attempts=1),
            JobItemSnapshot(chunk_id="chunk_3", position=2, status="pending", attempts=0),
        ],
    )
