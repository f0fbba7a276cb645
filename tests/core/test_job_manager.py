"""
Test suite for JobManager.

Runs jobs end to end against an in-memory SQLite store with a fake image
provider. The processing loop is driven through run_once() so every test
stays sequential on the shared connection.

System role: Verification of batch job scheduling, retries and recovery
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from conftest import SAMPLE_CHUNKS, FakeImageProvider, count_jobs
from storyboard.application.services.image_service import ImageService
from storyboard.boundary.db.CRUD.job_crud import job_crud
from storyboard.boundary.db.CRUD.script_crud import script_crud
from storyboard.boundary.db.models.job_model import (
    JobItemModel,
    JobItemStatus,
    JobModel,
    JobStatus,
)
from storyboard.boundary.db.models.script_model import ChunkModel
from storyboard.boundary.image_providers.base import GenerationConfig, ImageStyle
from storyboard.boundary.image_providers.registry import ProviderRegistry
from storyboard.configs.worker import WorkerSettings
from storyboard.core.exceptions import (
    NoWorkRemainingError,
    PersistenceFailureError,
    ProviderUnavailableError,
    SubjectNotFoundError,
)
from storyboard.core.job_manager import JobManager


@pytest.fixture
def config() -> GenerationConfig:
    return GenerationConfig(style=ImageStyle.DRAWING, color="blue", quality="medium")


@pytest.fixture
def manager(session_factory, image_service, worker_settings) -> JobManager:
    return JobManager(session_factory, image_service, worker_settings)


async def load_job(session_factory, job_id) -> JobModel:
    async with session_factory() as session:
        return await job_crud.get_by_id(session, job_id)


def items_by_chunk(job: JobModel) -> dict:
    return {item.chunk_id: item for item in job.items}


class TestCreateBatchJob:
    """Test suite for JobManager.create_batch_job()."""

    @pytest.mark.asyncio
    async def test_create_batch_job_should_queue_pending_job_with_one_item_per_chunk(
        self, manager, seeded_script, config
    ) -> None:
        # Act
        snapshot = await manager.create_batch_job(seeded_script.id, config)

        # Assert
        assert snapshot.status == "pending"
        assert snapshot.total_chunks == 3
        assert snapshot.processed_chunks == 0
        assert snapshot.completion_percentage == 0
        assert snapshot.is_complete is False
        assert [item.chunk_id for item in snapshot.items] == ["chunk_1", "chunk_2", "chunk_3"]
        assert snapshot.config["style"] == "drawing"
        assert snapshot.config["color"] == "blue"

    @pytest.mark.asyncio
    async def test_create_batch_job_should_return_existing_active_job(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Act
        first = await manager.create_batch_job(seeded_script.id, config)
        second = await manager.create_batch_job(
            seeded_script.id, GenerationConfig(style=ImageStyle.ABSTRACT)
        )

        # Assert
        assert second.job_id == first.job_id
        assert second.config["style"] == "drawing"
        async with session_factory() as session:
            assert await count_jobs(session) == 1

    @pytest.mark.asyncio
    async def test_create_batch_job_should_reuse_winner_after_unique_index_conflict(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Arrange
        first = await manager.create_batch_job(seeded_script.id, config)
        original = job_crud.get_active_for_script
        lookups = []

        async def miss_first_lookup(session, script_id, *args, **kwargs):
            lookups.append(script_id)
            if len(lookups) == 1:
                return None
            return await original(session, script_id, *args, **kwargs)

        # Act
        with patch.object(job_crud, "get_active_for_script", side_effect=miss_first_lookup):
            second = await manager.create_batch_job(seeded_script.id, config)

        # Assert
        assert second.job_id == first.job_id
        assert len(lookups) == 2
        async with session_factory() as session:
            assert await count_jobs(session) == 1

    @pytest.mark.asyncio
    async def test_create_batch_job_should_only_cover_chunks_without_images(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Arrange
        async with session_factory() as session:
            await script_crud.update_chunk_asset(
                session, seeded_script.id, "chunk_1", image_url="/api/images/existing.png"
            )
            await session.commit()

        # Act
        snapshot = await manager.create_batch_job(seeded_script.id, config)

        # Assert
        assert snapshot.total_chunks == 2
        assert [item.chunk_id for item in snapshot.items] == ["chunk_2", "chunk_3"]

    @pytest.mark.asyncio
    async def test_create_batch_job_should_raise_when_every_chunk_has_an_image(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Arrange
        async with session_factory() as session:
            for chunk in SAMPLE_CHUNKS:
                await script_crud.update_chunk_asset(
                    session, seeded_script.id, chunk["chunk_id"], image_url="/api/images/x.png"
                )
            await session.commit()

        # Act & Assert
        with pytest.raises(NoWorkRemainingError):
            await manager.create_batch_job(seeded_script.id, config)
        async with session_factory() as session:
            assert await count_jobs(session) == 0

    @pytest.mark.asyncio
    async def test_create_batch_job_should_raise_when_script_missing(
        self, manager, config, db_engine
    ) -> None:
        with pytest.raises(SubjectNotFoundError):
            await manager.create_batch_job(uuid.uuid4(), config)

    @pytest.mark.asyncio
    async def test_create_batch_job_should_raise_when_provider_unavailable(
        self, manager, seeded_script, config, fake_provider, session_factory
    ) -> None:
        # Arrange
        fake_provider.available = False

        # Act & Assert
        with pytest.raises(ProviderUnavailableError):
            await manager.create_batch_job(seeded_script.id, config)
        async with session_factory() as session:
            assert await count_jobs(session) == 0

    @pytest.mark.asyncio
    async def test_create_batch_job_should_allow_new_job_after_pause(
        self, manager, seeded_script, config
    ) -> None:
        # Arrange
        first = await manager.create_batch_job(seeded_script.id, config)
        await manager.cancel_batch_job(seeded_script.id)

        # Act
        second = await manager.create_batch_job(seeded_script.id, config)

        # Assert
        assert second.job_id != first.job_id
        assert second.status == "pending"


class TestRunOnce:
    """Test suite for JobManager.run_once() job execution."""

    @pytest.mark.asyncio
    async def test_run_once_should_return_false_when_queue_empty(
        self, manager, seeded_script
    ) -> None:
        assert await manager.run_once() is False

    @pytest.mark.asyncio
    async def test_run_once_should_complete_job_and_write_images_back(
        self, manager, seeded_script, config, fake_provider, session_factory
    ) -> None:
        # Arrange
        created = await manager.create_batch_job(seeded_script.id, config)

        # Act
        processed = await manager.run_once()

        # Assert
        assert processed is True
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.COMPLETED
        assert job.processed_chunks == 3
        assert job.failed_chunks == 0
        assert job.completed_at is not None
        assert job.error is None
        assert all(item.status == JobItemStatus.COMPLETED for item in job.items)
        assert all(item.attempts == 1 for item in job.items)

        assert [call[0] for call in fake_provider.calls] == [c["content"] for c in SAMPLE_CHUNKS]
        assert fake_provider.calls[0][1].style == ImageStyle.DRAWING
        assert fake_provider.calls[0][1].color == "blue"

        async with session_factory() as session:
            missing = await script_crud.find_chunks_missing_asset(session, seeded_script.id)
            chunk = await script_crud.get_chunk(session, seeded_script.id, "chunk_1")
        assert missing == []
        assert chunk.image_url == items_by_chunk(job)["chunk_1"].image_url
        assert chunk.image_provider == "openai"
        assert chunk.image_generated_at is not None

        assert await manager.run_once() is False

    @pytest.mark.asyncio
    async def test_run_once_should_mark_job_failed_when_item_exhausts_attempts(
        self, session_factory, seeded_script, config, worker_settings
    ) -> None:
        # Arrange
        provider = FakeImageProvider(failing={SAMPLE_CHUNKS[1]["content"]})
        settings = worker_settings.model_copy(update={"max_item_attempts": 1})
        manager = JobManager(session_factory, ImageService(ProviderRegistry([provider])), settings)
        created = await manager.create_batch_job(seeded_script.id, config)

        # Act
        await manager.run_once()

        # Assert
        snapshot = await manager.get_job_status(seeded_script.id)
        assert snapshot.job_id == created.job_id
        assert snapshot.status == "failed"
        assert snapshot.error == "1 of 3 chunks failed to generate"
        assert snapshot.processed_chunks == 2
        assert snapshot.failed_chunks == 1
        assert snapshot.completion_percentage == 67
        assert snapshot.is_complete is False

        statuses = {item.chunk_id: item for item in snapshot.items}
        assert statuses["chunk_2"].status == "failed"
        assert statuses["chunk_2"].error == "Provider rejected the prompt"
        assert snapshot.processed_chunks == sum(
            1 for item in snapshot.items if item.status == "completed"
        )
        assert await manager.run_once() is False

    @pytest.mark.asyncio
    async def test_run_once_should_requeue_and_retry_only_failed_items(
        self, session_factory, seeded_script, config, worker_settings
    ) -> None:
        # Arrange
        failing_content = SAMPLE_CHUNKS[1]["content"]
        provider = FakeImageProvider(failing={failing_content})
        manager = JobManager(
            session_factory, ImageService(ProviderRegistry([provider])), worker_settings
        )
        created = await manager.create_batch_job(seeded_script.id, config)

        # Act: first pass fails chunk_2 and puts the job back in the queue
        await manager.run_once()
        job = await load_job(session_factory, created.job_id)

        # Assert
        assert job.status == JobStatus.PENDING
        assert job.retry_after is not None
        assert job.failed_chunks == 1

        # Act: provider recovers, second pass only touches chunk_2
        provider.failing.clear()
        assert await manager.run_once() is True

        # Assert
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.COMPLETED
        assert job.failed_chunks == 0
        assert items_by_chunk(job)["chunk_2"].attempts == 2
        assert items_by_chunk(job)["chunk_1"].attempts == 1
        assert [call[0] for call in provider.calls].count(failing_content) == 2
        assert len(provider.calls) == 4

    @pytest.mark.asyncio
    async def test_run_once_should_skip_provider_for_chunk_illustrated_meanwhile(
        self, manager, seeded_script, config, fake_provider, session_factory
    ) -> None:
        # Arrange: single-chunk generation finished after the job was created
        created = await manager.create_batch_job(seeded_script.id, config)
        async with session_factory() as session:
            await script_crud.update_chunk_asset(
                session,
                seeded_script.id,
                "chunk_1",
                image_url="/api/images/manual.png",
                provider="gemini",
            )
            await session.commit()

        # Act
        await manager.run_once()

        # Assert
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.COMPLETED
        assert items_by_chunk(job)["chunk_1"].image_url == "/api/images/manual.png"
        assert items_by_chunk(job)["chunk_1"].attempts == 0
        assert SAMPLE_CHUNKS[0]["content"] not in [call[0] for call in fake_provider.calls]
        assert len(fake_provider.calls) == 2

    @pytest.mark.asyncio
    async def test_run_once_should_fail_item_when_chunk_deleted(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Arrange
        created = await manager.create_batch_job(seeded_script.id, config)
        async with session_factory() as session:
            await session.execute(
                delete(ChunkModel).where(
                    ChunkModel.script_id == seeded_script.id,
                    ChunkModel.chunk_id == "chunk_2",
                )
            )
            await session.commit()

        # Act
        await manager.run_once()

        # Assert: a missing chunk is not retried
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.FAILED
        assert job.error == "1 of 3 chunks failed to generate"
        assert items_by_chunk(job)["chunk_2"].error == "Chunk chunk_2 not found in script"

    @pytest.mark.asyncio
    async def test_run_once_should_fail_item_when_provider_exceeds_timeout(
        self, session_factory, seeded_script, config, worker_settings, fake_provider
    ) -> None:
        # Arrange
        async def slow_generate(description, options):
            await asyncio.sleep(1)

        fake_provider.generate = slow_generate
        settings = worker_settings.model_copy(
            update={"item_timeout_seconds": 0.01, "max_item_attempts": 1}
        )
        manager = JobManager(
            session_factory, ImageService(ProviderRegistry([fake_provider])), settings
        )
        created = await manager.create_batch_job(seeded_script.id, config)

        # Act
        await manager.run_once()

        # Assert
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.FAILED
        assert job.failed_chunks == 3
        assert all("exceeded" in item.error for item in job.items)

    @pytest.mark.asyncio
    async def test_run_once_should_stop_when_job_cancelled_mid_run(
        self, session_factory, seeded_script, config, worker_settings, fake_provider
    ) -> None:
        # Arrange: cancel lands while the first chunk is being generated
        manager = JobManager(
            session_factory, ImageService(ProviderRegistry([fake_provider])), worker_settings
        )
        original_generate = fake_provider.generate

        async def generate_then_cancel(description, options):
            await manager.cancel_batch_job(seeded_script.id)
            return await original_generate(description, options)

        fake_provider.generate = generate_then_cancel
        created = await manager.create_batch_job(seeded_script.id, config)

        # Act
        await manager.run_once()

        # Assert: in-flight chunk finishes, the rest are left alone
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.PAUSED
        assert job.processed_chunks == 1
        assert items_by_chunk(job)["chunk_2"].status == JobItemStatus.PENDING
        assert len(fake_provider.calls) == 1
        assert await manager.run_once() is False

    @pytest.mark.asyncio
    async def test_run_once_should_process_jobs_in_creation_order(
        self, manager, seeded_script, config, fake_provider, session_factory
    ) -> None:
        # Arrange
        async with session_factory() as session:
            other = await script_crud.create_with_chunks(
                session,
                title="Second",
                original_script="Waves crash",
                chunks=[{"chunk_id": "c1", "content": "Waves crash on rocks"}],
            )
            await session.commit()

        first = await manager.create_batch_job(seeded_script.id, config)
        second = await manager.create_batch_job(other.id, config)

        # Act
        await manager.run_once()

        # Assert
        assert (await load_job(session_factory, first.job_id)).status == JobStatus.COMPLETED
        assert (await load_job(session_factory, second.job_id)).status == JobStatus.PENDING


class TestJobControl:
    """Test suite for status, cancel and clear operations."""

    @pytest.mark.asyncio
    async def test_get_job_status_should_return_none_without_jobs(
        self, manager, seeded_script
    ) -> None:
        assert await manager.get_job_status(seeded_script.id) is None

    @pytest.mark.asyncio
    async def test_cancel_batch_job_should_pause_active_job(
        self, manager, seeded_script, config
    ) -> None:
        # Arrange
        created = await manager.create_batch_job(seeded_script.id, config)

        # Act
        cancelled = await manager.cancel_batch_job(seeded_script.id)

        # Assert
        assert cancelled is True
        snapshot = await manager.get_job_status(seeded_script.id)
        assert snapshot.job_id == created.job_id
        assert snapshot.status == "paused"
        assert await manager.run_once() is False
        assert await manager.cancel_batch_job(seeded_script.id) is False

    @pytest.mark.asyncio
    async def test_clear_jobs_should_delete_jobs_and_items(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Arrange
        await manager.create_batch_job(seeded_script.id, config)

        # Act
        deleted = await manager.clear_jobs(seeded_script.id)

        # Assert
        assert deleted == 1
        assert await manager.get_job_status(seeded_script.id) is None
        async with session_factory() as session:
            result = await session.execute(select(JobItemModel))
            assert result.scalars().all() == []


class TestLifecycle:
    """Test suite for start/stop, crash recovery and loop resilience."""

    @pytest.mark.asyncio
    async def test_recover_interrupted_jobs_should_demote_processing_to_pending(
        self, manager, seeded_script, config, session_factory
    ) -> None:
        # Arrange: simulate a crash in the middle of an item
        created = await manager.create_batch_job(seeded_script.id, config)
        async with session_factory() as session:
            job = await job_crud.get_by_id(session, created.job_id)
            job.status = JobStatus.PROCESSING
            job.items[0].status = JobItemStatus.PROCESSING
            job.items[0].attempts = 1
            await session.commit()

        # Act
        jobs_reset, items_reset = await manager.recover_interrupted_jobs()

        # Assert
        assert (jobs_reset, items_reset) == (1, 1)
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.PENDING
        assert job.items[0].status == JobItemStatus.PENDING

        # The re-queued job runs to completion
        await manager.run_once()
        job = await load_job(session_factory, created.job_id)
        assert job.status == JobStatus.COMPLETED
        assert job.items[0].attempts == 2

    @pytest.mark.asyncio
    async def test_start_should_raise_when_job_store_unreachable(
        self, image_service, worker_settings
    ) -> None:
        # Arrange: database without tables
        engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
        manager = JobManager(
            async_sessionmaker(engine, expire_on_commit=False), image_service, worker_settings
        )

        # Act & Assert
        try:
            with pytest.raises(PersistenceFailureError):
                await manager.start()
            assert manager.is_running is False
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_start_and_stop_should_manage_loop_task(
        self, manager, seeded_script
    ) -> None:
        # Act
        await manager.start()
        running = manager.is_running
        await manager.stop()

        # Assert
        assert running is True
        assert manager.is_running is False

    @pytest.mark.asyncio
    async def test_run_loop_should_survive_store_and_unexpected_errors(
        self, manager
    ) -> None:
        # Arrange
        run_once = AsyncMock(
            side_effect=[
                PersistenceFailureError("database is locked"),
                RuntimeError("boom"),
                False,
                asyncio.CancelledError(),
            ]
        )

        # Act
        with patch.object(manager, "run_once", run_once):
            with pytest.raises(asyncio.CancelledError):
                await manager._run_loop()

        # Assert
        assert run_once.await_count == 4


class TestWorkerSettingsDefaults:
    """Test suite for default retry configuration."""

    def test_defaults_should_bound_retries(self) -> None:
        settings = WorkerSettings()

        assert settings.max_item_attempts == 3
        assert settings.retry_base_delay_seconds > 0
