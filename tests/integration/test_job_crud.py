"""
Test suite for JobCRUD database operations.

Tests job-specific queries: active job lookup, FIFO selection of eligible
pending jobs, crash-state reset and per-script deletion. Runs against an
in-memory SQLite database, including the partial unique index.

System role: Verification of job persistence layer for batch image generation
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import count_jobs
from storyboard.boundary.db.base import utcnow
from storyboard.boundary.db.CRUD.job_crud import JobCRUD, job_crud
from storyboard.boundary.db.models.job_model import (
    JobItemStatus,
    JobKind,
    JobModel,
    JobStatus,
)

CONFIG = {"provider": "openai", "style": "drawing", "color": "white", "quality": "high", "options": {}}


class TestJobCRUDInit:
    """Test suite for JobCRUD initialization."""

    def test_init_should_set_model_to_job_model(self) -> None:
        # Act
        crud = JobCRUD()

        # Assert
        assert crud.model == JobModel


class TestJobCRUDCreateWithItems:
    """Test suite for JobCRUD.create_with_items() method."""

    @pytest.mark.asyncio
    async def test_create_with_items_should_populate_items_and_progress(
        self, test_async_db, seeded_script
    ) -> None:
        # Act
        job = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1", "chunk_2"]
        )
        await test_async_db.commit()

        # Assert
        assert job.status == JobStatus.PENDING
        assert job.kind == JobKind.BATCH_IMAGE_GENERATION
        assert job.total_chunks == 2
        assert job.processed_chunks == 0
        assert [(item.chunk_id, item.position) for item in job.items] == [
            ("chunk_1", 0),
            ("chunk_2", 1),
        ]
        assert all(item.status == JobItemStatus.PENDING for item in job.items)

    @pytest.mark.asyncio
    async def test_create_with_items_should_reject_second_active_job(
        self, test_async_db, seeded_script
    ) -> None:
        # Arrange
        await job_crud.create_with_items(test_async_db, seeded_script.id, CONFIG, ["chunk_1"])
        await test_async_db.commit()

        # Act & Assert
        with pytest.raises(IntegrityError):
            await job_crud.create_with_items(
                test_async_db, seeded_script.id, CONFIG, ["chunk_2"]
            )

    @pytest.mark.asyncio
    async def test_create_with_items_should_allow_new_job_when_previous_finished(
        self, test_async_db, seeded_script
    ) -> None:
        # Arrange
        first = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1"]
        )
        first.status = JobStatus.FAILED
        await test_async_db.commit()

        # Act
        second = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1"]
        )
        await test_async_db.commit()

        # Assert
        active = await job_crud.get_active_for_script(test_async_db, seeded_script.id)
        latest = await job_crud.get_latest_for_script(test_async_db, seeded_script.id)
        assert active.id == second.id
        assert latest.id == second.id


class TestJobCRUDGetNextPending:
    """Test suite for JobCRUD.get_next_pending() method."""

    @pytest.mark.asyncio
    async def test_get_next_pending_should_return_none_when_queue_empty(
        self, test_async_db
    ) -> None:
        assert await job_crud.get_next_pending(test_async_db, utcnow()) is None

    @pytest.mark.asyncio
    async def test_get_next_pending_should_skip_jobs_waiting_for_retry(
        self, test_async_db, seeded_script
    ) -> None:
        # Arrange
        job = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1"]
        )
        job.retry_after = utcnow() + timedelta(minutes=5)
        await test_async_db.commit()

        # Act
        now_result = await job_crud.get_next_pending(test_async_db, utcnow())
        later_result = await job_crud.get_next_pending(
            test_async_db, utcnow() + timedelta(minutes=10)
        )

        # Assert
        assert now_result is None
        assert later_result.id == job.id

    @pytest.mark.asyncio
    async def test_get_next_pending_should_ignore_paused_jobs(
        self, test_async_db, seeded_script
    ) -> None:
        job = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1"]
        )
        job.status = JobStatus.PAUSED
        await test_async_db.commit()

        assert await job_crud.get_next_pending(test_async_db, utcnow()) is None


class TestJobCRUDResetProcessing:
    """Test suite for JobCRUD.reset_processing() method."""

    @pytest.mark.asyncio
    async def test_reset_processing_should_demote_jobs_and_items(
        self, test_async_db, seeded_script
    ) -> None:
        # Arrange
        job = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1", "chunk_2"]
        )
        job.status = JobStatus.PROCESSING
        job.items[0].status = JobItemStatus.PROCESSING
        job.items[1].status = JobItemStatus.COMPLETED
        await test_async_db.commit()

        # Act
        counts = await job_crud.reset_processing(test_async_db)
        await test_async_db.commit()
        test_async_db.expire_all()

        # Assert
        assert counts == (1, 1)
        refreshed = await job_crud.get_by_id(test_async_db, job.id)
        assert refreshed.status == JobStatus.PENDING
        assert [item.status for item in refreshed.items] == [
            JobItemStatus.PENDING,
            JobItemStatus.COMPLETED,
        ]


class TestJobCRUDDeleteForScript:
    """Test suite for JobCRUD.delete_for_script() method."""

    @pytest.mark.asyncio
    async def test_delete_for_script_should_remove_all_jobs(
        self, test_async_db, seeded_script
    ) -> None:
        # Arrange
        first = await job_crud.create_with_items(
            test_async_db, seeded_script.id, CONFIG, ["chunk_1"]
        )
        first.status = JobStatus.COMPLETED
        await test_async_db.commit()
        await job_crud.create_with_items(test_async_db, seeded_script.id, CONFIG, ["chunk_2"])
        await test_async_db.commit()

        # Act
        deleted = await job_crud.delete_for_script(test_async_db, seeded_script.id)
        await test_async_db.commit()

        # Assert
        assert deleted == 2
        assert await count_jobs(test_async_db) == 0
        assert await job_crud.get_latest_for_script(test_async_db, seeded_script.id) is None


class TestJobModelProgress:
    """Test suite for JobModel progress properties."""

    def test_completion_percentage_should_be_full_for_empty_job(self) -> None:
        job = JobModel(status=JobStatus.PENDING)
        job.items = []
        job.refresh_progress()

        assert job.completion_percentage == 100
        assert job.is_complete is True
