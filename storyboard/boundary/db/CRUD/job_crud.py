"""
Job CRUD operations.

Provides Create, Read, Update, Delete operations for JobModel and its
JobItemModel rows, with the queries the processing loop needs: next
eligible job, active job per script, and crash-state reconciliation.

Dependencies: sqlalchemy, storyboard.boundary.db.models.job_model
System role: Job store persistence operations for batch image generation
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.boundary.db.models.job_model import (
    ACTIVE_JOB_STATUSES,
    JobItemModel,
    JobItemStatus,
    JobKind,
    JobModel,
    JobStatus,
)
from storyboard.boundary.db.CRUD.base_crud import BaseCRUD


class JobCRUD(BaseCRUD[JobModel]):
    """
    CRUD operations for JobModel.

    Extends BaseCRUD with per-script lookups, FIFO selection of pending
    jobs and bulk status resets used at startup.
    """

    def __init__(self) -> None:
        """Initialize JobCRUD with JobModel."""
        super().__init__(JobModel)

    async def create_with_items(
        self,
        session: AsyncSession,
        script_id: UUID,
        config: dict,
        chunk_ids: list[str],
        kind: JobKind = JobKind.BATCH_IMAGE_GENERATION,
    ) -> JobModel:
        """
        Insert a pending job with one pending item per chunk.

        Args:
            session: Async database session
            script_id: Script whose chunks are covered
            config: Generation parameters stored as JSON
            chunk_ids: Chunk keys in processing order
            kind: Job classification

        Returns:
            Created JobModel with items and progress populated

        Raises:
            IntegrityError: If another active job exists for the script (on flush)
        """
        job = JobModel(
            script_id=script_id,
            kind=kind,
            status=JobStatus.PENDING,
            config=config,
        )
        job.items = [
            JobItemModel(
                chunk_id=chunk_id,
                position=position,
                status=JobItemStatus.PENDING,
                attempts=0,
            )
            for position, chunk_id in enumerate(chunk_ids)
        ]
        job.refresh_progress()
        return await self.add(session, job)

    async def get_active_for_script(
        self,
        session: AsyncSession,
        script_id: UUID,
        kind: JobKind = JobKind.BATCH_IMAGE_GENERATION,
    ) -> JobModel | None:
        """
        Retrieve the pending or processing job for a script, if any.

        Args:
            session: Async database session
            script_id: Script UUID
            kind: Job classification

        Returns:
            Active JobModel if found, None otherwise
        """
        stmt = (
            select(JobModel)
            .where(
                JobModel.script_id == script_id,
                JobModel.kind == kind,
                JobModel.status.in_(ACTIVE_JOB_STATUSES),
            )
            .order_by(JobModel.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_latest_for_script(
        self,
        session: AsyncSession,
        script_id: UUID,
    ) -> JobModel | None:
        """
        Retrieve the most recently created job for a script, any status.

        Args:
            session: Async database session
            script_id: Script UUID

        Returns:
            Latest JobModel if the script has jobs, None otherwise
        """
        stmt = (
            select(JobModel)
            .where(JobModel.script_id == script_id)
            .order_by(JobModel.created_at.desc(), JobModel.id.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_next_pending(
        self,
        session: AsyncSession,
        now: datetime,
    ) -> JobModel | None:
        """
        Retrieve the oldest pending job that is eligible to run.

        A job is eligible when its retry_after is unset or already passed.

        Args:
            session: Async database session
            now: Current time used for the retry_after comparison

        Returns:
            Oldest eligible JobModel, None when the queue is empty
        """
        stmt = (
            select(JobModel)
            .where(
                JobModel.status == JobStatus.PENDING,
                (JobModel.retry_after.is_(None)) | (JobModel.retry_after <= now),
            )
            .order_by(JobModel.created_at, JobModel.id)
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def reset_processing(self, session: AsyncSession) -> tuple[int, int]:
        """
        Demote jobs and items left in PROCESSING back to PENDING.

        Anything still PROCESSING when the loop starts was interrupted by a
        crash or restart.

        Args:
            session: Async database session

        Returns:
            (jobs_reset, items_reset)
        """
        items_result = await session.execute(
            update(JobItemModel)
            .where(JobItemModel.status == JobItemStatus.PROCESSING)
            .values(status=JobItemStatus.PENDING)
        )
        jobs_result = await session.execute(
            update(JobModel)
            .where(JobModel.status == JobStatus.PROCESSING)
            .values(status=JobStatus.PENDING)
        )
        return jobs_result.rowcount, items_result.rowcount

    async def delete_for_script(self, session: AsyncSession, script_id: UUID) -> int:
        """
        Delete every job of a script together with its items.

        Args:
            session: Async database session
            script_id: Script UUID

        Returns:
            Number of jobs deleted
        """
        job_ids = select(JobModel.id).where(JobModel.script_id == script_id)
        await session.execute(
            delete(JobItemModel).where(JobItemModel.job_id.in_(job_ids))
        )
        result = await session.execute(
            delete(JobModel).where(JobModel.script_id == script_id)
        )
        return result.rowcount


job_crud = JobCRUD()
