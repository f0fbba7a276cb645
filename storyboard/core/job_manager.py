"""
Batch job manager.

Owns the background processing loop for batch image generation. Jobs are
persisted in the job store so work survives restarts; the loop picks the
oldest eligible pending job, walks its items one chunk at a time through
the image service and records progress after every state change.

Lifecycle:
    start() -> reconcile interrupted jobs, spawn loop task
    run_once() -> claim and execute one job (used by the loop and tests)
    stop() -> cancel loop task

Dependencies: asyncio, sqlalchemy, storyboard.boundary.db, storyboard.application.services.image_service
System role: Scheduler for batch image generation
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from typing import AsyncIterator
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storyboard.application.services.image_service import ChunkImageOutcome, ImageService
from storyboard.boundary.db.base import utcnow
from storyboard.boundary.db.CRUD.job_crud import job_crud
from storyboard.boundary.db.CRUD.script_crud import script_crud
from storyboard.boundary.db.models.job_model import (
    JobItemModel,
    JobItemStatus,
    JobKind,
    JobModel,
    JobStatus,
)
from storyboard.boundary.image_providers.base import GenerationConfig
from storyboard.configs.worker import WorkerSettings
from storyboard.core.exceptions import (
    ChunkMissingError,
    NoWorkRemainingError,
    PersistenceFailureError,
    ProviderTimeoutError,
    StoryboardException,
    SubjectNotFoundError,
)
from storyboard.models.job import JobStatusSnapshot
from storyboard.observability.correlation import job_correlation
from storyboard.observability.log_utils import error_summary, log_exception_with_context

logger = logging.getLogger(__name__)


class JobManager:
    """
    Scheduler for batch image generation jobs.

    One instance per process, created in the API lifespan. Jobs run
    strictly one after another and items within a job run sequentially.
    Every store access uses its own short-lived session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        image_service: ImageService,
        settings: WorkerSettings | None = None,
    ) -> None:
        """
        Initialize job manager.

        Args:
            session_factory: Async session factory for the job and script stores
            image_service: Generates images for one chunk
            settings: Loop timing and retry configuration
        """
        self._session_factory = session_factory
        self._image_service = image_service
        self._settings = settings or WorkerSettings()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Reconcile interrupted work and start the processing loop.

        Raises:
            PersistenceFailureError: If the job store cannot be reconciled;
                the application must not start in that case
        """
        logger.info(f"{__name__}:start - START")
        await self.recover_interrupted_jobs()

        if not self.is_running:
            self._task = asyncio.create_task(self._run_loop(), name="batch-job-manager")
        logger.info(f"{__name__}:start - END loop running")

    async def stop(self) -> None:
        """Cancel the processing loop and wait for it to exit."""
        if self._task is None:
            return

        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info(f"{__name__}:stop - Processing loop stopped")

    async def recover_interrupted_jobs(self) -> tuple[int, int]:
        """
        Demote jobs and items left PROCESSING by a crash back to PENDING.

        Returns:
            (jobs_reset, items_reset)

        Raises:
            PersistenceFailureError: If the store update fails
        """
        async with self._session("recover_interrupted_jobs") as session:
            jobs_reset, items_reset = await job_crud.reset_processing(session)
            await session.commit()

        if jobs_reset or items_reset:
            logger.warning(
                f"{__name__}:recover_interrupted_jobs - Re-queued {jobs_reset} job(s) "
                f"and {items_reset} item(s) interrupted by a restart"
            )
        return jobs_reset, items_reset

    async def _run_loop(self) -> None:
        logger.info(
            f"{__name__}:_run_loop - Polling every {self._settings.poll_interval_seconds}s"
        )
        while True:
            try:
                processed = await self.run_once()
            except PersistenceFailureError as e:
                logger.error(
                    f"{__name__}:_run_loop - Job store error, backing off "
                    f"{self._settings.error_backoff_seconds}s: {e}"
                )
                await asyncio.sleep(self._settings.error_backoff_seconds)
                continue
            except Exception as e:
                log_exception_with_context(
                    logger, f"{__name__}:_run_loop - Unexpected error, backing off", e
                )
                await asyncio.sleep(self._settings.error_backoff_seconds)
                continue

            if not processed:
                await asyncio.sleep(self._settings.poll_interval_seconds)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def run_once(self) -> bool:
        """
        Claim the oldest eligible pending job and execute it.

        Returns:
            bool: True if a job was executed, False if the queue was empty

        Raises:
            PersistenceFailureError: If the job store fails
        """
        job_id = await self._claim_next_job()
        if job_id is None:
            return False

        with job_correlation(job_id):
            try:
                await self._execute_job(job_id)
            except PersistenceFailureError:
                await self._requeue_after_store_error(job_id)
                raise
        return True

    async def _claim_next_job(self) -> UUID | None:
        async with self._session("claim_next_job") as session:
            job = await job_crud.get_next_pending(session, utcnow())
            if job is None:
                return None

            job.status = JobStatus.PROCESSING
            job.retry_after = None
            job.error = None
            await session.commit()

            logger.info(
                f"{__name__}:_claim_next_job - Claimed job_id={job.id}, "
                f"script_id={job.script_id}, total_chunks={job.total_chunks}"
            )
            return job.id

    async def _execute_job(self, job_id: UUID) -> None:
        async with self._session("load_job") as session:
            job = await job_crud.get_by_id(session, job_id)
            if job is None:
                logger.warning(f"{__name__}:_execute_job - Job {job_id} vanished before execution")
                return

            script_id = job.script_id
            config = GenerationConfig.from_dict(job.config)
            work = [(item.id, item.chunk_id) for item in job.items if self._is_runnable(item)]

        logger.info(
            f"{__name__}:_execute_job - START job_id={job_id}, items={len(work)}, "
            f"provider={config.provider.value}, style={config.style.value}"
        )

        for item_id, chunk_id in work:
            if not await self._is_still_processing(job_id):
                logger.info(
                    f"{__name__}:_execute_job - Job {job_id} no longer processing, stopping"
                )
                return

            called_provider = await self._process_item(job_id, item_id, script_id, chunk_id, config)
            if called_provider and self._settings.item_delay_seconds > 0:
                await asyncio.sleep(self._settings.item_delay_seconds)

        await self._finalize_job(job_id)

    def _is_runnable(self, item: JobItemModel) -> bool:
        if item.status == JobItemStatus.PENDING:
            return True
        return (
            item.status == JobItemStatus.FAILED
            and item.attempts < self._settings.max_item_attempts
        )

    async def _is_still_processing(self, job_id: UUID) -> bool:
        async with self._session("check_job_status") as session:
            job = await job_crud.get_by_id(session, job_id)
            return job is not None and job.status == JobStatus.PROCESSING

    async def _process_item(
        self,
        job_id: UUID,
        item_id: UUID,
        script_id: UUID,
        chunk_id: str,
        config: GenerationConfig,
    ) -> bool:
        """
        Drive one item to COMPLETED or FAILED.

        Returns:
            bool: True if a provider was called
        """
        async with self._session("prepare_item") as session:
            job, item = await self._load_item(session, job_id, item_id)
            chunk = await script_crud.get_chunk(session, script_id, chunk_id)

            if chunk is None:
                error = ChunkMissingError(chunk_id, script_id=str(script_id))
                # Missing chunks are not retried
                item.attempts = self._settings.max_item_attempts
                self._mark_item_failed(job, item, error.message)
                await session.commit()
                logger.warning(f"{__name__}:_process_item - {error}")
                return False

            if chunk.image_url:
                item.status = JobItemStatus.COMPLETED
                item.error = None
                item.processed_at = utcnow()
                item.image_url = chunk.image_url
                item.secondary_image_url = chunk.secondary_image_url
                item.scene_description = chunk.scene_description
                item.symbol_description = chunk.symbol_description
                job.refresh_progress()
                await session.commit()
                logger.info(
                    f"{__name__}:_process_item - Chunk {chunk_id} already has an image, skipping"
                )
                return False

            item.status = JobItemStatus.PROCESSING
            item.attempts += 1
            item.error = None
            job.refresh_progress()
            content = chunk.content
            attempt = item.attempts
            await session.commit()

        logger.info(
            f"{__name__}:_process_item - Generating chunk_id={chunk_id}, "
            f"attempt={attempt}/{self._settings.max_item_attempts}"
        )

        try:
            outcome = await asyncio.wait_for(
                self._image_service.generate_for_chunk(content, config),
                timeout=self._settings.item_timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = ProviderTimeoutError(
                f"Image generation exceeded {self._settings.item_timeout_seconds:.0f} seconds",
                provider=config.provider.value,
            )
            await self._record_item_failure(job_id, item_id, chunk_id, error.message)
            return True
        except StoryboardException as e:
            await self._record_item_failure(job_id, item_id, chunk_id, e.message)
            return True
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_process_item - Unexpected provider error",
                e,
                job_id=job_id,
                chunk_id=chunk_id,
            )
            await self._record_item_failure(job_id, item_id, chunk_id, error_summary(e))
            return True

        await self._record_item_success(job_id, item_id, script_id, chunk_id, outcome)
        return True

    async def _record_item_success(
        self,
        job_id: UUID,
        item_id: UUID,
        script_id: UUID,
        chunk_id: str,
        outcome: ChunkImageOutcome,
    ) -> None:
        async with self._session("record_item_success") as session:
            job, item = await self._load_item(session, job_id, item_id)
            chunk = await script_crud.update_chunk_asset(
                session,
                script_id,
                chunk_id,
                image_url=outcome.image_url,
                secondary_image_url=outcome.secondary_image_url,
                scene_description=outcome.scene_description,
                symbol_description=outcome.symbol_description,
                provider=outcome.provider.value,
            )
            if chunk is None:
                error = ChunkMissingError(chunk_id, script_id=str(script_id))
                item.attempts = self._settings.max_item_attempts
                self._mark_item_failed(job, item, error.message)
            else:
                item.status = JobItemStatus.COMPLETED
                item.error = None
                item.processed_at = utcnow()
                item.image_url = outcome.image_url
                item.secondary_image_url = outcome.secondary_image_url
                item.scene_description = outcome.scene_description
                item.symbol_description = outcome.symbol_description
                job.refresh_progress()
            await session.commit()

        logger.info(
            f"{__name__}:_record_item_success - chunk_id={chunk_id} "
            f"progress={job.processed_chunks}/{job.total_chunks}"
        )

    async def _record_item_failure(
        self,
        job_id: UUID,
        item_id: UUID,
        chunk_id: str,
        message: str,
    ) -> None:
        async with self._session("record_item_failure") as session:
            job, item = await self._load_item(session, job_id, item_id)
            self._mark_item_failed(job, item, message)
            await session.commit()

        logger.warning(
            f"{__name__}:_record_item_failure - chunk_id={chunk_id} failed: {message}"
        )

    @staticmethod
    def _mark_item_failed(job: JobModel, item: JobItemModel, message: str) -> None:
        item.status = JobItemStatus.FAILED
        item.error = message[:2048]
        item.processed_at = utcnow()
        job.refresh_progress()

    @staticmethod
    async def _load_item(
        session: AsyncSession,
        job_id: UUID,
        item_id: UUID,
    ) -> tuple[JobModel, JobItemModel]:
        job = await job_crud.get_by_id(session, job_id)
        if job is None:
            raise PersistenceFailureError(f"Job {job_id} disappeared during execution", operation="load_item")
        for item in job.items:
            if item.id == item_id:
                return job, item
        raise PersistenceFailureError(f"Job item {item_id} disappeared during execution", operation="load_item")

    async def _finalize_job(self, job_id: UUID) -> None:
        async with self._session("finalize_job") as session:
            job = await job_crud.get_by_id(session, job_id)
            if job is None:
                return

            # A cancel that landed during the last item wins
            if job.status != JobStatus.PROCESSING:
                logger.info(
                    f"{__name__}:_finalize_job - Job {job_id} is {job.status.value}, leaving as is"
                )
                return

            job.refresh_progress()
            retryable = [item for item in job.items if self._is_runnable(item)]

            if job.processed_chunks == job.total_chunks:
                job.status = JobStatus.COMPLETED
                job.completed_at = utcnow()
                job.error = None
            elif retryable:
                attempts_used = max((item.attempts for item in retryable), default=1)
                delay = self._settings.retry_base_delay_seconds * 2 ** (max(attempts_used, 1) - 1)
                job.status = JobStatus.PENDING
                job.retry_after = utcnow() + timedelta(seconds=delay)
            else:
                job.status = JobStatus.FAILED
                job.error = f"{job.failed_chunks} of {job.total_chunks} chunks failed to generate"

            await session.commit()

        log = logger.warning if job.status == JobStatus.FAILED else logger.info
        log(
            f"{__name__}:_finalize_job - END job_id={job_id}, status={job.status.value}, "
            f"processed={job.processed_chunks}/{job.total_chunks}, failed={job.failed_chunks}"
            + (f", retry_after={job.retry_after.isoformat()}" if job.status == JobStatus.PENDING and job.retry_after else "")
        )

    async def _requeue_after_store_error(self, job_id: UUID) -> None:
        try:
            async with self._session("requeue_job") as session:
                job = await job_crud.get_by_id(session, job_id)
                if job is not None and job.status == JobStatus.PROCESSING:
                    job.status = JobStatus.PENDING
                    job.retry_after = utcnow() + timedelta(
                        seconds=self._settings.error_backoff_seconds
                    )
                    await session.commit()
        except PersistenceFailureError as e:
            # Left PROCESSING; recover_interrupted_jobs() demotes it on next start
            logger.error(f"{__name__}:_requeue_after_store_error - Could not re-queue job {job_id}: {e}")

    # ------------------------------------------------------------------
    # Caller operations
    # ------------------------------------------------------------------

    async def create_batch_job(
        self,
        script_id: UUID,
        config: GenerationConfig,
    ) -> JobStatusSnapshot:
        """
        Create (or reuse) a batch image generation job for a script.

        Args:
            script_id: Script whose chunks should be illustrated
            config: Generation parameters, fixed for the job's lifetime

        Returns:
            JobStatusSnapshot: The new job, or the already active one

        Raises:
            SubjectNotFoundError: If the script does not exist
            ProviderUnavailableError: If the provider is unknown or not configured
            NoWorkRemainingError: If every chunk already has an image
            PersistenceFailureError: If the job store fails
        """
        logger.info(
            f"{__name__}:create_batch_job - START script_id={script_id}, "
            f"provider={config.provider.value}, style={config.style.value}"
        )

        async with self._session("create_batch_job") as session:
            if not await script_crud.exists(session, script_id):
                raise SubjectNotFoundError(str(script_id))

            self._image_service.ensure_available(config)

            existing = await job_crud.get_active_for_script(session, script_id)
            if existing is not None:
                logger.info(
                    f"{__name__}:create_batch_job - Reusing active job_id={existing.id}"
                )
                return JobStatusSnapshot.from_model(existing)

            chunks = await script_crud.find_chunks_missing_asset(session, script_id)
            if not chunks:
                raise NoWorkRemainingError(str(script_id))

            try:
                job = await job_crud.create_with_items(
                    session,
                    script_id=script_id,
                    config=config.to_dict(),
                    chunk_ids=[chunk.chunk_id for chunk in chunks],
                    kind=JobKind.BATCH_IMAGE_GENERATION,
                )
                await session.commit()
            except IntegrityError:
                # Lost the race against a concurrent request; return the winner
                await session.rollback()
                existing = await job_crud.get_active_for_script(session, script_id)
                if existing is None:
                    raise
                logger.info(
                    f"{__name__}:create_batch_job - Concurrent create, reusing job_id={existing.id}"
                )
                return JobStatusSnapshot.from_model(existing)

            logger.info(
                f"{__name__}:create_batch_job - END job_id={job.id}, total_chunks={job.total_chunks}"
            )
            return JobStatusSnapshot.from_model(job)

    async def get_job_status(self, script_id: UUID) -> JobStatusSnapshot | None:
        """
        Get the latest job for a script regardless of status.

        Returns:
            JobStatusSnapshot, or None if the script has no jobs
        """
        async with self._session("get_job_status") as session:
            job = await job_crud.get_latest_for_script(session, script_id)
            if job is None:
                return None
            return JobStatusSnapshot.from_model(job)

    async def cancel_batch_job(self, script_id: UUID) -> bool:
        """
        Pause the active job of a script.

        An in-flight provider call finishes; the loop stops before the next item.

        Returns:
            bool: True if a job was cancelled
        """
        async with self._session("cancel_batch_job") as session:
            job = await job_crud.get_active_for_script(session, script_id)
            if job is None:
                return False

            job.status = JobStatus.PAUSED
            job.retry_after = None
            await session.commit()

        logger.info(f"{__name__}:cancel_batch_job - Paused job_id={job.id}, script_id={script_id}")
        return True

    async def clear_jobs(self, script_id: UUID) -> int:
        """
        Delete all jobs (and their items) of a script.

        Returns:
            int: Number of jobs deleted
        """
        async with self._session("clear_jobs") as session:
            deleted = await job_crud.delete_for_script(session, script_id)
            await session.commit()

        logger.info(f"{__name__}:clear_jobs - Deleted {deleted} job(s) for script_id={script_id}")
        return deleted

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a short-lived session; store errors become PersistenceFailureError."""
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceFailureError(str(e), operation=operation) from e
