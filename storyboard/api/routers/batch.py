"""
Batch image generation API endpoints.

Routes:
- POST /scripts/{id}/batch-generate-images - Create or reuse a batch job
- GET /scripts/{id}/batch-status - Poll job progress
- POST /scripts/{id}/batch-cancel - Pause the active job
- DELETE /scripts/{id}/jobs - Purge job history

Dependencies: storyboard.core.job_manager, storyboard.application.services, storyboard.models
System role: Batch job HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from storyboard.api.deps import get_job_manager, get_script_service
from storyboard.api.routers.router_utils import handle_storyboard_errors
from storyboard.application.services.script_service import ScriptService
from storyboard.core.job_manager import JobManager
from storyboard.models.job import (
    BatchGenerateRequest,
    BatchGenerateResponse,
    BatchStatusResponse,
    CancelJobResponse,
    ClearJobsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scripts", tags=["batch"])


@router.post("/{script_id}/batch-generate-images", response_model=BatchGenerateResponse)
@handle_storyboard_errors
async def batch_generate_images(
    script_id: UUID,
    request: BatchGenerateRequest,
    job_manager: JobManager = Depends(get_job_manager),
) -> BatchGenerateResponse:
    """
    Start batch image generation for every chunk without an image.

    Returns immediately; the background loop does the work. Calling again
    while a job is pending or processing returns that job.

    Args:
        script_id: Script UUID
        request: Provider, style, color, quality and options
        job_manager: Injected JobManager

    Returns:
        BatchGenerateResponse: job_id, total_chunks, status

    Raises:
        HTTPException(404): Script not found
        HTTPException(400): Provider unavailable
        HTTPException(409): All chunks already have images
        HTTPException(503): Job store unavailable
    """
    snapshot = await job_manager.create_batch_job(script_id, request.to_config())
    return BatchGenerateResponse(
        job_id=snapshot.job_id,
        total_chunks=snapshot.total_chunks,
        status=snapshot.status,
    )


@router.get("/{script_id}/batch-status", response_model=BatchStatusResponse)
@handle_storyboard_errors
async def batch_status(
    script_id: UUID,
    job_manager: JobManager = Depends(get_job_manager),
    script_service: ScriptService = Depends(get_script_service),
) -> BatchStatusResponse:
    """
    Get batch progress for frontend polling.

    Reports the latest job of the script. Without any job, counts are
    taken from the script's chunks and has_job is False.

    Raises:
        HTTPException(404): Script not found (no job and no script)
        HTTPException(503): Job store unavailable
    """
    snapshot = await job_manager.get_job_status(script_id)
    if snapshot is not None:
        return BatchStatusResponse.from_snapshot(snapshot)

    progress = await script_service.get_image_progress(script_id)
    return BatchStatusResponse(
        has_job=False,
        total_chunks=progress["total_chunks"],
        processed_chunks=progress["chunks_with_images"],
        chunks_with_images=progress["chunks_with_images"],
        chunks_remaining=progress["chunks_remaining"],
        completion_percentage=progress["completion_percentage"],
        is_complete=progress["is_complete"],
    )


@router.post("/{script_id}/batch-cancel", response_model=CancelJobResponse)
@handle_storyboard_errors
async def batch_cancel(
    script_id: UUID,
    job_manager: JobManager = Depends(get_job_manager),
) -> CancelJobResponse:
    """Pause the script's active job; an in-flight chunk still finishes."""
    cancelled = await job_manager.cancel_batch_job(script_id)
    return CancelJobResponse(cancelled=cancelled)


@router.delete("/{script_id}/jobs", response_model=ClearJobsResponse)
@handle_storyboard_errors
async def clear_jobs(
    script_id: UUID,
    job_manager: JobManager = Depends(get_job_manager),
) -> ClearJobsResponse:
    """Delete every job of the script (maintenance)."""
    deleted = await job_manager.clear_jobs(script_id)
    return ClearJobsResponse(deleted=deleted)
