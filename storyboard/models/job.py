"""
Job domain models and schemas.

Request/response schemas for batch image generation and the status
snapshot the job manager hands to callers.

Dependencies: pydantic, storyboard.boundary.db.models, storyboard.boundary.image_providers
System role: Batch job API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from storyboard.boundary.db.models.job_model import JobItemModel, JobModel
from storyboard.boundary.image_providers.base import (
    GenerationConfig,
    ImageProvider,
    ImageStyle,
)


class BatchGenerateRequest(BaseModel):
    """Request schema for starting batch image generation."""

    provider: ImageProvider = Field(default=ImageProvider.OPENAI, description="Image backend")
    color: str = Field(default="white", description="Primary color for single-color styles")
    quality: str = Field(default="high", description="Provider quality setting")
    style: ImageStyle = Field(default=ImageStyle.INFOGRAPHIC, description="Visual style")
    options: dict[str, Any] = Field(default_factory=dict, description="Provider-specific extras")

    def to_config(self) -> GenerationConfig:
        return GenerationConfig(
            provider=self.provider,
            style=self.style,
            color=self.color,
            quality=self.quality,
            options=self.options,
        )


class JobItemSnapshot(BaseModel):
    """Per-chunk progress within a job."""

    chunk_id: str
    position: int
    status: str
    attempts: int
    error: str | None = None
    processed_at: datetime | None = None
    image_url: str | None = None
    secondary_image_url: str | None = None

    @classmethod
    def from_model(cls, item: JobItemModel) -> "JobItemSnapshot":
        return cls(
            chunk_id=item.chunk_id,
            position=item.position,
            status=item.status.value,
            attempts=item.attempts,
            error=item.error,
            processed_at=item.processed_at,
            image_url=item.image_url,
            secondary_image_url=item.secondary_image_url,
        )


class JobStatusSnapshot(BaseModel):
    """Point-in-time view of a job, detached from the database session."""

    job_id: uuid.UUID
    script_id: uuid.UUID
    kind: str
    status: str
    config: dict[str, Any]
    total_chunks: int
    processed_chunks: int
    failed_chunks: int
    completion_percentage: int
    is_complete: bool
    error: str | None = None
    retry_after: datetime | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    items: list[JobItemSnapshot] = Field(default_factory=list)

    @classmethod
    def from_model(cls, job: JobModel) -> "JobStatusSnapshot":
        return cls(
            job_id=job.id,
            script_id=job.script_id,
            kind=job.kind.value,
            status=job.status.value,
            config=dict(job.config or {}),
            total_chunks=job.total_chunks,
            processed_chunks=job.processed_chunks,
            failed_chunks=job.failed_chunks,
            completion_percentage=job.completion_percentage,
            is_complete=job.is_complete,
            error=job.error,
            retry_after=job.retry_after,
            created_at=job.created_at,
            updated_at=job.updated_at,
            completed_at=job.completed_at,
            items=[JobItemSnapshot.from_model(item) for item in job.items],
        )


class BatchGenerateResponse(BaseModel):
    """Response schema for batch image generation."""

    message: str = "Batch image generation job created"
    job_id: uuid.UUID
    total_chunks: int
    status: str


class BatchStatusResponse(BaseModel):
    """
    Response schema for batch status polling.

    Without a job (has_job=False) the counts come from the script itself.
    """

    has_job: bool
    job_id: uuid.UUID | None = None
    status: str | None = None
    total_chunks: int
    processed_chunks: int
    failed_chunks: int = 0
    chunks_with_images: int
    chunks_remaining: int
    completion_percentage: int
    is_complete: bool
    error: str | None = None
    retry_after: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    items: list[JobItemSnapshot] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: JobStatusSnapshot) -> "BatchStatusResponse":
        return cls(
            has_job=True,
            job_id=snapshot.job_id,
            status=snapshot.status,
            total_chunks=snapshot.total_chunks,
            processed_chunks=snapshot.processed_chunks,
            failed_chunks=snapshot.failed_chunks,
            chunks_with_images=snapshot.processed_chunks,
            chunks_remaining=snapshot.total_chunks - snapshot.processed_chunks,
            completion_percentage=snapshot.completion_percentage,
            is_complete=snapshot.is_complete,
            error=snapshot.error,
            retry_after=snapshot.retry_after,
            created_at=snapshot.created_at,
            updated_at=snapshot.updated_at,
            completed_at=snapshot.completed_at,
            items=snapshot.items,
        )


class CancelJobResponse(BaseModel):
    """Response schema for batch cancellation."""

    cancelled: bool


class ClearJobsResponse(BaseModel):
    """Response schema for job history purge."""

    deleted: int
