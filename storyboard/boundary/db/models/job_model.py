"""
Job and job item ORM models.

Durable record of batch image generation work. A job covers every chunk of
one script that lacked an image when the job was created; each chunk is
tracked as a JobItemModel row so progress survives process restarts.

Dependencies: sqlalchemy, storyboard.boundary.db.base
System role: Job store for the batch processing loop
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storyboard.boundary.db.base import Base, UUIDMixin, TimestampMixin


class JobKind(str, enum.Enum):
    """
    Batch job classification.

    BATCH_IMAGE_GENERATION: Generate images for every chunk of a script
    """

    BATCH_IMAGE_GENERATION = "batch_image_generation"


class JobStatus(str, enum.Enum):
    """
    Job execution states.

    PENDING: Waiting for the processing loop (new, re-queued, or recovered)
    PROCESSING: The loop is working through the job's items
    COMPLETED: Every item completed
    FAILED: Some items failed and have no attempts left; see error
    PAUSED: Cancelled by a caller; the loop no longer picks it up
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"


class JobItemStatus(str, enum.Enum):
    """Per-chunk execution states."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_JOB_STATUSES = (JobStatus.PENDING, JobStatus.PROCESSING)


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class JobModel(Base, UUIDMixin, TimestampMixin):
    """
    Batch job ORM model.

    Progress counters are a cache of the item statuses and are recomputed
    by refresh_progress() whenever an item changes.

    Attributes:
        id: UUID primary key (auto-generated)
        script_id: Script whose chunks are illustrated
        kind: Job classification enum
        status: Current execution state enum
        config: Immutable generation parameters (provider, style, color, quality, options)
        total_chunks: Number of items
        processed_chunks: Items with status COMPLETED
        failed_chunks: Items with status FAILED
        retry_after: Earliest time a re-queued job may be picked again
        completed_at: Set when status becomes COMPLETED
        error: Summary reason, set only when status is FAILED
        items: Ordered JobItemModel rows (cascade delete)

    Constraints:
        (script_id, kind) UNIQUE while status is pending or processing
    """

    __tablename__ = "jobs"
    __table_args__ = (
        Index(
            "uq_jobs_active_script",
            "script_id",
            "kind",
            unique=True,
            postgresql_where=text("status IN ('pending', 'processing')"),
            sqlite_where=text("status IN ('pending', 'processing')"),
        ),
        Index("ix_jobs_status_created_at", "status", "created_at"),
    )

    script_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("scripts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    kind: Mapped[JobKind] = mapped_column(
        Enum(JobKind, native_enum=False, values_callable=_enum_values, length=50),
        nullable=False,
        default=JobKind.BATCH_IMAGE_GENERATION,
    )

    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, native_enum=False, values_callable=_enum_values, length=20),
        nullable=False,
        default=JobStatus.PENDING,
    )

    config: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        doc="Generation parameters fixed at creation",
    )

    total_chunks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processed_chunks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_chunks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    retry_after: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    items = relationship(
        "JobItemModel",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobItemModel.position",
        lazy="selectin",
    )

    def refresh_progress(self) -> None:
        """Recompute cached progress counters from item statuses."""
        self.total_chunks = len(self.items)
        self.processed_chunks = sum(
            1 for item in self.items if item.status == JobItemStatus.COMPLETED
        )
        self.failed_chunks = sum(
            1 for item in self.items if item.status == JobItemStatus.FAILED
        )

    @property
    def completion_percentage(self) -> int:
        """Completed share of items as a rounded 0-100 value (100 when empty)."""
        if self.total_chunks == 0:
            return 100
        return round(self.processed_chunks / self.total_chunks * 100)

    @property
    def is_complete(self) -> bool:
        """True when every item completed or the job reached COMPLETED."""
        return (
            self.processed_chunks >= self.total_chunks
            or self.status == JobStatus.COMPLETED
        )


class JobItemModel(Base, UUIDMixin):
    """
    One chunk's illustration task within a job.

    The chunk itself belongs to the script; the item only records intent
    and outcome.

    Attributes:
        id: UUID primary key (auto-generated)
        job_id: Parent JobModel (cascade delete)
        chunk_id: Chunk key within the job's script
        position: Processing order within the job
        status: Item execution state enum
        attempts: Provider calls started for this item
        error: Last failure reason (set on FAILED)
        processed_at: When the item reached a terminal state
        image_url: Primary image reference on success
        secondary_image_url: Optional symbol image reference
        scene_description: Scene text used for the primary image
        symbol_description: Symbol text used for the secondary image
    """

    __tablename__ = "job_items"

    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_id: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[JobItemStatus] = mapped_column(
        Enum(JobItemStatus, native_enum=False, values_callable=_enum_values, length=20),
        nullable=False,
        default=JobItemStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    secondary_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    scene_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    symbol_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    job = relationship("JobModel", back_populates="items")
