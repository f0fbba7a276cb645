"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, utcnow: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - ScriptModel, ChunkModel, JobModel, JobItemModel: Core domain entities
  - JobKind, JobStatus, JobItemStatus: Enum types for state tracking
  - script_crud, job_crud: CRUD operation singletons

Dependencies: sqlalchemy, storyboard.configs
System role: Database adapter providing persistent storage for scripts,
chunks, and batch image generation jobs.
"""

from storyboard.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow
from storyboard.boundary.db.connection import (
    get_async_engine,
    get_async_session_factory,
)
from storyboard.boundary.db.models import (
    ACTIVE_JOB_STATUSES,
    ChunkModel,
    JobItemModel,
    JobItemStatus,
    JobKind,
    JobModel,
    JobStatus,
    ScriptModel,
)
from storyboard.boundary.db.CRUD import (
    BaseCRUD,
    JobCRUD,
    ScriptCRUD,
    job_crud,
    script_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utcnow",
    # Connection
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ScriptModel",
    "ChunkModel",
    "JobModel",
    "JobItemModel",
    "JobKind",
    "JobStatus",
    "JobItemStatus",
    "ACTIVE_JOB_STATUSES",
    # CRUD classes
    "BaseCRUD",
    "ScriptCRUD",
    "JobCRUD",
    # CRUD singletons
    "script_crud",
    "job_crud",
]
