"""
Database models package.

Exports:
  - ScriptModel, ChunkModel: Document store for scripts and their chunks
  - JobModel, JobItemModel: Batch job store
  - JobKind, JobStatus, JobItemStatus: Job enums

Dependencies: sqlalchemy, storyboard.boundary.db.base
System role: Database model definitions for domain entities
"""

from storyboard.boundary.db.models.script_model import ChunkModel, ScriptModel
from storyboard.boundary.db.models.job_model import (
    ACTIVE_JOB_STATUSES,
    JobItemModel,
    JobItemStatus,
    JobKind,
    JobModel,
    JobStatus,
)

__all__ = [
    "ScriptModel",
    "ChunkModel",
    "JobModel",
    "JobItemModel",
    "JobKind",
    "JobStatus",
    "JobItemStatus",
    "ACTIVE_JOB_STATUSES",
]
