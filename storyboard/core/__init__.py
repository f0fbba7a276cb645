"""
Core business logic module.

Contains the job manager (scheduler for batch image generation) and the
exception hierarchy. Import JobManager from storyboard.core.job_manager.
"""

from storyboard.core.exceptions import (
    StoryboardException,
    SubjectNotFoundError,
    NoWorkRemainingError,
    ProviderUnavailableError,
    ChunkMissingError,
    ProviderError,
    ProviderFailureError,
    ProviderTimeoutError,
    PersistenceFailureError,
)

__all__ = [
    "StoryboardException",
    "SubjectNotFoundError",
    "NoWorkRemainingError",
    "ProviderUnavailableError",
    "ChunkMissingError",
    "ProviderError",
    "ProviderFailureError",
    "ProviderTimeoutError",
    "PersistenceFailureError",
]
