"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_db_session,
    get_image_service,
    get_job_manager,
    get_script_service,
    get_session_factory,
)

__all__ = [
    "get_db_session",
    "get_image_service",
    "get_job_manager",
    "get_script_service",
    "get_session_factory",
]
