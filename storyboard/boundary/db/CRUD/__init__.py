"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from storyboard.boundary.db.CRUD import script_crud, job_crud

    # Use singleton instances
    job = await job_crud.get_latest_for_script(db, script_id)

    # Or instantiate classes directly for custom behavior
    from storyboard.boundary.db.CRUD import JobCRUD
    custom_crud = JobCRUD()
"""

from storyboard.boundary.db.CRUD.base_crud import BaseCRUD
from storyboard.boundary.db.CRUD.script_crud import ScriptCRUD, script_crud
from storyboard.boundary.db.CRUD.job_crud import JobCRUD, job_crud

__all__ = [
    "BaseCRUD",
    "ScriptCRUD",
    "script_crud",
    "JobCRUD",
    "job_crud",
]
