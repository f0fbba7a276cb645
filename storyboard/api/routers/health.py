"""
Health check API endpoints.

Routes: GET /health, GET /health/db

Dependencies: sqlalchemy, storyboard.api.deps
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.api.deps import get_db_session, get_job_manager
from storyboard.core.job_manager import JobManager

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(
    job_manager: JobManager = Depends(get_job_manager),
) -> HealthResponse:
    """Basic health check, reporting whether the job loop is running."""
    loop_state = "running" if job_manager.is_running else "stopped"
    return HealthResponse(status="healthy", message=f"Server Healthy, job loop {loop_state}")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(
    db: AsyncSession = Depends(get_db_session),
) -> HealthResponse:
    """Database health check."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"{__name__}:health_check_db - Database unreachable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection failed",
        )
    return HealthResponse(status="healthy", message="Database connection OK")
