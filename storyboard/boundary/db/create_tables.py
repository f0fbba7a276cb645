"""
Schema bootstrap for the job store and the script store.

The API lifespan calls create_all_tables() before the job loop starts;
run this module directly to prepare a database ahead of deployment.

Dependencies: sqlalchemy, storyboard.boundary.db
System role: Database schema initialization

Usage:
    python -m storyboard.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from storyboard.boundary.db.base import Base
from storyboard.boundary.db.connection import get_async_engine

# Registers scripts, chunks, jobs and job_items on Base.metadata
from storyboard.boundary.db.models.script_model import ScriptModel  # noqa: F401
from storyboard.boundary.db.models.job_model import JobModel  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create missing tables and indexes, leaving existing ones untouched.

    Includes the partial unique index that allows one pending or
    processing job per script.

    Args:
        engine: Engine to use; a configured one is created when omitted

    Raises:
        SQLAlchemyError: If the database is unreachable or rejects the DDL
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{__name__}:create_all_tables - Tables ready: {sorted(Base.metadata.tables)}")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """Drop every storyboard table, jobs and scripts alike. Development only."""
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning(f"{__name__}:drop_all_tables - All tables dropped")


if __name__ == "__main__":
    from storyboard.observability.logger import configure_logging

    configure_logging()
    asyncio.run(create_all_tables())
