"""
Async engine and session factory.

The lifespan builds one engine and one session factory; the job manager
opens a short session per store step and request handlers get one
session per request from the same factory.

Dependencies: sqlalchemy, storyboard.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from storyboard.configs import get_settings


def get_async_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Build the async engine for the configured (or given) URL.

    PostgreSQL gets a sized pool with pre-ping so connections dropped
    while the loop sat idle are replaced transparently. SQLite keeps the
    driver's own pooling.

    Args:
        database_url: Overrides the configured URL (tests, scripts)

    Returns:
        AsyncEngine: Engine ready for create_all_tables and session factories
    """
    db_config = get_settings().database
    url = database_url or db_config.async_database_url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=db_config.echo_sql)

    return create_async_engine(
        url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Session factory shared by the job manager and request dependencies.

    expire_on_commit=False keeps job and chunk rows readable after the
    commit that ends each store step; autoflush=False leaves flushing to
    the CRUD methods.

    Usage:
        factory = get_async_session_factory(engine)
        async with factory() as session:
            await job_crud.get_by_id(session, job_id)
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )
