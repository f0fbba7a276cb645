"""
Database configuration settings.

Jobs, job items, scripts and chunks share one database. PostgreSQL via
asyncpg in deployments; any async SQLAlchemy URL (e.g. sqlite+aiosqlite)
can be supplied through DATABASE_URL instead.

Dependencies: pydantic, pydantic_settings
System role: Job store and script store connection configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from storyboard.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Connection and pool settings, read from POSTGRES_* variables."""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    url: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Complete async URL; wins over the POSTGRES_* parts",
    )

    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = "postgres"
    db: str = "storyboard"
    sslmode: str = Field(default="disable", description="'require' enables TLS")

    # Pool sizing is ignored for SQLite URLs
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    echo_sql: bool = False

    @property
    def async_database_url(self) -> str:
        """URL handed to create_async_engine."""
        if self.url:
            return self.url
        url = f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"
        if self.sslmode == "require":
            url += "?ssl=require"
        return url
