"""
Application settings.

One Settings object holds the per-concern groups the lifespan needs to
wire the service: database for both stores, worker for the job loop,
providers for the image adapters and scene analyzer, storage for where
generated images go.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from storyboard.configs.base import BaseSettings
from storyboard.configs.database import DatabaseSettings
from storyboard.configs.providers import ProviderSettings
from storyboard.configs.storage import StorageSettings
from storyboard.configs.worker import WorkerSettings


class Settings(BaseSettings):
    """Service settings plus one nested group per concern."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Settings read once per process.

    Tests that change the environment call ``get_settings.cache_clear()``.

    Usage:
        from storyboard.configs import get_settings
        settings = get_settings()
    """
    return Settings()
