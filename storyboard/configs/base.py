"""
Service-wide settings shared by every config class.

Concern-specific classes (database, worker, providers, storage) subclass
this so one `.env` file feeds all of them.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings read from the environment and `.env`, case-insensitive."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development", description="Deployment name shown in logs")
    log_level: str = Field(default="INFO", description="Root log level")

    api_host: str = Field(default="0.0.0.0", description="Bind address for uvicorn")
    api_port: int = Field(default=8000, description="Bind port for uvicorn")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API (the storyboard frontend)",
    )
