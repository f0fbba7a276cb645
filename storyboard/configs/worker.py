"""
Batch worker configuration settings.

Timing and retry knobs for the background job processing loop.

Dependencies: pydantic, pydantic_settings
System role: Scheduling loop configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerSettings(BaseSettings):
    """Job manager loop configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WORKER_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Start the background processing loop with the API process",
    )
    poll_interval_seconds: float = Field(
        default=5.0,
        description="Idle wait between checks when no job is pending",
    )
    item_delay_seconds: float = Field(
        default=1.0,
        description="Delay between provider calls inside a job (rate limiting)",
    )
    error_backoff_seconds: float = Field(
        default=10.0,
        description="Wait after a persistence failure before the next tick",
    )
    item_timeout_seconds: float = Field(
        default=600.0,
        description="Hard deadline for a single chunk generation call",
    )
    max_item_attempts: int = Field(
        default=3,
        ge=1,
        description="Provider attempts per chunk before the job is marked failed",
    )
    retry_base_delay_seconds: float = Field(
        default=30.0,
        description="Base delay before a job with failed chunks is picked up again",
    )
