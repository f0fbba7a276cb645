"""
Asset storage configuration settings.

Selects where generated images are written and how they are addressed.

Dependencies: pydantic_settings
System role: Asset store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for generated image storage."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ASSETS_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(
        default="local",
        description="Storage backend: 'local' for a served directory, 's3' for a bucket",
    )
    local_dir: str = Field(
        default="uploads",
        description="Directory for locally stored images",
    )
    public_path: str = Field(
        default="/api/images",
        description="URL path under which local images are served",
    )
    s3_bucket: str = Field(
        default="storyboard-dev-images",
        description="S3 bucket for generated images",
    )
    s3_region: str = Field(
        default="us-east-1",
        description="AWS region for the image bucket",
    )
    s3_prefix: str = Field(
        default="images",
        description="Key prefix for uploaded images",
    )
