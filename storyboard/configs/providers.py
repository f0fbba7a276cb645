"""
Image provider configuration settings.

API credentials and model identifiers for image generation backends
and the scene analysis language model.

Dependencies: pydantic, pydantic_settings
System role: Provider adapter configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    """Credentials and tuning for OpenAI, NanoBanana and Gemini."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_image_model: str = Field(
        default="gpt-image-1",
        description="OpenAI image generation model",
    )
    openai_image_size: str = Field(default="1024x1024", description="OpenAI image size")
    scene_analysis_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used to turn chunk text into scene/symbol descriptions",
    )

    nanobanana_api_key: str | None = Field(default=None, description="NanoBanana API key")
    nanobanana_base_url: str = Field(
        default="https://api.nanobananaapi.ai/api/v1",
        description="NanoBanana API root",
    )
    nanobanana_poll_interval_seconds: float = Field(
        default=5.0,
        description="Delay between task status checks",
    )
    nanobanana_max_poll_attempts: int = Field(
        default=30,
        description="Status checks before a task is considered timed out",
    )
    nanobanana_callback_url: str = Field(
        default="https://placeholder-callback.com/callback",
        description="Required by the API; results are polled instead",
    )

    google_api_key: str | None = Field(default=None, description="Google API key for Gemini")
    gemini_image_model: str = Field(
        default="gemini-3-pro-image-preview",
        description="Gemini model used for image generation",
    )
