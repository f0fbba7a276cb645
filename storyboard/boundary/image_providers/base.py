"""
Image provider adapter contract.

Every image backend is wrapped in an ImageProviderAdapter so the image
service and job manager can call one uniform generate() regardless of
whether the backend answers synchronously or through submit-then-poll.

Dependencies: abc, dataclasses, enum, botocore
System role: Provider abstraction for image generation
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from storyboard.boundary.storage.asset_store import AssetStore
from storyboard.core.exceptions import ProviderFailureError


class ImageProvider(str, enum.Enum):
    """Supported image generation backends."""

    OPENAI = "openai"
    NANOBANANA = "nanobanana"
    GEMINI = "gemini"


class ImageStyle(str, enum.Enum):
    """Visual styles a storyboard image can be rendered in."""

    INFOGRAPHIC = "infographic"
    DRAWING = "drawing"
    ILLUSTRATION = "illustration"
    ABSTRACT = "abstract"


class DescriptionKind(str, enum.Enum):
    """
    What the description passed to generate() represents.

    CHUNK: Raw chunk text (single-stage pipeline)
    SCENE: Analyzed scene with characters (two-stage primary image)
    SYMBOL: Analyzed symbol or object (two-stage secondary image)
    """

    CHUNK = "chunk"
    SCENE = "scene"
    SYMBOL = "symbol"


@dataclass(frozen=True)
class GenerationConfig:
    """
    Generation parameters fixed when a job is created.

    Attributes:
        provider: Backend used for every image of the job
        style: Visual style
        color: Primary color hint for single-color styles
        quality: Provider quality setting (e.g. "high", "medium", "low")
        options: Provider-specific extras passed through untouched
    """

    provider: ImageProvider = ImageProvider.OPENAI
    style: ImageStyle = ImageStyle.INFOGRAPHIC
    color: str = "white"
    quality: str = "high"
    options: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the job's JSON config column."""
        return {
            "provider": self.provider.value,
            "style": self.style.value,
            "color": self.color,
            "quality": self.quality,
            "options": dict(self.options),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationConfig":
        """
        Rebuild from a stored JSON config.

        Raises:
            ValueError: If provider or style is not a known value
        """
        return cls(
            provider=ImageProvider(data.get("provider", ImageProvider.OPENAI.value)),
            style=ImageStyle(data.get("style", ImageStyle.INFOGRAPHIC.value)),
            color=data.get("color") or "white",
            quality=data.get("quality") or "high",
            options=dict(data.get("options") or {}),
        )


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call rendering options derived from a GenerationConfig."""

    style: ImageStyle = ImageStyle.INFOGRAPHIC
    color: str = "white"
    quality: str = "high"
    kind: DescriptionKind = DescriptionKind.CHUNK
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        config: GenerationConfig,
        kind: DescriptionKind = DescriptionKind.CHUNK,
    ) -> "GenerationOptions":
        return cls(
            style=config.style,
            color=config.color,
            quality=config.quality,
            kind=kind,
            extra=dict(config.options),
        )


@dataclass(frozen=True)
class GeneratedAsset:
    """Stored image produced by a provider."""

    url: str
    provider: ImageProvider
    prompt: str = ""


@dataclass(frozen=True)
class ProviderInfo:
    """Descriptive provider status for the providers endpoint."""

    provider: ImageProvider
    name: str
    available: bool
    description: str


class ImageProviderAdapter(ABC):
    """
    Base class for image generation backends.

    Subclasses declare their provider key, display name and description,
    and implement is_available() and generate(). Styles listed in
    scene_pipeline_styles are rendered through the two-stage scene and
    symbol pipeline by the image service.
    """

    provider: ImageProvider
    display_name: str = ""
    description: str = ""
    scene_pipeline_styles: frozenset[ImageStyle] = frozenset()

    def __init__(self, asset_store: AssetStore) -> None:
        self.asset_store = asset_store

    @abstractmethod
    def is_available(self) -> bool:
        """Return True when the backend is configured with credentials."""

    @abstractmethod
    async def generate(self, description: str, options: GenerationOptions) -> GeneratedAsset:
        """
        Render one image and persist it to the asset store.

        Args:
            description: Chunk text, scene description or symbol description
            options: Style, color, quality and description kind

        Returns:
            GeneratedAsset with the stored image reference

        Raises:
            ProviderFailureError: If the backend reports a failed generation
            ProviderTimeoutError: If the backend does not finish in time
            ProviderUnavailableError: If credentials are missing
        """

    def uses_scene_pipeline(self, style: ImageStyle) -> bool:
        """Return True when style should go through scene and symbol analysis."""
        return style in self.scene_pipeline_styles

    def info(self) -> ProviderInfo:
        return ProviderInfo(
            provider=self.provider,
            name=self.display_name,
            available=self.is_available(),
            description=self.description,
        )

    async def get_account_info(self) -> dict[str, Any]:
        """
        Report account details such as remaining credits.

        Backends without an account endpoint return a short message.
        """
        return {"message": f"Account info not available for {self.provider.value} provider"}

    async def _save_asset(self, image_bytes: bytes, filename: str) -> str:
        """
        Persist generated bytes through the asset store.

        Raises:
            ProviderFailureError: If the local filesystem or S3 write fails
        """
        try:
            return await self.asset_store.save(image_bytes, filename)
        except (OSError, ValueError, BotoCoreError, ClientError) as e:
            raise ProviderFailureError(
                f"Failed to store {self.provider.value} image: {e}",
                provider=self.provider.value,
            ) from e

    async def aclose(self) -> None:
        """Release network clients held by the adapter."""
