"""
Image provider adapters.

Exports:
  - ImageProvider, ImageStyle, DescriptionKind: Enums
  - GenerationConfig, GenerationOptions, GeneratedAsset, ProviderInfo: Value types
  - ImageProviderAdapter: Abstract adapter
  - OpenAIImageProvider, NanoBananaImageProvider, GeminiImageProvider: Backends
  - ProviderRegistry, build_provider_registry(): Provider lookup

Dependencies: openai, httpx, tenacity, google-genai
System role: Boundary to external image generation services
"""

from storyboard.boundary.image_providers.base import (
    DescriptionKind,
    GeneratedAsset,
    GenerationConfig,
    GenerationOptions,
    ImageProvider,
    ImageProviderAdapter,
    ImageStyle,
    ProviderInfo,
)
from storyboard.boundary.image_providers.gemini_provider import GeminiImageProvider
from storyboard.boundary.image_providers.nanobanana_provider import NanoBananaImageProvider
from storyboard.boundary.image_providers.openai_provider import OpenAIImageProvider
from storyboard.boundary.image_providers.registry import (
    ProviderRegistry,
    build_provider_registry,
)

__all__ = [
    "DescriptionKind",
    "GeneratedAsset",
    "GenerationConfig",
    "GenerationOptions",
    "ImageProvider",
    "ImageProviderAdapter",
    "ImageStyle",
    "ProviderInfo",
    "GeminiImageProvider",
    "NanoBananaImageProvider",
    "OpenAIImageProvider",
    "ProviderRegistry",
    "build_provider_registry",
]
