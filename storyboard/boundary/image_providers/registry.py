"""
Image provider registry.

Maps each ImageProvider key to its configured adapter. The set of
providers is closed; build_provider_registry() wires all of them from
settings and reports which ones have credentials.

Dependencies: storyboard.configs, storyboard.boundary.storage
System role: Provider lookup for the image service
"""

import logging

from storyboard.boundary.image_providers.base import (
    ImageProvider,
    ImageProviderAdapter,
    ProviderInfo,
)
from storyboard.boundary.image_providers.gemini_provider import GeminiImageProvider
from storyboard.boundary.image_providers.nanobanana_provider import NanoBananaImageProvider
from storyboard.boundary.image_providers.openai_provider import OpenAIImageProvider
from storyboard.boundary.storage.asset_store import AssetStore
from storyboard.configs.providers import ProviderSettings
from storyboard.core.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Lookup of provider adapters keyed by ImageProvider."""

    def __init__(self, adapters: list[ImageProviderAdapter]) -> None:
        self._adapters: dict[ImageProvider, ImageProviderAdapter] = {
            adapter.provider: adapter for adapter in adapters
        }

    def get(self, provider: ImageProvider | str) -> ImageProviderAdapter:
        """
        Return the available adapter for a provider key.

        Args:
            provider: ImageProvider or its string value

        Returns:
            ImageProviderAdapter: Configured adapter

        Raises:
            ProviderUnavailableError: If the key is unknown or has no credentials
        """
        try:
            key = ImageProvider(provider)
        except ValueError:
            raise ProviderUnavailableError(str(provider), available=self.available())

        adapter = self._adapters.get(key)
        if adapter is None or not adapter.is_available():
            raise ProviderUnavailableError(key.value, available=self.available())
        return adapter

    def available(self) -> list[str]:
        """Provider keys that currently have credentials."""
        return [key.value for key, adapter in self._adapters.items() if adapter.is_available()]

    def info(self) -> dict[str, ProviderInfo]:
        return {key.value: adapter.info() for key, adapter in self._adapters.items()}

    async def aclose(self) -> None:
        for adapter in self._adapters.values():
            await adapter.aclose()


def build_provider_registry(
    settings: ProviderSettings,
    asset_store: AssetStore,
) -> ProviderRegistry:
    """
    Create adapters for every supported provider.

    Args:
        settings: Provider credentials and tuning
        asset_store: Shared image store

    Returns:
        ProviderRegistry: Registry with all adapters registered
    """
    registry = ProviderRegistry(
        [
            OpenAIImageProvider(
                asset_store,
                api_key=settings.openai_api_key,
                model=settings.openai_image_model,
                size=settings.openai_image_size,
            ),
            NanoBananaImageProvider(
                asset_store,
                api_key=settings.nanobanana_api_key,
                base_url=settings.nanobanana_base_url,
                poll_interval_seconds=settings.nanobanana_poll_interval_seconds,
                max_poll_attempts=settings.nanobanana_max_poll_attempts,
                callback_url=settings.nanobanana_callback_url,
            ),
            GeminiImageProvider(
                asset_store,
                api_key=settings.google_api_key,
                model=settings.gemini_image_model,
            ),
        ]
    )
    logger.info(
        f"{__name__}:build_provider_registry - Providers available: {registry.available() or 'none'}"
    )
    return registry
