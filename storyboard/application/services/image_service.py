"""
Image service orchestrator.

Chooses the generation pipeline for a provider/style combination and
returns one outcome per chunk:

- single-stage: chunk text -> provider -> one image
- two-stage (scene pipeline styles, e.g. NanoBanana + infographic):
  chunk text -> scene and symbol descriptions -> two images

Dependencies: storyboard.boundary.image_providers, storyboard.boundary.llm
System role: Image generation use case shared by batch jobs and single-chunk requests
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

from storyboard.boundary.image_providers.base import (
    DescriptionKind,
    GenerationConfig,
    GenerationOptions,
    ImageProvider,
    ImageProviderAdapter,
    ProviderInfo,
)
from storyboard.boundary.image_providers.registry import ProviderRegistry
from storyboard.boundary.llm.scene_analyzer import ANALYZER_NAME, SceneAnalyzer
from storyboard.core.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkImageOutcome:
    """Images and descriptions produced for one chunk."""

    image_url: str
    provider: ImageProvider
    secondary_image_url: str | None = None
    scene_description: str | None = None
    symbol_description: str | None = None


class ImageService:
    """
    Image service orchestrator.

    Wraps the provider registry and scene analyzer behind a single
    generate_for_chunk() call.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        scene_analyzer: SceneAnalyzer | None = None,
    ) -> None:
        """
        Initialize image service.

        Args:
            registry: Provider adapters keyed by ImageProvider
            scene_analyzer: Text analysis for the two-stage pipeline
        """
        self.registry = registry
        self.scene_analyzer = scene_analyzer

    def ensure_available(self, config: GenerationConfig) -> ImageProviderAdapter:
        """
        Check that a configuration can run right now.

        Args:
            config: Generation parameters

        Returns:
            ImageProviderAdapter: Adapter that will render the images

        Raises:
            ProviderUnavailableError: If the provider (or the scene analyzer
                required by its pipeline) is not configured
        """
        adapter = self.registry.get(config.provider)
        if adapter.uses_scene_pipeline(config.style) and not self._analyzer_available():
            raise ProviderUnavailableError(
                ANALYZER_NAME, available=self.registry.available()
            )
        return adapter

    async def generate_for_chunk(
        self,
        content: str,
        config: GenerationConfig,
    ) -> ChunkImageOutcome:
        """
        Generate the image(s) for one chunk.

        Args:
            content: Chunk text
            config: Provider, style, color, quality and options

        Returns:
            ChunkImageOutcome: Stored image references and descriptions

        Raises:
            ProviderUnavailableError: If the provider cannot be used
            ProviderFailureError: If a backend or the analyzer reports failure
            ProviderTimeoutError: If a backend does not finish in time
        """
        start_time = time.time()
        adapter = self.ensure_available(config)

        logger.info(
            f"{__name__}:generate_for_chunk - START provider={config.provider.value}, "
            f"style={config.style.value}, content_len={len(content)}"
        )

        if adapter.uses_scene_pipeline(config.style):
            outcome = await self._generate_with_scene_analysis(adapter, content, config)
        else:
            asset = await adapter.generate(
                content, GenerationOptions.from_config(config, DescriptionKind.CHUNK)
            )
            outcome = ChunkImageOutcome(image_url=asset.url, provider=adapter.provider)

        logger.info(
            f"{__name__}:generate_for_chunk - END provider={config.provider.value}, "
            f"image_url={outcome.image_url}, secondary={outcome.secondary_image_url}, "
            f"duration_ms={round((time.time() - start_time) * 1000)}"
        )
        return outcome

    async def _generate_with_scene_analysis(
        self,
        adapter: ImageProviderAdapter,
        content: str,
        config: GenerationConfig,
    ) -> ChunkImageOutcome:
        # Both images must succeed; any error propagates and fails the chunk
        scene_description = await self.scene_analyzer.describe_scene(content)
        symbol_description = await self.scene_analyzer.describe_symbol(content)

        main_asset = await adapter.generate(
            scene_description, GenerationOptions.from_config(config, DescriptionKind.SCENE)
        )
        symbol_asset = await adapter.generate(
            symbol_description, GenerationOptions.from_config(config, DescriptionKind.SYMBOL)
        )

        return ChunkImageOutcome(
            image_url=main_asset.url,
            provider=adapter.provider,
            secondary_image_url=symbol_asset.url,
            scene_description=scene_description,
            symbol_description=symbol_description,
        )

    def _analyzer_available(self) -> bool:
        return self.scene_analyzer is not None and self.scene_analyzer.is_available()

    def provider_info(self) -> dict[str, ProviderInfo]:
        """Descriptive status of every registered provider."""
        return self.registry.info()

    def available_providers(self) -> list[str]:
        """Provider keys that currently have credentials."""
        return self.registry.available()

    async def get_account_info(self, provider: ImageProvider | str) -> dict[str, Any]:
        """
        Fetch account details for a provider.

        Raises:
            ProviderUnavailableError: If the provider is unknown or not configured
            ProviderFailureError: If the account endpoint fails
        """
        adapter = self.registry.get(provider)
        return await adapter.get_account_info()

    async def aclose(self) -> None:
        await self.registry.aclose()
        if self.scene_analyzer is not None:
            await self.scene_analyzer.aclose()
