"""Gemini image provider.

Calls Google Gemini image generation through the google-genai SDK and
saves the inline image bytes to the asset store.

Dependencies: google.genai, asyncio, storyboard.boundary.storage
System role: Synchronous image generation backend
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from storyboard.boundary.image_providers.base import (
    GeneratedAsset,
    GenerationOptions,
    ImageProvider,
    ImageProviderAdapter,
)
from storyboard.boundary.image_providers.prompts import build_image_prompt
from storyboard.boundary.storage.asset_store import (
    AssetStore,
    build_asset_filename,
    detect_image_format,
)
from storyboard.core.exceptions import ProviderFailureError, ProviderUnavailableError

if TYPE_CHECKING:
    from google import genai

logger = logging.getLogger(__name__)


class GeminiImageProvider(ImageProviderAdapter):
    """Adapter over genai.Client.models.generate_content for image models."""

    provider = ImageProvider.GEMINI
    display_name = "Google Gemini Image"
    description = "Image generation with Google's Gemini image models"

    def __init__(
        self,
        asset_store: AssetStore,
        api_key: str | None,
        model: str = "gemini-3-pro-image-preview",
        client: "genai.Client | None" = None,
    ) -> None:
        super().__init__(asset_store)
        self.api_key = api_key
        self.model = model
        self._client = client

    def is_available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> "genai.Client":
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(self, description: str, options: GenerationOptions) -> GeneratedAsset:
        """Generate image via Gemini.

        The SDK call is blocking, so it runs in a worker thread. The first
        inline_data part of the first candidate that carries one is used.

        Raises:
            ProviderUnavailableError: If no API key is configured
            ProviderFailureError: If the call fails or returns no image
        """
        if not self.is_available():
            raise ProviderUnavailableError(self.provider.value)

        prompt = build_image_prompt(description, options)
        logger.info(
            f"{__name__}:generate - START model={self.model}, prompt_len={len(prompt)}"
        )

        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=prompt,
            )
        except Exception as e:
            logger.error(
                f"{__name__}:generate - FAILED at Gemini API call - {type(e).__name__}: {e}"
            )
            raise ProviderFailureError(
                f"Gemini image generation failed: {e}", provider=self.provider.value
            ) from e

        image_bytes = self._extract_image(response)
        if not image_bytes:
            raise ProviderFailureError(
                "No image data found in Gemini response", provider=self.provider.value
            )

        _, extension = detect_image_format(image_bytes[:16])
        filename = build_asset_filename("gemini", description, extension)
        url = await self._save_asset(image_bytes, filename)

        logger.info(f"{__name__}:generate - END url={url}")
        return GeneratedAsset(url=url, provider=self.provider, prompt=prompt)

    @staticmethod
    def _extract_image(response) -> bytes | None:
        for candidate in response.candidates or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline_data = getattr(part, "inline_data", None)
                if inline_data and inline_data.data:
                    return inline_data.data
        return None
