"""
OpenAI image provider.

Renders images with the OpenAI Images API (gpt-image-1), which answers
synchronously with base64 data that is decoded and saved to the asset store.

Dependencies: openai, storyboard.boundary.storage
System role: Synchronous image generation backend
"""

import base64
import binascii
import logging

from openai import APIError, APITimeoutError, AsyncOpenAI

from storyboard.boundary.image_providers.base import (
    GeneratedAsset,
    GenerationOptions,
    ImageProvider,
    ImageProviderAdapter,
)
from storyboard.boundary.image_providers.prompts import build_image_prompt
from storyboard.boundary.storage.asset_store import AssetStore, build_asset_filename
from storyboard.core.exceptions import (
    ProviderFailureError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from storyboard.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)


class OpenAIImageProvider(ImageProviderAdapter):
    """Adapter over AsyncOpenAI.images.generate."""

    provider = ImageProvider.OPENAI
    display_name = "OpenAI GPT-Image-1"
    description = "High-quality image generation using OpenAI's latest model"

    def __init__(
        self,
        asset_store: AssetStore,
        api_key: str | None,
        model: str = "gpt-image-1",
        size: str = "1024x1024",
        client: AsyncOpenAI | None = None,
    ) -> None:
        """
        Initialize OpenAI image provider.

        Args:
            asset_store: Where decoded images are saved
            api_key: OpenAI API key (provider unavailable when None)
            model: Image model identifier
            size: Output size, e.g. "1024x1024"
            client: Optional preconfigured client (tests)
        """
        super().__init__(asset_store)
        self.api_key = api_key
        self.model = model
        self.size = size
        self._client = client

    def is_available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def generate(self, description: str, options: GenerationOptions) -> GeneratedAsset:
        if not self.is_available():
            raise ProviderUnavailableError(self.provider.value)

        prompt = f"Generate an image: {build_image_prompt(description, options)}"
        logger.info(
            f"{__name__}:generate - START model={self.model}, quality={options.quality}, "
            f"style={options.style.value}, kind={options.kind.value}, "
            f"description={safe_log_value(description, max_length=60)}"
        )

        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                quality=options.quality,
                size=self.size,
                n=1,
            )
        except APITimeoutError as e:
            raise ProviderTimeoutError(
                f"OpenAI image request timed out: {e}", provider=self.provider.value
            ) from e
        except APIError as e:
            raise ProviderFailureError(
                f"OpenAI image generation failed: {e}", provider=self.provider.value
            ) from e

        b64_data = response.data[0].b64_json if response.data else None
        if not b64_data:
            raise ProviderFailureError(
                "No image data received from OpenAI", provider=self.provider.value
            )

        try:
            image_bytes = base64.b64decode(b64_data)
        except (binascii.Error, ValueError) as e:
            raise ProviderFailureError(
                f"Invalid base64 image data from OpenAI: {e}", provider=self.provider.value
            ) from e

        filename = build_asset_filename("image", description)
        url = await self._save_asset(image_bytes, filename)

        logger.info(f"{__name__}:generate - END url={url}")
        return GeneratedAsset(url=url, provider=self.provider, prompt=prompt)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
