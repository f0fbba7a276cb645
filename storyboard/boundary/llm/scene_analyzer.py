"""Scene analysis via OpenAI chat completions.

First stage of the two-stage image pipeline: reads a chunk of narration
and describes (a) a drawable scene with characters and (b) one symbolic
object. Each description is rendered by an image provider afterwards.

Dependencies: openai, storyboard.boundary.image_providers.prompts
System role: Text analysis collaborator for the image service
"""

import logging

from openai import APIError, APITimeoutError, AsyncOpenAI

from storyboard.boundary.image_providers.prompts import (
    SCENE_ANALYSIS_SYSTEM_PROMPT,
    SYMBOL_ANALYSIS_SYSTEM_PROMPT,
)
from storyboard.core.exceptions import (
    ProviderFailureError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from storyboard.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)

ANALYZER_NAME = "scene_analysis"


class SceneAnalyzer:
    """Produces scene and symbol descriptions from chunk content."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize analyzer.

        Args:
            api_key: OpenAI API key
            model: Chat model identifier
            client: Optional preconfigured client (tests)
        """
        self.api_key = api_key
        self.model = model
        self._client = client

    def is_available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def describe_scene(self, content: str) -> str:
        """Describe a drawable scene with characters for the chunk."""
        return await self._complete("describe_scene", SCENE_ANALYSIS_SYSTEM_PROMPT, content)

    async def describe_symbol(self, content: str) -> str:
        """Name one object or symbol that represents the chunk."""
        return await self._complete("describe_symbol", SYMBOL_ANALYSIS_SYSTEM_PROMPT, content)

    async def _complete(self, operation: str, system_prompt: str, content: str) -> str:
        if not self.is_available():
            raise ProviderUnavailableError(ANALYZER_NAME)

        logger.info(
            f"{__name__}:{operation} - START model={self.model}, "
            f"content={safe_log_value(content, max_length=60)}"
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": content},
                ],
                temperature=0.4,
            )
        except APITimeoutError as e:
            raise ProviderTimeoutError(
                f"Scene analysis timed out: {e}", provider=ANALYZER_NAME
            ) from e
        except APIError as e:
            raise ProviderFailureError(
                f"Scene analysis failed: {e}", provider=ANALYZER_NAME
            ) from e

        text = (response.choices[0].message.content or "").strip().strip('"')
        if not text:
            raise ProviderFailureError(
                "Scene analysis returned an empty description", provider=ANALYZER_NAME
            )

        logger.info(f"{__name__}:{operation} - END description={safe_log_value(text, max_length=120)}")
        return text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
