"""
NanoBanana image provider.

NanoBanana works submit-then-poll: POST /nanobanana/generate returns a
taskId, GET /nanobanana/record-info reports progress through successFlag
(0 running, 1 done, 2/3 failed). Finished images are downloaded from the
result URL and saved to the asset store.

Dependencies: httpx, tenacity, storyboard.boundary.storage
System role: Asynchronous (polled) image generation backend
"""

import asyncio
import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from storyboard.boundary.image_providers.base import (
    DescriptionKind,
    GeneratedAsset,
    GenerationOptions,
    ImageProvider,
    ImageProviderAdapter,
    ImageStyle,
)
from storyboard.boundary.image_providers.prompts import build_image_prompt
from storyboard.boundary.storage.asset_store import AssetStore, build_asset_filename
from storyboard.core.exceptions import (
    ProviderFailureError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

SUCCESS_FLAG_RUNNING = 0
SUCCESS_FLAG_DONE = 1
SUCCESS_FLAG_FAILED = (2, 3)
SUBMIT_ATTEMPTS = 3


class NanoBananaImageProvider(ImageProviderAdapter):
    """
    Adapter over the NanoBanana REST API.

    Infographic style goes through the two-stage scene and symbol pipeline.
    """

    provider = ImageProvider.NANOBANANA
    display_name = "NanoBanana AI"
    description = "Fast and efficient image generation with NanoBanana API"
    scene_pipeline_styles = frozenset({ImageStyle.INFOGRAPHIC})

    def __init__(
        self,
        asset_store: AssetStore,
        api_key: str | None,
        base_url: str = "https://api.nanobananaapi.ai/api/v1",
        poll_interval_seconds: float = 5.0,
        max_poll_attempts: int = 30,
        callback_url: str = "https://placeholder-callback.com/callback",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize NanoBanana provider.

        Args:
            asset_store: Where downloaded images are saved
            api_key: NanoBanana API key (provider unavailable when None)
            base_url: API root, without the /nanobanana segment
            poll_interval_seconds: Delay between status checks
            max_poll_attempts: Status checks before giving up
            callback_url: Required by the submit call; results are polled
            http_client: Optional preconfigured client (tests)
        """
        super().__init__(asset_store)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_attempts = max_poll_attempts
        self.callback_url = callback_url
        self._client = http_client

    def is_available(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(60.0, connect=10.0))
        return self._client

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def generate(self, description: str, options: GenerationOptions) -> GeneratedAsset:
        if not self.is_available():
            raise ProviderUnavailableError(self.provider.value)

        prompt = build_image_prompt(description, options)
        logger.info(
            f"{__name__}:generate - START kind={options.kind.value}, "
            f"style={options.style.value}, prompt_len={len(prompt)}"
        )

        try:
            task_id = await self._submit_task(prompt)
        except httpx.TransportError as e:
            raise ProviderFailureError(
                f"NanoBanana submit failed after {SUBMIT_ATTEMPTS} attempts: {e}",
                provider=self.provider.value,
            ) from e
        logger.info(f"{__name__}:generate - Task created task_id={task_id}")

        result_url = await self._poll_task(task_id)

        prefix = "symbol" if options.kind == DescriptionKind.SYMBOL else "nanobanana"
        url = await self._download_and_store(result_url, description, prefix)

        logger.info(f"{__name__}:generate - END task_id={task_id}, url={url}")
        return GeneratedAsset(url=url, provider=self.provider, prompt=prompt)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(SUBMIT_ATTEMPTS),
        wait=wait_exponential_jitter(initial=0.5, max=5, jitter=0.5),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"{__name__}:_submit_task - Retry {retry_state.attempt_number}/{SUBMIT_ATTEMPTS} "
            f"after transport error"
        ),
    )
    async def _submit_task(self, prompt: str) -> str:
        """
        Submit a text-to-image task and return its taskId.

        Transport errors are retried; HTTP errors are not.

        Raises:
            httpx.TransportError: If every submit attempt fails to connect
                (generate() converts it to ProviderFailureError)
            ProviderFailureError: If the API rejects the task
        """
        payload = {
            "prompt": prompt,
            "numImages": 1,
            "type": "TEXTTOIAMGE",
            "callBackUrl": self.callback_url,
        }
        response = await self.client.post(
            f"{self.base_url}/nanobanana/generate",
            json=payload,
            headers=self._headers,
        )
        if response.is_error:
            raise ProviderFailureError(
                f"NanoBanana submit failed with HTTP {response.status_code}: {response.text[:200]}",
                provider=self.provider.value,
            )

        body = self._read_json(response, "submit")
        task_id = (body.get("data") or {}).get("taskId")
        if not task_id:
            raise ProviderFailureError(
                f"NanoBanana submit returned no taskId: {body.get('msg', 'unknown error')}",
                provider=self.provider.value,
            )
        return task_id

    async def _poll_task(self, task_id: str) -> str:
        """
        Poll task status until it finishes.

        Returns:
            str: Result image URL

        Raises:
            ProviderFailureError: If the task failed or is unknown
            ProviderTimeoutError: If max_poll_attempts checks pass without a result
        """
        for attempt in range(1, self.max_poll_attempts + 1):
            try:
                response = await self.client.get(
                    f"{self.base_url}/nanobanana/record-info",
                    params={"taskId": task_id},
                    headers=self._headers,
                )
            except httpx.TransportError as e:
                raise ProviderFailureError(
                    f"NanoBanana status check failed for task {task_id}: {e}",
                    provider=self.provider.value,
                ) from e

            if response.status_code == 404:
                raise ProviderFailureError(
                    f"Task {task_id} not found", provider=self.provider.value
                )
            if response.is_error:
                raise ProviderFailureError(
                    f"NanoBanana status check failed with HTTP {response.status_code}",
                    provider=self.provider.value,
                )

            task_data = self._read_json(response, "status check").get("data") or {}
            success_flag = task_data.get("successFlag", SUCCESS_FLAG_RUNNING)

            if success_flag == SUCCESS_FLAG_DONE:
                result = task_data.get("response") or {}
                result_url = result.get("resultImageUrl") or result.get("originImageUrl")
                if not result_url:
                    raise ProviderFailureError(
                        f"Task {task_id} completed without an image URL",
                        provider=self.provider.value,
                    )
                return result_url

            if success_flag in SUCCESS_FLAG_FAILED:
                raise ProviderFailureError(
                    f"NanoBanana task failed: {task_data.get('errorMessage') or 'Unknown error'}",
                    provider=self.provider.value,
                )

            logger.debug(
                f"{__name__}:_poll_task - Task {task_id} still in progress, "
                f"attempt {attempt}/{self.max_poll_attempts}"
            )
            if attempt < self.max_poll_attempts:
                await asyncio.sleep(self.poll_interval_seconds)

        raise ProviderTimeoutError(
            f"Task {task_id} did not complete within "
            f"{self.max_poll_attempts * self.poll_interval_seconds:.0f} seconds",
            provider=self.provider.value,
        )

    def _read_json(self, response: httpx.Response, context: str) -> dict[str, Any]:
        """Decode a JSON object body, raising ProviderFailureError when it is malformed."""
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderFailureError(
                f"NanoBanana {context} returned invalid JSON: {e}", provider=self.provider.value
            ) from e
        if not isinstance(body, dict):
            raise ProviderFailureError(
                f"NanoBanana {context} returned an unexpected payload",
                provider=self.provider.value,
            )
        return body

    async def _download_and_store(self, image_url: str, description: str, prefix: str) -> str:
        try:
            response = await self.client.get(image_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderFailureError(
                f"Failed to download NanoBanana image: {e}", provider=self.provider.value
            ) from e

        filename = build_asset_filename(prefix, description)
        return await self._save_asset(response.content, filename)

    async def get_account_credits(self) -> Any:
        """
        Fetch remaining account credits.

        Returns:
            The API's credits payload (usually a number)

        Raises:
            ProviderUnavailableError: If no API key is configured
            ProviderFailureError: If the request fails
        """
        if not self.is_available():
            raise ProviderUnavailableError(self.provider.value)

        try:
            response = await self.client.get(
                f"{self.base_url}/common/credits",
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderFailureError(
                f"Failed to get account credits: {e}", provider=self.provider.value
            ) from e
        return self._read_json(response, "credits").get("data")

    async def get_account_info(self) -> dict[str, Any]:
        credits = await self.get_account_credits()
        return {"provider": self.provider.value, "credits": credits}

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
