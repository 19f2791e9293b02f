"""
Image acquisition pipeline for menu items without a photo.

generate (OpenAI Images) -> download (httpx) -> compress to budget (Pillow)
-> publish (Supabase Storage). Each step runs only after the previous one
finished; a failing step ends the pipeline with ImageAcquisitionError.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx
import openai
from openai import AsyncOpenAI
from PIL import Image
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from menu_admin.config import settings
from menu_admin.images.compression import CompressionSettings, compress_to_budget
from menu_admin.images.exceptions import (
    ImageAcquisitionError,
    ImageAcquisitionTimeoutError,
    ImageDownloadError,
    ImageGenerationError,
    ImageStorageError,
)
from menu_admin.images.schemas import ImageAcquisitionRequest, ImageAcquisitionResult
from menu_admin.storage.service import StorageService

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    "Simple, realistic photo of {query} served on a plain plate in a local Indian restaurant, "
    "casual dining style, natural lighting, no fancy garnish"
)
IMAGE_SIZE = "1024x1024"
IMAGE_QUALITY = "standard"
STORAGE_FOLDER = "menu-items"


def build_prompt(query: str, item_name: Optional[str] = None, restaurant_name: Optional[str] = None) -> str:
    """
    Embeds the dish description in the fixed photo prompt.
    The menu name is added only when it says something the query does not.
    """
    prompt = PROMPT_TEMPLATE.format(query=query.strip())
    if item_name and item_name.strip().lower() != query.strip().lower():
        prompt += f'. The dish is listed on the menu as "{item_name.strip()}"'
    if restaurant_name and restaurant_name.strip():
        prompt += f". Restaurant: {restaurant_name.strip()}"
    return prompt


def _is_rate_limited(exception: BaseException) -> bool:
    """Only 429 responses are retried; every other error is terminal."""
    return isinstance(exception, openai.RateLimitError)


def _log_backoff(retry_state: RetryCallState) -> None:
    logger.warning(
        f"OpenAI rate limit hit (attempt {retry_state.attempt_number}). "
        f"Retrying in {retry_state.next_action.sleep:.0f}s"
    )


class ImageAcquisitionService:
    """
    Synthesizes a product photo and returns its public URL.

    Retries against the generation service are serialized per request: the
    next attempt starts only after the previous one returned a 429 and the
    backoff delay (2s, 4s, 8s by default) elapsed.
    """

    def __init__(
        self,
        openai_client: AsyncOpenAI,
        http_client: httpx.AsyncClient,
        storage_service: StorageService,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.openai_client = openai_client
        self.http_client = http_client
        self.storage_service = storage_service
        self._sleep = sleep

    async def acquire(self, request: ImageAcquisitionRequest) -> ImageAcquisitionResult:
        """Runs the pipeline and reports failure as a value instead of raising."""
        try:
            url = await self.acquire_url(request)
        except ImageAcquisitionError as e:
            logger.warning(f"Image acquisition failed for '{request.query}': {e}")
            return ImageAcquisitionResult.failed(str(e))
        return ImageAcquisitionResult.succeeded(url)

    async def acquire_url(self, request: ImageAcquisitionRequest) -> str:
        """
        Runs generate -> download -> compress -> publish under the overall timeout.

        Returns:
            Public URL of the stored JPEG

        Raises:
            ImageAcquisitionError: Any terminal failure (timeout included)
        """
        logger.info(f"Generating image for: {request.query}")
        try:
            return await asyncio.wait_for(
                self._run_pipeline(request),
                timeout=settings.IMAGE_ACQUISITION_TIMEOUT,
            )
        except asyncio.TimeoutError as e:
            raise ImageAcquisitionTimeoutError() from e

    async def _run_pipeline(self, request: ImageAcquisitionRequest) -> str:
        prompt = build_prompt(request.query, request.item_name, request.restaurant_name)

        generated_url = await self.generate_image_url(prompt)
        image_bytes = await self.download_image(generated_url)

        start = CompressionSettings(size=settings.IMAGE_INITIAL_SIZE, quality=settings.IMAGE_INITIAL_QUALITY)
        try:
            compressed = await asyncio.to_thread(
                compress_to_budget, image_bytes, settings.IMAGE_SIZE_BUDGET_BYTES, start
            )
        except (OSError, Image.DecompressionBombError) as e:
            raise ImageDownloadError(f"Download Error: downloaded file is not a valid image ({e})") from e

        try:
            public_url = await self.storage_service.upload_public_file(
                compressed.data, folder=STORAGE_FOLDER, extension="jpg", content_type="image/jpeg"
            )
        except Exception as e:
            raise ImageStorageError(f"Upload Error: {e}") from e

        logger.info(f"Image for '{request.query}' published: {public_url}")
        return public_url

    async def generate_image_url(self, prompt: str) -> str:
        """
        Requests one generated image, retrying only on rate limiting.

        Raises:
            ImageGenerationError: Non-429 error, retries exhausted, or no URL in the response
        """
        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(settings.IMAGE_GENERATION_MAX_RETRIES + 1),
            wait=wait_exponential(multiplier=settings.IMAGE_GENERATION_BACKOFF_SECONDS, exp_base=2),
            retry=retry_if_exception(_is_rate_limited),
            before_sleep=_log_backoff,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self.openai_client.images.generate(
                        model=settings.OPENAI_IMAGE_MODEL,
                        prompt=prompt,
                        n=1,
                        size=IMAGE_SIZE,
                        quality=IMAGE_QUALITY,
                    )
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else ""
            raise ImageGenerationError(f"OpenAI Error ({e.status_code}): {body or e.message or 'Unknown Error'}") from e
        except openai.APIError as e:
            raise ImageGenerationError(f"OpenAI Error: {e}") from e

        image_url = response.data[0].url if response.data else None
        if not image_url:
            raise ImageGenerationError("OpenAI failed to return an image URL")

        return image_url

    async def download_image(self, url: str) -> bytes:
        """
        Raises:
            ImageDownloadError: Transport error or non-2xx response
        """
        logger.info(f"Downloading generated image: {url}")
        try:
            response = await self.http_client.get(url)
        except httpx.HTTPError as e:
            raise ImageDownloadError(f"Download Error: {e}") from e

        if not response.is_success:
            raise ImageDownloadError(
                f"Download Error ({response.status_code}): {response.text or response.reason_phrase or 'Unknown Error'}"
            )

        return response.content
