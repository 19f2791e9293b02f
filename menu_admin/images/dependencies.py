"""
Dependency Injection for the image acquisition service.

Usage in an endpoint:
    @router.post("/auto-fill")
    async def auto_fill(service: ImageAcquisitionServiceDependency):
        url = await service.acquire_url(...)
"""
from typing import Annotated, AsyncGenerator

import httpx
from fastapi import Depends
from openai import AsyncOpenAI

from menu_admin.config import settings
from menu_admin.images.service import ImageAcquisitionService
from menu_admin.storage.service import get_storage_service


async def get_image_acquisition_service() -> AsyncGenerator[ImageAcquisitionService, None]:
    """
    Yields a service with its own OpenAI and httpx clients; both are closed after the request.
    The OpenAI client's built-in retries are disabled so the service's backoff policy applies.
    """
    openai_client = AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.OPENAI_TIMEOUT,
        max_retries=0,
    )
    try:
        async with httpx.AsyncClient(timeout=settings.IMAGE_DOWNLOAD_TIMEOUT, follow_redirects=True) as http_client:
            yield ImageAcquisitionService(
                openai_client=openai_client,
                http_client=http_client,
                storage_service=get_storage_service(),
            )
    finally:
        await openai_client.close()


ImageAcquisitionServiceDependency = Annotated[
    ImageAcquisitionService,
    Depends(get_image_acquisition_service)
]
