from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from menu_admin.images.dependencies import ImageAcquisitionServiceDependency
from menu_admin.images.schemas import ImageAcquisitionRequest, ImageAcquisitionResult
from menu_admin.middleware.rate_limit import check_image_autofill_rate_limit

router = APIRouter()


@router.post(
    "/auto-fill",
    response_model=ImageAcquisitionResult,
    response_model_exclude_none=True,
    dependencies=[Depends(check_image_autofill_rate_limit)],
    summary="Generate a product photo for a menu item",
)
async def auto_fill_image(request: ImageAcquisitionRequest, service: ImageAcquisitionServiceDependency):
    """
    Generates, compresses (≤ 50KB target) and publishes a photo for one dish.

    **Response:**
    - Success (200): `{success: true, url}`
    - Error (400): Query is missing
    - Error (429): Rate limit exceeded
    - Error (502): Generation, download or upload failed (`{success: false, error}`)
    """
    if not request.query:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Query is required"},
        )

    # ImageAcquisitionError propagates to the global exception handler (502)
    url = await service.acquire_url(request)
    return ImageAcquisitionResult.succeeded(url)
