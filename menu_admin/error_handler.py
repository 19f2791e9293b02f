import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from menu_admin.images.exceptions import ImageAcquisitionError
from menu_admin.menu_imports.exceptions import BatchRejectedError

logger = logging.getLogger(__name__)


def exception_handler(app: FastAPI) -> None:
    """
    Registers global exception handlers for the FastAPI application.
    Translates domain exceptions into HTTP responses.
    """

    @app.exception_handler(BatchRejectedError)
    async def batch_rejected_handler(request: Request, exc: BatchRejectedError):
        logger.info(f"Menu upload rejected: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message},
        )

    @app.exception_handler(ImageAcquisitionError)
    async def image_acquisition_error_handler(request: Request, exc: ImageAcquisitionError):
        logger.warning(f"Image auto-fill failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"success": False, "error": str(exc)},
        )
