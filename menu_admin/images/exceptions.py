from menu_admin.common.exceptions import AppError


class ImageAcquisitionError(AppError):
    """Base exception for image acquisition; the reason is the exception message"""
    pass


class ImageGenerationError(ImageAcquisitionError):
    """Image generation service returned an error or no image URL"""
    pass


class ImageDownloadError(ImageAcquisitionError):
    """Generated image could not be downloaded or decoded"""
    pass


class ImageStorageError(ImageAcquisitionError):
    """Compressed image could not be published to the object store"""
    pass


class ImageAcquisitionTimeoutError(ImageAcquisitionError):
    def __init__(self, message: str = "Image acquisition timed out"):
        super().__init__(message)
