from menu_admin.common.exceptions import AppError


class MenuImportError(AppError):
    """Base exception for bulk menu import errors"""
    pass


class BatchRejectedError(MenuImportError):
    """The uploaded file cannot be processed at all; nothing was written."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class RowFailedError(MenuImportError):
    """A single row could not be imported. Sibling rows are not affected."""

    reason: str = "Row import failed"

    def __init__(self, reason: str | None = None):
        if reason is not None:
            self.reason = reason
        super().__init__(self.reason)


class RestaurantNotFoundError(RowFailedError):
    reason = "Restaurant not found"


class MissingItemNameError(RowFailedError):
    reason = "Missing item name"


class InvalidPriceError(RowFailedError):
    reason = "Invalid price"


class CategoryCreateFailedError(RowFailedError):
    def __init__(self, detail: str):
        super().__init__(f"Category creation failed: {detail}")


class WriteFailedError(RowFailedError):
    """Insert of the catalog item failed (constraint violation, connectivity)."""
    pass


class BatchDeadlineExceededError(RowFailedError):
    reason = "Batch deadline exceeded"
