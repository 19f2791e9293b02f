class AppError(Exception):
    """Base class for all application exceptions."""
    pass
