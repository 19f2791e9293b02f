"""
Bulk Menu Import module.

Turns an uploaded CSV into catalog items across many restaurants and reports
the outcome of every row, grouped by restaurant.
"""

from menu_admin.menu_imports.service import MenuImportService
from menu_admin.menu_imports.exceptions import BatchRejectedError, MenuImportError

__all__ = ["MenuImportService", "BatchRejectedError", "MenuImportError"]
