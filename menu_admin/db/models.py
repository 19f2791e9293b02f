"""
Imports every mapped model so that Base.metadata and relationship
resolution see the full schema (used by main.py and tests).
"""
from menu_admin.restaurants.models import Restaurant  # noqa: F401
from menu_admin.categories.models import Category  # noqa: F401
from menu_admin.menu_items.models import MenuItem  # noqa: F401
