from decimal import Decimal
from typing import Optional
from pydantic import Field
from menu_admin.common.schemas import AppBaseModel

class MenuItemCreate(AppBaseModel):
    """Validated payload for inserting one catalog item."""

    restaurant_id: int = Field(..., gt=0, description="Restaurant ID")
    category_id: Optional[int] = Field(None, gt=0, description="Category ID")
    name: str = Field(..., min_length=1, max_length=255, description="Item name")
    description: str = Field(default="", description="Item description")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Price (non-negative)")
    is_vegetarian: bool = Field(default=False)
    is_vegan: bool = Field(default=False)
    is_available: bool = Field(default=True)
    preparation_time: int = Field(default=15, ge=0, description="Preparation time in minutes")
    image_url: Optional[str] = Field(None, description="Public image URL")
