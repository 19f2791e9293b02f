from typing import Optional
from pydantic import ConfigDict, Field
from menu_admin.common.schemas import AppBaseModel


class ImageAcquisitionRequest(AppBaseModel):
    """
    Request for one generated product photo.
    `item_name` and `restaurant_name` only shape the generation prompt.
    """
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(default="", description="Short description of the dish (usually the item name)")
    item_name: Optional[str] = Field(None, alias="itemName", description="Menu item name")
    restaurant_name: Optional[str] = Field(None, alias="restaurantName", description="Restaurant name")


class ImageAcquisitionResult(AppBaseModel):
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, url: str) -> "ImageAcquisitionResult":
        return cls(success=True, url=url)

    @classmethod
    def failed(cls, error: str) -> "ImageAcquisitionResult":
        return cls(success=False, error=error)
