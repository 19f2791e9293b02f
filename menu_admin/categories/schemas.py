from pydantic import Field, field_validator
from menu_admin.common.schemas import AppBaseModel

class CategoryCreate(AppBaseModel):

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Category name (required, 1-255 characters)"
    )

    sort_order: int = Field(
        0,
        ge=0,
        description="Position in the menu (ascending)"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Category name cannot be empty")
        return v
