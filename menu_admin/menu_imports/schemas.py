import enum
from typing import Optional
from pydantic import Field
from menu_admin.common.schemas import AppBaseModel


class ImportRow(AppBaseModel):
    """
    One record of the uploaded CSV (Intermediate Representation).

    Cells are kept as raw text; the Row Committer normalizes them.
    `image_url` is the only field mutated after parsing (image backfill).
    """
    line_number: int = Field(..., ge=1, description="1-based data row number in the file")
    restaurant_name: str = Field(default="", description="Restaurant Name column")
    item_name: str = Field(default="", description="Name column")
    price: str = Field(default="", description="Price column (raw text)")
    category_name: Optional[str] = Field(None, description="Category column")
    description: Optional[str] = Field(None, description="Description column")
    is_vegetarian: Optional[str] = Field(None, description="Veg column (yes/true/1)")
    is_vegan: Optional[str] = Field(None, description="Vegan column (yes/true/1)")
    preparation_time: Optional[str] = Field(None, description="Prep Time column (minutes)")
    is_available: Optional[str] = Field(None, description="Available column (no/false/0 to hide)")
    image_url: Optional[str] = Field(None, description="Image URL column")

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)


class OutcomeKind(str, enum.Enum):
    ADDED = "added"
    SKIPPED = "skipped"
    FAILED = "failed"


class RowOutcome(AppBaseModel):
    """Classification of exactly one input row."""
    kind: OutcomeKind
    reason: Optional[str] = None
    restaurant_found: bool = True

    @classmethod
    def added(cls) -> "RowOutcome":
        return cls(kind=OutcomeKind.ADDED)

    @classmethod
    def skipped(cls, reason: str) -> "RowOutcome":
        return cls(kind=OutcomeKind.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, reason: str, restaurant_found: bool = True) -> "RowOutcome":
        return cls(kind=OutcomeKind.FAILED, reason=reason, restaurant_found=restaurant_found)


class RestaurantStatus(str, enum.Enum):
    FOUND = "Found"
    NOT_FOUND = "Not Found"


class ItemIssue(AppBaseModel):
    name: str = Field(..., description="Item name as typed in the file")
    reason: str = Field(..., description="Human-readable reason")


class RestaurantResult(AppBaseModel):
    """Per-restaurant summary rendered to the operator."""
    name: str = Field(..., description="Restaurant name as typed in the file (trimmed)")
    status: RestaurantStatus = Field(default=RestaurantStatus.FOUND)
    added: int = Field(default=0, ge=0)
    skipped: list[ItemIssue] = Field(default_factory=list)
    failed: list[ItemIssue] = Field(default_factory=list)


class ImageFillSummary(AppBaseModel):
    requested: int = Field(default=0, ge=0, description="Rows without an image")
    filled: int = Field(default=0, ge=0, description="Rows that received a generated image")
    failed: list[ItemIssue] = Field(default_factory=list)


class MenuImportReport(AppBaseModel):
    restaurants: list[RestaurantResult] = Field(default_factory=list)
    total_rows: int = Field(default=0, ge=0)
    ignored_rows: int = Field(default=0, ge=0, description="Rows with a blank restaurant name")
    added: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    images: Optional[ImageFillSummary] = None


class MenuImportPreviewRow(AppBaseModel):
    line_number: int
    restaurant_name: str
    item_name: str
    price: str
    category_name: Optional[str] = None
    has_image: bool


class MenuImportPreview(AppBaseModel):
    total_rows: int = Field(..., ge=0)
    missing_images: int = Field(..., ge=0)
    rows: list[MenuImportPreviewRow] = Field(default_factory=list)
