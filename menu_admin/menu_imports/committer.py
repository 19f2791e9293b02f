import logging
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from menu_admin.menu_items.models import MenuItem
from menu_admin.menu_items.schemas import MenuItemCreate
from menu_admin.menu_items.services import MenuItemService
from menu_admin.menu_imports.exceptions import (
    InvalidPriceError,
    MissingItemNameError,
    WriteFailedError,
)
from menu_admin.menu_imports.normalization import (
    parse_availability,
    parse_flag,
    parse_preparation_time,
    parse_price,
)
from menu_admin.menu_imports.schemas import ImportRow

logger = logging.getLogger(__name__)


class RowCommitter:
    """
    Turns one resolved ImportRow into a persisted MenuItem.

    Price policy: with `strict_prices=False` an unparseable price is stored
    as 0 (the behaviour operators are used to); with `strict_prices=True` the
    row fails with InvalidPriceError.
    """

    def __init__(self, menu_item_service: MenuItemService, default_preparation_time: int, strict_prices: bool = False):
        self.menu_item_service = menu_item_service
        self.default_preparation_time = default_preparation_time
        self.strict_prices = strict_prices

    def build_item(self, row: ImportRow, restaurant_id: int, category_id: Optional[int]) -> MenuItemCreate:
        if not row.item_name:
            raise MissingItemNameError()

        price = parse_price(row.price)
        if price is None:
            if self.strict_prices:
                raise InvalidPriceError(f"Invalid price: '{row.price}'")
            logger.warning(f"Line {row.line_number}: unparseable price '{row.price}' for '{row.item_name}', using 0")
            price = Decimal("0.00")

        return MenuItemCreate(
            restaurant_id=restaurant_id,
            category_id=category_id,
            name=row.item_name,
            description=row.description or "",
            price=price,
            is_vegetarian=parse_flag(row.is_vegetarian),
            is_vegan=parse_flag(row.is_vegan),
            is_available=parse_availability(row.is_available),
            preparation_time=parse_preparation_time(row.preparation_time, self.default_preparation_time),
            image_url=row.image_url or None,
        )

    async def commit(self, row: ImportRow, restaurant_id: int, category_id: Optional[int]) -> MenuItem:
        """
        Validates and writes one catalog item.

        Raises:
            MissingItemNameError / InvalidPriceError: Row content is unusable
            WriteFailedError: Validation or insert failed; carries the underlying error text
        """
        try:
            data = self.build_item(row, restaurant_id, category_id)
        except ValidationError as e:
            first_error = e.errors()[0]
            field = ".".join(str(part) for part in first_error.get("loc", ()))
            raise WriteFailedError(f"{field}: {first_error.get('msg')}") from e

        try:
            menu_item = await self.menu_item_service.create(data)
        except Exception as e:
            raise WriteFailedError(str(e)) from e

        logger.debug(f"Line {row.line_number}: created menu item {menu_item.id} ('{menu_item.name}')")
        return menu_item
