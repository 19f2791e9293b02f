import logging
from typing import Iterable
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from menu_admin.common.services import AppService
from menu_admin.menu_items.models import MenuItem
from menu_admin.menu_items.schemas import MenuItemCreate

logger = logging.getLogger(__name__)


class MenuItemService(AppService[MenuItem, MenuItemCreate]):
    def __init__(self, session: AsyncSession):
        super().__init__(model=MenuItem, session=session)

    async def create(self, data: MenuItemCreate) -> MenuItem:
        try:
            menu_item = await self._save(MenuItem(**data.model_dump()))
        except IntegrityError as e:
            if self._is_foreign_key_violation(e):
                raise ValueError(
                    f"Restaurant {data.restaurant_id} or category {data.category_id} no longer exists"
                ) from e
            raise e

        return menu_item

    async def get_name_pairs(self, restaurant_ids: Iterable[int]) -> list[tuple[int, str]]:
        """
        Returns (restaurant_id, name) for every menu item of the given restaurants.
        """
        ids = list(set(restaurant_ids))
        if not ids:
            return []

        stmt = select(MenuItem.restaurant_id, MenuItem.name).where(MenuItem.restaurant_id.in_(ids))
        result = await self.session.execute(stmt)
        return [(row.restaurant_id, row.name) for row in result.all()]
