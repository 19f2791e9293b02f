import logging
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from menu_admin.common.services import AppService
from menu_admin.categories.models import Category
from menu_admin.categories.schemas import CategoryCreate

logger = logging.getLogger(__name__)

SORT_ORDER_STEP = 10


class CategoryService(AppService[Category, CategoryCreate]):
    def __init__(self, session: AsyncSession):
        super().__init__(model=Category, session=session)

    async def create(self, data: CategoryCreate) -> Category:
        return await self._save(Category(name=data.name, sort_order=data.sort_order))

    async def get_all_categories(self) -> list[Category]:
        """
        Returns all categories ordered by sort_order.
        """
        stmt = select(Category).order_by(Category.sort_order, Category.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_name(self, name: str) -> Optional[Category]:
        """
        Case-insensitive lookup by name.
        Returns the oldest match when two operators created the same name concurrently.
        """
        stmt = (
            select(Category)
            .where(func.lower(Category.name) == func.lower(name))
            .order_by(Category.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_next_sort_order(self) -> int:
        """
        Next free sort position: one step past the current maximum (0 for an empty table).
        """
        stmt = select(func.max(Category.sort_order))
        result = await self.session.execute(stmt)
        current_max = result.scalar()
        return (current_max or 0) + SORT_ORDER_STEP

    async def create_at_end(self, name: str) -> Category:
        """
        Creates a category placed after every existing one, so the current ordering is preserved.
        """
        sort_order = await self.get_next_sort_order()
        category = await self.create(CategoryCreate(name=name, sort_order=sort_order))
        logger.info(f"Created category '{category.name}' (id={category.id}, sort_order={sort_order})")
        return category
