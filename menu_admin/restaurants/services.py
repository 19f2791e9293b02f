import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menu_admin.common.services import AppService
from menu_admin.common.schemas import AppBaseModel
from menu_admin.restaurants.models import Restaurant

logger = logging.getLogger(__name__)


class RestaurantService(AppService[Restaurant, AppBaseModel]):
    def __init__(self, session: AsyncSession):
        super().__init__(model=Restaurant, session=session)

    async def get_id_name_pairs(self) -> list[tuple[int, str]]:
        """
        Returns (id, name) for every restaurant.
        Used to build the in-memory name index of a menu import batch.
        """
        stmt = select(Restaurant.id, Restaurant.name)
        result = await self.session.execute(stmt)
        pairs = [(row.id, row.name) for row in result.all()]
        logger.debug(f"Fetched {len(pairs)} restaurants")
        return pairs
