"""
Factory functions for Bulk Menu Import dependencies.

One MenuImportService is built per request, sharing the request's session
between the restaurant, category and menu item services.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from menu_admin.categories.services import CategoryService
from menu_admin.db.main import get_session
from menu_admin.images.dependencies import get_image_acquisition_service
from menu_admin.images.service import ImageAcquisitionService
from menu_admin.menu_imports.service import MenuImportService
from menu_admin.menu_items.services import MenuItemService
from menu_admin.restaurants.services import RestaurantService

logger = logging.getLogger(__name__)


def build_menu_import_service(
    session: AsyncSession,
    image_service: Optional[ImageAcquisitionService] = None,
) -> MenuImportService:
    """
    Builds a MenuImportService around an existing session.

    Args:
        session: Session used for every read and write of the batch
        image_service: Required only when the batch asks for image auto-fill

    Returns:
        MenuImportService: Configured service instance
    """
    return MenuImportService(
        session=session,
        restaurant_service=RestaurantService(session),
        category_service=CategoryService(session),
        menu_item_service=MenuItemService(session),
        image_service=image_service,
    )


async def get_menu_import_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    image_service: Annotated[ImageAcquisitionService, Depends(get_image_acquisition_service)],
) -> MenuImportService:
    return build_menu_import_service(session, image_service)


MenuImportServiceDependency = Annotated[MenuImportService, Depends(get_menu_import_service)]
