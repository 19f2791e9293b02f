import logging
from typing import Iterable, Optional

from menu_admin.categories.services import CategoryService
from menu_admin.restaurants.services import RestaurantService
from menu_admin.menu_imports.exceptions import CategoryCreateFailedError
from menu_admin.menu_imports.normalization import normalize_name

logger = logging.getLogger(__name__)


class RestaurantIndex:
    """
    Snapshot of restaurant names for one batch: normalized name -> restaurant id.
    Built once; a restaurant renamed mid-run does not resolve retroactively.
    """

    def __init__(self, pairs: Iterable[tuple[int, str]]):
        self._ids: dict[str, int] = {}
        for restaurant_id, name in pairs:
            self._ids.setdefault(normalize_name(name), restaurant_id)

    def get(self, name: Optional[str]) -> Optional[int]:
        return self._ids.get(normalize_name(name))

    def __len__(self) -> int:
        return len(self._ids)


class EntityResolver:
    """
    Maps free-text names from the upload to persisted ids.

    Restaurants are only looked up (never created); categories are created on
    first use. The category cache is owned by a single batch and must not be
    shared between concurrent imports.
    """

    def __init__(
        self,
        restaurant_service: RestaurantService,
        category_service: CategoryService,
        default_category: str,
    ):
        self.restaurant_service = restaurant_service
        self.category_service = category_service
        self.default_category = default_category
        self.restaurant_index = RestaurantIndex([])
        self._category_cache: dict[str, int] = {}
        self.created_categories: list[str] = []

    async def load(self) -> None:
        """Snapshots restaurants and seeds the category cache."""
        self.restaurant_index = RestaurantIndex(await self.restaurant_service.get_id_name_pairs())

        for category in await self.category_service.get_all_categories():
            # Oldest category wins when two share a name
            self._category_cache.setdefault(normalize_name(category.name), category.id)

        logger.info(
            f"Entity resolver loaded: {len(self.restaurant_index)} restaurants, "
            f"{len(self._category_cache)} categories"
        )

    def resolve_restaurant(self, name: Optional[str]) -> Optional[int]:
        return self.restaurant_index.get(name)

    async def resolve_category(self, name: Optional[str]) -> int:
        """
        Returns the id of the category named `name` (default category when blank).

        Order: batch cache -> case-insensitive lookup in the store (another
        operator may have created it meanwhile) -> create at the end of the menu.

        Raises:
            CategoryCreateFailedError: If the category had to be created and the insert failed
        """
        display_name = (name or "").strip() or self.default_category
        key = normalize_name(display_name)

        cached_id = self._category_cache.get(key)
        if cached_id is not None:
            return cached_id

        category = await self.category_service.find_by_name(display_name)
        if category is None:
            try:
                category = await self.category_service.create_at_end(display_name)
            except Exception as e:
                logger.error(f"Failed to create category '{display_name}': {e}", exc_info=True)
                raise CategoryCreateFailedError(str(e)) from e
            self.created_categories.append(category.name)

        self._category_cache[key] = category.id
        return category.id
