import logging
from typing import Iterable

from menu_admin.menu_items.services import MenuItemService
from menu_admin.menu_imports.normalization import normalize_name

logger = logging.getLogger(__name__)


class DuplicateDetector:
    """
    Set of (restaurant_id, normalized item name) already in the catalog.

    Seeded from the store and extended after every committed row, so that a
    file listing the same item twice adds it only once and re-uploading a file
    adds nothing.
    """

    def __init__(self, pairs: Iterable[tuple[int, str]] = ()):
        self._keys: set[tuple[int, str]] = set()
        for restaurant_id, item_name in pairs:
            self.remember(restaurant_id, item_name)

    @classmethod
    async def load(cls, menu_item_service: MenuItemService, restaurant_ids: Iterable[int]) -> "DuplicateDetector":
        detector = cls(await menu_item_service.get_name_pairs(restaurant_ids))
        logger.info(f"Duplicate detector seeded with {len(detector)} existing items")
        return detector

    def is_duplicate(self, restaurant_id: int, item_name: str) -> bool:
        return (restaurant_id, normalize_name(item_name)) in self._keys

    def remember(self, restaurant_id: int, item_name: str) -> None:
        self._keys.add((restaurant_id, normalize_name(item_name)))

    def __len__(self) -> int:
        return len(self._keys)
