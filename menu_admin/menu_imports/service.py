"""
Bulk Menu Import Service.

Orchestrates one uploaded file from parsed rows to the per-restaurant report.
"""
import asyncio
import logging
import time
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from menu_admin.categories.services import CategoryService
from menu_admin.config import settings
from menu_admin.images.schemas import ImageAcquisitionRequest
from menu_admin.images.service import ImageAcquisitionService
from menu_admin.menu_items.services import MenuItemService
from menu_admin.restaurants.services import RestaurantService
from menu_admin.menu_imports.aggregator import aggregate_outcomes
from menu_admin.menu_imports.committer import RowCommitter
from menu_admin.menu_imports.duplicates import DuplicateDetector
from menu_admin.menu_imports.exceptions import (
    BatchDeadlineExceededError,
    MissingItemNameError,
    RestaurantNotFoundError,
    RowFailedError,
)
from menu_admin.menu_imports.resolver import EntityResolver
from menu_admin.menu_imports.schemas import (
    ImageFillSummary,
    ImportRow,
    ItemIssue,
    MenuImportReport,
    OutcomeKind,
    RowOutcome,
)

logger = logging.getLogger(__name__)

DUPLICATE_ITEM_REASON = "Duplicate item"


class MenuImportService:
    """
    Service orchestrating one bulk menu import batch.

    Flow:
    1. (optional) Generate images for rows without an Image URL
    2. Snapshot restaurants, seed category cache and existing item keys
    3. For every row, in file order: resolve restaurant -> skip duplicates ->
       resolve/create category -> insert item
    4. Fold outcomes into the per-restaurant report

    Rows are committed strictly one after another: the category cache and the
    duplicate set must see every earlier row before the next one is resolved.
    A row failure is recorded and never aborts the batch; there is no rollback
    of rows already committed.

    One instance serves one batch.
    """

    def __init__(
        self,
        session: AsyncSession,
        restaurant_service: RestaurantService,
        category_service: CategoryService,
        menu_item_service: MenuItemService,
        image_service: Optional[ImageAcquisitionService] = None,
        default_category: str = settings.MENU_IMPORT_DEFAULT_CATEGORY,
        default_preparation_time: int = settings.MENU_IMPORT_DEFAULT_PREP_TIME,
        strict_prices: bool = settings.MENU_IMPORT_STRICT_PRICES,
        deadline_seconds: Optional[float] = settings.MENU_IMPORT_DEADLINE_SECONDS,
        image_concurrency: int = settings.IMAGE_AUTOFILL_CONCURRENCY,
    ):
        self.session = session
        self.restaurant_service = restaurant_service
        self.category_service = category_service
        self.menu_item_service = menu_item_service
        self.image_service = image_service
        self.default_category = default_category
        self.default_preparation_time = default_preparation_time
        self.strict_prices = strict_prices
        self.deadline_seconds = deadline_seconds
        self.image_concurrency = max(1, image_concurrency)

    async def import_rows(self, rows: Sequence[ImportRow], auto_fill_images: bool = False) -> MenuImportReport:
        """
        Main method: imports already parsed rows and returns the report.

        Args:
            rows: Rows from parse_menu_csv (image_url may be filled in place)
            auto_fill_images: Generate photos for rows without an Image URL first
        """
        started_at = time.monotonic()
        logger.info(f"Starting menu import: {len(rows)} rows, auto_fill_images={auto_fill_images}")

        images: Optional[ImageFillSummary] = None
        if auto_fill_images:
            images = await self.fill_missing_images(rows)

        resolver = EntityResolver(self.restaurant_service, self.category_service, self.default_category)
        await resolver.load()

        restaurant_ids = {
            restaurant_id
            for row in rows
            if (restaurant_id := resolver.resolve_restaurant(row.restaurant_name)) is not None
        }
        detector = await DuplicateDetector.load(self.menu_item_service, restaurant_ids)
        committer = RowCommitter(self.menu_item_service, self.default_preparation_time, self.strict_prices)

        results: list[tuple[ImportRow, RowOutcome]] = []
        ignored_rows = 0
        for row in rows:
            if not row.restaurant_name:
                ignored_rows += 1
                continue

            if self._deadline_passed(started_at):
                found = resolver.resolve_restaurant(row.restaurant_name) is not None
                outcome = RowOutcome.failed(BatchDeadlineExceededError().reason, restaurant_found=found)
            else:
                outcome = await self._process_row(row, resolver, detector, committer)
            results.append((row, outcome))

        report = MenuImportReport(
            restaurants=aggregate_outcomes(results),
            total_rows=len(rows),
            ignored_rows=ignored_rows,
            added=sum(1 for _, outcome in results if outcome.kind == OutcomeKind.ADDED),
            skipped=sum(1 for _, outcome in results if outcome.kind == OutcomeKind.SKIPPED),
            failed=sum(1 for _, outcome in results if outcome.kind == OutcomeKind.FAILED),
            images=images,
        )

        if resolver.created_categories:
            logger.info(f"Categories created during import: {resolver.created_categories}")
        logger.info(
            f"Menu import finished in {time.monotonic() - started_at:.2f}s: "
            f"added={report.added}, skipped={report.skipped}, failed={report.failed}, ignored={ignored_rows}"
        )
        return report

    async def _process_row(
        self,
        row: ImportRow,
        resolver: EntityResolver,
        detector: DuplicateDetector,
        committer: RowCommitter,
    ) -> RowOutcome:
        restaurant_id = resolver.resolve_restaurant(row.restaurant_name)
        if restaurant_id is None:
            return RowOutcome.failed(RestaurantNotFoundError().reason, restaurant_found=False)

        try:
            if not row.item_name:
                raise MissingItemNameError()

            if detector.is_duplicate(restaurant_id, row.item_name):
                return RowOutcome.skipped(DUPLICATE_ITEM_REASON)

            category_id = await resolver.resolve_category(row.category_name)
            await committer.commit(row, restaurant_id, category_id)
        except RowFailedError as e:
            logger.warning(f"Line {row.line_number} ('{row.item_name}' @ '{row.restaurant_name}') failed: {e.reason}")
            return RowOutcome.failed(e.reason)
        except Exception as e:
            logger.error(f"Unexpected error importing line {row.line_number}: {e}", exc_info=True)
            return RowOutcome.failed(str(e))

        detector.remember(restaurant_id, row.item_name)
        return RowOutcome.added()

    def _deadline_passed(self, started_at: float) -> bool:
        if self.deadline_seconds is None:
            return False
        return time.monotonic() - started_at >= self.deadline_seconds

    async def fill_missing_images(self, rows: Sequence[ImportRow]) -> ImageFillSummary:
        """
        Generates an image for every row without an Image URL and writes the
        public URL back onto the row. A failed image leaves the row without one.

        At most `image_concurrency` rows are in flight; the steps of one row
        always run in order.
        """
        summary = ImageFillSummary()
        pending = [row for row in rows if not row.has_image and row.item_name]
        summary.requested = len(pending)
        if not pending:
            return summary

        if self.image_service is None:
            raise RuntimeError("Image auto-fill requested but no image service is configured")

        semaphore = asyncio.Semaphore(self.image_concurrency)

        async def fill(row: ImportRow) -> None:
            try:
                async with semaphore:
                    result = await self.image_service.acquire(
                        ImageAcquisitionRequest(
                            query=row.item_name,
                            item_name=row.item_name,
                            restaurant_name=row.restaurant_name or None,
                        )
                    )
            except Exception as e:
                logger.error(f"Unexpected error acquiring image for '{row.item_name}': {e}", exc_info=True)
                summary.failed.append(ItemIssue(name=row.item_name, reason=str(e) or type(e).__name__))
                return

            if result.success:
                row.image_url = result.url
                summary.filled += 1
            else:
                summary.failed.append(ItemIssue(name=row.item_name, reason=result.error or "Unknown Error"))

        await asyncio.gather(*(fill(row) for row in pending))

        logger.info(f"Auto-filled {summary.filled}/{summary.requested} images")
        return summary
