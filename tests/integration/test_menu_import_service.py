"""
Integration tests for MenuImportService against an in-memory SQLite database.
"""
import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from menu_admin.categories.models import Category
from menu_admin.categories.services import CategoryService
from menu_admin.menu_imports.parser import parse_menu_csv
from menu_admin.menu_imports.schemas import OutcomeKind, RestaurantStatus
from menu_admin.menu_imports.service import MenuImportService
from menu_admin.menu_items.models import MenuItem
from menu_admin.menu_items.services import MenuItemService
from menu_admin.restaurants.services import RestaurantService


def _service(session: AsyncSession, image_service=None, **options) -> MenuImportService:
    return MenuImportService(
        session=session,
        restaurant_service=RestaurantService(session),
        category_service=CategoryService(session),
        menu_item_service=MenuItemService(session),
        image_service=image_service,
        **options,
    )


async def _menu_items(session: AsyncSession) -> list[MenuItem]:
    result = await session.execute(select(MenuItem).order_by(MenuItem.id))
    return list(result.scalars().all())


async def _categories(session: AsyncSession) -> list[Category]:
    result = await session.execute(select(Category).order_by(Category.id))
    return list(result.scalars().all())


class TestEndToEnd:

    async def test_three_row_scenario(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,Burgers,,,,,,",
            "Burger King,Whopper,250,Burgers,,,,,,",
            "Taco Bell,Crunchy Taco,99,Tacos,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert (report.added, report.skipped, report.failed) == (1, 1, 1)
        assert report.total_rows == 3
        burger_king, taco_bell = report.restaurants
        assert burger_king.name == "Burger King"
        assert burger_king.status == RestaurantStatus.FOUND
        assert burger_king.added == 1
        assert [(issue.name, issue.reason) for issue in burger_king.skipped] == [("Whopper", "Duplicate item")]
        assert taco_bell.status == RestaurantStatus.NOT_FOUND
        assert [(issue.name, issue.reason) for issue in taco_bell.failed] == [("Crunchy Taco", "Restaurant not found")]

        items = await _menu_items(test_db_session)
        assert [(item.restaurant_id, item.name) for item in items] == [(seed_restaurants["Burger King"], "Whopper")]

    async def test_row_fields_are_normalized(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Pizza Hut,Veggie Supreme,₹349.5,Pizzas,Loaded with veggies,Yes,no,20 min,No,https://img.test/v.jpg",
            "Pizza Hut,Garlic Bread,abc,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert report.added == 2
        veggie, garlic = await _menu_items(test_db_session)
        assert veggie.restaurant_id == seed_restaurants["Pizza Hut"]
        assert veggie.price == Decimal("349.50")
        assert veggie.description == "Loaded with veggies"
        assert veggie.is_vegetarian is True
        assert veggie.is_vegan is False
        assert veggie.preparation_time == 20
        assert veggie.is_available is False
        assert veggie.image_url == "https://img.test/v.jpg"

        assert garlic.price == Decimal("0")
        assert garlic.description == ""
        assert garlic.is_available is True
        assert garlic.preparation_time == 15
        assert garlic.image_url is None


class TestIdempotence:

    async def test_second_upload_adds_nothing(self, test_db_session, seed_restaurants, make_csv):
        content = make_csv(
            "Burger King,Whopper,250,Burgers,,,,,,",
            "Burger King,Fries,99,Sides,,,,,,",
            "Pizza Hut,Margherita,300,Pizzas,,,,,,",
        )

        first = await _service(test_db_session).import_rows(parse_menu_csv(content))
        second = await _service(test_db_session).import_rows(parse_menu_csv(content))

        assert (first.added, first.skipped, first.failed) == (3, 0, 0)
        assert (second.added, second.skipped, second.failed) == (0, 3, 0)
        assert all(
            issue.reason == "Duplicate item"
            for result in second.restaurants
            for issue in result.skipped
        )
        assert len(await _menu_items(test_db_session)) == 3
        assert [category.name for category in await _categories(test_db_session)] == ["Burgers", "Sides", "Pizzas"]

    async def test_duplicate_detection_ignores_case(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Burger King,  WHOPPER ,260,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert (report.added, report.skipped) == (1, 1)


class TestEntityResolution:

    async def test_restaurant_name_variants_resolve_to_one_restaurant(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            '" Burger King ",Whopper,250,,,,,,,',
            "burger king,Fries,99,,,,,,,",
            "Burger King,Shake,120,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert report.added == 3
        items = await _menu_items(test_db_session)
        assert {item.restaurant_id for item in items} == {seed_restaurants["Burger King"]}

    async def test_new_category_is_created_once(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(*(f"Burger King,Wrap {n},150,Wraps,,,,,," for n in range(50))))

        report = await _service(test_db_session).import_rows(rows)

        assert report.added == 50
        categories = await _categories(test_db_session)
        assert [category.name for category in categories] == ["Wraps"]
        items = await _menu_items(test_db_session)
        assert {item.category_id for item in items} == {categories[0].id}

    async def test_existing_category_matched_case_insensitively(
        self, test_db_session, seed_restaurants, seed_categories, make_csv
    ):
        rows = parse_menu_csv(make_csv("Burger King,Whopper,250, burgers ,,,,,,"))

        await _service(test_db_session).import_rows(rows)

        [item] = await _menu_items(test_db_session)
        assert item.category_id == seed_categories["Burgers"]
        assert len(await _categories(test_db_session)) == 2

    async def test_new_category_goes_to_the_end(self, test_db_session, seed_restaurants, seed_categories, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Chicken Wrap,150,Wraps,,,,,,",
            "Burger King,Sundae,80,Desserts,,,,,,",
        ))

        await _service(test_db_session).import_rows(rows)

        categories = await _categories(test_db_session)
        assert [(category.name, category.sort_order) for category in categories] == [
            ("Burgers", 10),
            ("Pizzas", 20),
            ("Wraps", 30),
            ("Desserts", 40),
        ]

    async def test_blank_category_uses_default(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Burger King,Fries,99,  ,,,,,,",
        ))

        await _service(test_db_session).import_rows(rows)

        [category] = await _categories(test_db_session)
        assert category.name == "General"
        assert {item.category_id for item in await _menu_items(test_db_session)} == {category.id}


class TestPartialFailure:

    async def test_unknown_restaurant_does_not_block_others(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Ghost Kitchen,Soup,50,,,,,,,",
            "Pizza Hut,Margherita,300,,,,,,,",
            "Ghost Kitchen,Salad,60,,,,,,,",
            "Pizza Hut,Pepperoni,350,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        ghost, pizza_hut = report.restaurants
        assert ghost.name == "Ghost Kitchen"
        assert ghost.status == RestaurantStatus.NOT_FOUND
        assert len(ghost.failed) == 2
        assert pizza_hut.status == RestaurantStatus.FOUND
        assert pizza_hut.added == 2
        assert [item.name for item in await _menu_items(test_db_session)] == ["Margherita", "Pepperoni"]

    async def test_missing_item_name(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Burger King,,99,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert report.added == 1
        assert [(issue.name, issue.reason) for issue in report.restaurants[0].failed] == [("", "Missing item name")]

    async def test_write_failure_is_isolated(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Gold Burger,123456789012,,,,,,,",
            "Burger King,Whopper,250,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        [failed] = report.restaurants[0].failed
        assert failed.name == "Gold Burger"
        assert failed.reason.startswith("price")
        assert report.added == 1

    async def test_price_out_of_range_fails_only_that_row(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            f"Burger King,Whopper,{'9' * 40},,,,,,,",
            "Burger King,Fries,99,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        [failed] = report.restaurants[0].failed
        assert failed.name == "Whopper"
        assert failed.reason.startswith("price: ")
        assert "InvalidOperation" not in failed.reason
        assert [item.name for item in await _menu_items(test_db_session)] == ["Fries"]

    async def test_category_creation_failure(self, test_db_session, seed_restaurants, seed_categories, make_csv, monkeypatch):
        async def failing_create_at_end(self, name):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(CategoryService, "create_at_end", failing_create_at_end)
        rows = parse_menu_csv(make_csv(
            "Burger King,Chicken Wrap,150,Wraps,,,,,,",
            "Burger King,Whopper,250,Burgers,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        [failed] = report.restaurants[0].failed
        assert failed.reason == "Category creation failed: connection reset"
        assert report.added == 1

    async def test_blank_restaurant_rows_are_ignored(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            ",Orphan,10,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert report.total_rows == 2
        assert report.ignored_rows == 1
        assert (report.added, report.skipped, report.failed) == (1, 0, 0)
        assert [result.name for result in report.restaurants] == ["Burger King"]


class TestImportOptions:

    async def test_strict_prices(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,₹250,,,,,,,",
            "Burger King,Mystery Meal,abc,,,,,,,",
        ))

        report = await _service(test_db_session, strict_prices=True).import_rows(rows)

        assert report.added == 1
        [failed] = report.restaurants[0].failed
        assert failed.name == "Mystery Meal"
        assert failed.reason.startswith("Invalid price")

    async def test_deadline_exceeded(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Pizza Hut,Margherita,300,,,,,,,",
        ))

        report = await _service(test_db_session, deadline_seconds=0).import_rows(rows)

        assert report.failed == 2
        assert all(
            issue.reason == "Batch deadline exceeded"
            for result in report.restaurants
            for issue in result.failed
        )
        assert await _menu_items(test_db_session) == []

    async def test_deadline_keeps_restaurant_status(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Taco Bell,Crunchy Taco,99,,,,,,,",
        ))

        report = await _service(test_db_session, deadline_seconds=0).import_rows(rows)

        statuses = {result.name: result.status for result in report.restaurants}
        assert statuses == {"Burger King": RestaurantStatus.FOUND, "Taco Bell": RestaurantStatus.NOT_FOUND}

    async def test_custom_default_category(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv("Burger King,Whopper,250,,,,,,,"))

        await _service(test_db_session, default_category="Uncategorized").import_rows(rows)

        count = await test_db_session.scalar(select(func.count()).select_from(Category).where(Category.name == "Uncategorized"))
        assert count == 1


class TestImageAutoFill:

    async def test_missing_images_are_filled(self, test_db_session, seed_restaurants, fake_image_service, make_csv):
        fake_image_service.failing = {"Fries"}
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Burger King,Fries,99,,,,,,,",
            "Burger King,Shake,120,,,,,,,https://img.test/shake.jpg",
        ))

        report = await _service(test_db_session, image_service=fake_image_service).import_rows(
            rows, auto_fill_images=True
        )

        assert report.added == 3
        assert report.images.requested == 2
        assert report.images.filled == 1
        assert [(issue.name, issue.reason) for issue in report.images.failed] == [("Fries", "OpenAI Error (500): boom")]

        images = {item.name: item.image_url for item in await _menu_items(test_db_session)}
        assert images == {
            "Whopper": "https://cdn.test/menu-images/menu-items/auto-whopper.jpg",
            "Fries": None,
            "Shake": "https://img.test/shake.jpg",
        }
        assert fake_image_service.requests[0].restaurant_name == "Burger King"

    async def test_images_not_requested_by_default(self, test_db_session, seed_restaurants, fake_image_service, make_csv):
        rows = parse_menu_csv(make_csv("Burger King,Whopper,250,,,,,,,"))

        report = await _service(test_db_session, image_service=fake_image_service).import_rows(rows)

        assert report.images is None
        assert fake_image_service.requests == []

    async def test_unexpected_image_error_does_not_abort_import(
        self, test_db_session, seed_restaurants, fake_image_service, make_csv
    ):
        original_acquire = fake_image_service.acquire

        async def exploding_acquire(request):
            if request.query == "Fries":
                raise RuntimeError("decoder blew up")
            return await original_acquire(request)

        fake_image_service.acquire = exploding_acquire
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Burger King,Fries,99,,,,,,,",
        ))

        report = await _service(test_db_session, image_service=fake_image_service).import_rows(
            rows, auto_fill_images=True
        )

        assert report.added == 2
        assert report.images.filled == 1
        assert [(issue.name, issue.reason) for issue in report.images.failed] == [("Fries", "decoder blew up")]
        images = {item.name: item.image_url for item in await _menu_items(test_db_session)}
        assert images == {
            "Whopper": "https://cdn.test/menu-images/menu-items/auto-whopper.jpg",
            "Fries": None,
        }

    async def test_concurrency_is_bounded(self, test_db_session, seed_restaurants, fake_image_service, make_csv):
        in_flight = 0
        peak = 0
        original_acquire = fake_image_service.acquire

        async def slow_acquire(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await original_acquire(request)

        fake_image_service.acquire = slow_acquire
        rows = parse_menu_csv(make_csv(*(f"Burger King,Item {n},10,,,,,,," for n in range(6))))

        report = await _service(test_db_session, image_service=fake_image_service, image_concurrency=2).import_rows(
            rows, auto_fill_images=True
        )

        assert report.images.filled == 6
        assert peak == 2

    async def test_outcome_kinds_cover_every_processed_row(self, test_db_session, seed_restaurants, make_csv):
        rows = parse_menu_csv(make_csv(
            "Burger King,Whopper,250,,,,,,,",
            "Burger King,Whopper,250,,,,,,,",
            "Nowhere,Thing,1,,,,,,,",
        ))

        report = await _service(test_db_session).import_rows(rows)

        assert report.added + report.skipped + report.failed == report.total_rows - report.ignored_rows
        assert {kind.value for kind in OutcomeKind} == {"added", "skipped", "failed"}
