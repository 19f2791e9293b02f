from typing import Iterable

from menu_admin.menu_imports.schemas import (
    ImportRow,
    ItemIssue,
    OutcomeKind,
    RestaurantResult,
    RestaurantStatus,
    RowOutcome,
)


def aggregate_outcomes(results: Iterable[tuple[ImportRow, RowOutcome]]) -> list[RestaurantResult]:
    """
    Folds row outcomes into one RestaurantResult per restaurant name.

    Restaurants are keyed by the name as typed in the file (trimmed only) and
    listed in order of first appearance. Rows with a blank restaurant name are
    not reported.
    """
    by_name: dict[str, RestaurantResult] = {}

    for row, outcome in results:
        name = row.restaurant_name.strip()
        if not name:
            continue

        result = by_name.get(name)
        if result is None:
            result = RestaurantResult(name=name)
            by_name[name] = result

        if not outcome.restaurant_found:
            result.status = RestaurantStatus.NOT_FOUND

        if outcome.kind == OutcomeKind.ADDED:
            result.added += 1
        elif outcome.kind == OutcomeKind.SKIPPED:
            result.skipped.append(ItemIssue(name=row.item_name, reason=outcome.reason or ""))
        else:
            result.failed.append(ItemIssue(name=row.item_name, reason=outcome.reason or ""))

    return list(by_name.values())
