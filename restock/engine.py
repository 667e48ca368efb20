"""Reorder decisions: stock projection, classification and the order list."""

from __future__ import annotations

import locale
import logging
import unicodedata
from collections.abc import Iterable, Mapping

from .errors import DataQualityError
from .models import (
    TIER_GOOD,
    TIER_ORDER,
    TIER_URGENT,
    Classification,
    DeliveryWindow,
    Item,
    LatestCount,
    OrderLine,
    OrderList,
)
from .schemas import validate_stored_count

logger = logging.getLogger(__name__)

URGENT_WITHIN_DAYS = 1


def project(current_count: float, daily_usage: float, days_until: float) -> float:
    """Stock expected on hand when the truck arrives. May be negative."""
    return current_count - daily_usage * days_until


def classify(
    projected_stock: float,
    threshold: float,
    par: float,
    current_count: float,
    days_until: int,
    *,
    urgent_within_days: int = URGENT_WITHIN_DAYS,
) -> Classification:
    """Decide whether to order, how much, and how urgently.

    The order restocks the current count up to par; it is not sized from
    the projected shortfall.
    """
    needs_order = projected_stock < threshold
    if not needs_order:
        return Classification(needs_order=False, order_amount=0.0, tier=TIER_GOOD)

    order_amount = max(0.0, par - current_count)
    tier = TIER_URGENT if days_until <= urgent_within_days else TIER_ORDER
    return Classification(needs_order=True, order_amount=order_amount, tier=tier)


def evaluate_item(
    item: Item,
    current_count: float | None,
    window: DeliveryWindow,
    *,
    urgent_within_days: int = URGENT_WITHIN_DAYS,
) -> OrderLine:
    """Build the order line for one item.

    Raises:
        DataQualityError: If the item or its count is not usable.
    """
    item.validate()
    if current_count is None:
        current_count = 0.0
    current_count = validate_stored_count(item.id, current_count)

    par = item.par_for(window.par_profile)
    projected = project(current_count, item.daily_usage, window.days_until)
    result = classify(
        projected,
        item.threshold,
        par,
        current_count,
        window.days_until,
        urgent_within_days=urgent_within_days,
    )
    return OrderLine(
        item=item,
        current_count=float(current_count),
        projected_stock=projected,
        par=par,
        needs_order=result.needs_order,
        order_amount=result.order_amount,
        tier=result.tier,
    )


def _count_value(value: float | LatestCount | None) -> float | None:
    if isinstance(value, LatestCount):
        return value.count
    return value


def _fold_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collation_key(name: str) -> str:
    """Sort key for item names under the active LC_COLLATE locale.

    The C/POSIX locale collates by code point, which puts accented names
    after "Z"; there the key falls back to the accent-folded name.
    """
    current = locale.setlocale(locale.LC_COLLATE)
    if current.split(".")[0] in ("C", "POSIX"):
        return _fold_accents(name)
    return locale.strxfrm(name.casefold())


def _sort_key(line: OrderLine) -> tuple:
    name = line.item.name or ""
    return (
        line.tier != TIER_URGENT,
        collation_key(name),
        name,
        line.item.id,
    )


def compute_order_list(
    items: Iterable[Item],
    latest_counts: Mapping[str, float | LatestCount],
    window: DeliveryWindow,
    *,
    pending_counts: Mapping[str, float] | None = None,
    category: str | None = None,
    urgent_within_days: int = URGENT_WITHIN_DAYS,
) -> OrderList:
    """Evaluate every item and return the ones that need ordering.

    Args:
        items: Catalog snapshot.
        latest_counts: Most recent count per item id. Items without one are
            treated as having nothing on hand.
        window: The resolved delivery window.
        pending_counts: Counts entered but not yet saved; they take
            precedence over ``latest_counts``.
        category: If given, only items in this category are evaluated.
        urgent_within_days: Needed orders this close to the truck are urgent.

    Returns:
        An OrderList sorted urgent first, then by item name. Items with bad
        data are left out and listed in ``warnings``.
    """
    pending = pending_counts or {}
    result = OrderList(window=window)

    for item in items:
        if category is not None and item.category != category:
            continue
        if item.id in pending:
            current = pending[item.id]
        else:
            current = _count_value(latest_counts.get(item.id))
        try:
            line = evaluate_item(
                item,
                current,
                window,
                urgent_within_days=urgent_within_days,
            )
        except DataQualityError as e:
            logger.warning("Skipping item with bad data: %s", e)
            result.warnings.append(e)
            continue
        if line.needs_order:
            result.lines.append(line)

    result.lines.sort(key=_sort_key)
    result.total_cost = sum((line.estimated_cost for line in result.lines), 0.0)
    logger.debug(
        "Order list for %s: %d line(s), total %.2f, %d skipped",
        window.day_name,
        len(result.lines),
        result.total_cost,
        len(result.warnings),
    )
    return result
