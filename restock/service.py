"""Glue between a store snapshot and the reorder engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime

from .config import RestockConfig
from .engine import compute_order_list
from .models import DeliveryWindow, OrderList
from .normalize import normalize_count_entry
from .schedule import compute_delivery_window
from .store import InventoryStore

logger = logging.getLogger(__name__)


def delivery_window(
    config: RestockConfig, now: date | datetime | None = None
) -> DeliveryWindow:
    return compute_delivery_window(
        now,
        first_day=config.delivery.first_weekday,
        second_day=config.delivery.second_weekday,
    )


def order_list_for(
    store: InventoryStore,
    config: RestockConfig,
    now: date | datetime | None = None,
    *,
    pending_counts: Mapping[str, float] | None = None,
    category: str | None = None,
) -> OrderList:
    """Read one snapshot from the store and compute the order list.

    Raises:
        StoreUnavailableError: If the store cannot be read.
    """
    window = delivery_window(config, now)
    items = store.list_items()
    latest = store.latest_count_per_item()
    logger.debug("Snapshot: %d item(s), %d counted", len(items), len(latest))
    return compute_order_list(
        items,
        latest,
        window,
        pending_counts=pending_counts,
        category=category,
        urgent_within_days=config.delivery.urgent_within_days,
    )


def save_counts(
    store: InventoryStore,
    counts: Mapping[str, object],
    counted_by: str | None = None,
) -> int:
    """Validate and write a batch of counts keyed by item id.

    Blank entries are skipped, as they are on the count sheet. Any invalid
    entry rejects the whole batch before anything is written.

    Raises:
        DataQualityError: If a count is not a finite number >= 0.
        StoreError: If the store rejects the batch.
    """
    batch = [
        normalize_count_entry(item_id, value, counted_by)
        for item_id, value in counts.items()
        if value is not None and str(value).strip() != ""
    ]
    if not batch:
        logger.info("No counts to save")
        return 0
    return store.append_counts(batch)
