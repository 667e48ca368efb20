"""Normalize raw item and count records before they reach the store."""

from __future__ import annotations

from .models import CountEntry, Item
from .schemas import validate_count_record, validate_item_record

# Older records were written with camelCase keys.
LEGACY_KEYS = {
    "weekPar": "week_par",
    "weekendPar": "weekend_par",
    "dailyUsage": "daily_usage",
}


def migrate_legacy_keys(record: dict) -> dict:
    """Return a copy of ``record`` with camelCase keys renamed.

    A snake_case value that is already present wins over its legacy twin
    unless it is empty.
    """
    out = dict(record)
    for old, new in LEGACY_KEYS.items():
        if old not in out:
            continue
        legacy = out.pop(old)
        if out.get(new) in (None, ""):
            out[new] = legacy
    return out


def normalize_item_record(record: dict) -> Item:
    """Build a validated Item from a raw record.

    Accepts both the persisted column names (``week_par``) and the attribute
    names (``weekday_par``), plus the legacy camelCase keys. Numbers may
    arrive as text.

    Raises:
        DataQualityError: If a required field is missing or invalid.
    """
    rec = validate_item_record(migrate_legacy_keys(record))
    return Item(
        id=rec.id or "",
        name=rec.name,
        category=rec.category,
        weekday_par=rec.weekday_par,
        weekend_par=rec.weekend_par,
        threshold=rec.threshold,
        daily_usage=rec.daily_usage,
        cost=rec.cost,
        unit=rec.unit,
        location=rec.location,
        supplier=rec.supplier,
    )


def normalize_count_entry(
    item_id: str, count: object, counted_by: str | None = None
) -> CountEntry:
    """Validate one count before it is queued for writing."""
    rec = validate_count_record(
        {"item_id": item_id, "count": count, "counted_by": counted_by}
    )
    return CountEntry(
        item_id=rec.item_id,
        count=rec.count,
        counted_by=rec.counted_by or "Unknown",
    )
