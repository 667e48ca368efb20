"""Item, category and supplier records."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from ..errors import StoreError, StoreUnavailableError
from ..models import Category, Item, Supplier
from ..normalize import normalize_item_record
from .schema import ensure_schema

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("protein", "Protein"),
    ("bread", "Bread"),
    ("dairy", "Dairy"),
    ("produce", "Produce"),
    ("frozen", "Frozen"),
    ("dry-goods-dry", "Dry Goods: Dry"),
    ("dry-goods-cans", "Dry Goods: Cans"),
    ("dry-goods-liquids", "Dry Goods: Liquids"),
    ("dry-goods-spices", "Dry Goods: Spices/Herbs"),
    ("dry-goods-servers", "Dry Goods: Servers"),
    ("dry-goods-bar", "Dry Goods: Bar Needs"),
    ("dry-goods-togo", "Dry Goods: TOGO"),
    ("cleaning", "Cleaning Supplies"),
]

DEFAULT_SUPPLIERS: list[tuple[str, str]] = [
    ("supplier1", "Main Distributor"),
    ("supplier2", "Produce Supplier"),
    ("supplier3", "Meat Supplier"),
]


def _row_to_item(row: sqlite3.Row) -> Item:
    return Item(
        id=row["id"],
        name=row["name"],
        category=row["category"],
        weekday_par=row["week_par"],
        weekend_par=row["weekend_par"],
        threshold=row["threshold"],
        daily_usage=row["daily_usage"],
        cost=row["cost"],
        unit=row["unit"],
        location=row["location"],
        supplier=row["supplier"],
    )


def _slugify(name: str) -> str:
    slug = "".join(c if c.isalnum() else "-" for c in name.lower())
    return "-".join(part for part in slug.split("-") if part) or "item"


class CatalogDB:
    """Manages the items, categories and suppliers tables."""

    def __init__(
        self,
        db_path: str | Path = "~/.config/restock/inventory.db",
        timeout: float = 5.0,
    ) -> None:
        self._db_path = db_path
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path, timeout=self._timeout)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            return self._get_conn().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"catalog read failed: {e}") from e

    def list_items(self) -> list[Item]:
        """Return every item ordered by name, without validating it."""
        rows = self._query("SELECT * FROM items ORDER BY name, id")
        return [_row_to_item(r) for r in rows]

    def get_item(self, item_id: str) -> Item | None:
        rows = self._query("SELECT * FROM items WHERE id = ?", (item_id,))
        return _row_to_item(rows[0]) if rows else None

    def list_categories(self) -> list[Category]:
        rows = self._query("SELECT id, name FROM categories ORDER BY name")
        return [Category(id=r["id"], name=r["name"]) for r in rows]

    def list_suppliers(self) -> list[Supplier]:
        rows = self._query("SELECT * FROM suppliers ORDER BY name")
        return [
            Supplier(id=r["id"], name=r["name"], contact=r["contact"], phone=r["phone"])
            for r in rows
        ]

    def save_item(self, record: dict) -> Item:
        """Insert or update an item from a raw record.

        The record is normalized first, so legacy camelCase keys and numeric
        strings are accepted. Records without an ``id`` get one derived from
        the name.

        Raises:
            DataQualityError: If the record is invalid. Nothing is written.
            StoreError: If the database rejects the write.
        """
        item = normalize_item_record(record)
        if not item.id:
            item.id = self._unique_id(_slugify(item.name))

        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    """INSERT INTO items
                       (id, name, category, supplier, unit, location,
                        week_par, weekend_par, threshold, daily_usage, cost)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                       ON CONFLICT(id) DO UPDATE SET
                           name = excluded.name,
                           category = excluded.category,
                           supplier = excluded.supplier,
                           unit = excluded.unit,
                           location = excluded.location,
                           week_par = excluded.week_par,
                           weekend_par = excluded.weekend_par,
                           threshold = excluded.threshold,
                           daily_usage = excluded.daily_usage,
                           cost = excluded.cost,
                           updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')""",
                    (
                        item.id,
                        item.name,
                        item.category,
                        item.supplier,
                        item.unit,
                        item.location,
                        item.weekday_par,
                        item.weekend_par,
                        item.threshold,
                        item.daily_usage,
                        item.cost,
                    ),
                )
        except sqlite3.Error as e:
            raise StoreError(f"could not save item {item.id}: {e}") from e
        logger.info("Saved item %s (%s)", item.id, item.name)
        return item

    def _unique_id(self, base: str) -> str:
        candidate = base
        n = 2
        while self._query("SELECT 1 FROM items WHERE id = ?", (candidate,)):
            candidate = f"{base}-{n}"
            n += 1
        return candidate

    def delete_item(self, item_id: str) -> None:
        """Delete an item that has never been counted.

        Raises:
            StoreError: If the item has counts; counts are never deleted.
        """
        conn = self._get_conn()
        try:
            with conn:
                conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
        except sqlite3.IntegrityError as e:
            raise StoreError(
                f"item {item_id} has inventory counts and cannot be deleted"
            ) from e
        except sqlite3.Error as e:
            raise StoreError(f"could not delete item {item_id}: {e}") from e

    def seed_defaults(self) -> tuple[int, int]:
        """Insert the default categories and suppliers into empty tables.

        Returns:
            (categories inserted, suppliers inserted)
        """
        conn = self._get_conn()
        added_categories = added_suppliers = 0
        try:
            with conn:
                if conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 0:
                    conn.executemany(
                        "INSERT INTO categories (id, name) VALUES (?, ?)",
                        DEFAULT_CATEGORIES,
                    )
                    added_categories = len(DEFAULT_CATEGORIES)
                if conn.execute("SELECT COUNT(*) FROM suppliers").fetchone()[0] == 0:
                    conn.executemany(
                        "INSERT INTO suppliers (id, name) VALUES (?, ?)",
                        DEFAULT_SUPPLIERS,
                    )
                    added_suppliers = len(DEFAULT_SUPPLIERS)
        except sqlite3.Error as e:
            raise StoreError(f"could not seed defaults: {e}") from e
        return added_categories, added_suppliers
