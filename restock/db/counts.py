"""Append-only inventory count log."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from ..errors import StoreError, StoreUnavailableError
from ..models import Count, CountEntry, LatestCount
from .schema import ensure_schema

logger = logging.getLogger(__name__)


def _timestamp(now: datetime | None = None) -> str:
    """UTC timestamp in the same shape SQLite's default produces."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class CountDB:
    """Manages the inventory_counts table. Rows are only ever inserted."""

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

    def append_counts(
        self, batch: list[CountEntry], *, counted_at: datetime | None = None
    ) -> int:
        """Write a batch of counts in one transaction.

        Either every count is written or none is.

        Returns:
            Number of counts written.

        Raises:
            StoreError: If any row is rejected (e.g. unknown item id).
        """
        if not batch:
            return 0

        stamp = _timestamp(counted_at)
        conn = self._get_conn()
        try:
            with conn:
                conn.executemany(
                    """INSERT INTO inventory_counts
                       (item_id, count, counted_by, counted_at)
                       VALUES (?, ?, ?, ?)""",
                    [(e.item_id, e.count, e.counted_by, stamp) for e in batch],
                )
        except sqlite3.Error as e:
            logger.error("Count batch of %d rejected: %s", len(batch), e)
            raise StoreError(f"could not save {len(batch)} count(s): {e}") from e

        logger.info("Saved %d inventory count(s)", len(batch))
        return len(batch)

    def latest_count_per_item(self) -> dict[str, LatestCount]:
        """Return the newest count for every counted item in one query."""
        try:
            rows = self._get_conn().execute(
                """SELECT c.item_id, c.count, c.counted_at
                   FROM inventory_counts AS c
                   WHERE c.id = (
                       SELECT c2.id FROM inventory_counts AS c2
                       WHERE c2.item_id = c.item_id
                       ORDER BY c2.counted_at DESC, c2.id DESC
                       LIMIT 1
                   )"""
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"count read failed: {e}") from e
        return {
            r["item_id"]: LatestCount(
                item_id=r["item_id"], count=r["count"], counted_at=r["counted_at"]
            )
            for r in rows
        }

    def counts_for_item(self, item_id: str) -> list[Count]:
        """All counts for one item, newest first."""
        try:
            rows = self._get_conn().execute(
                """SELECT * FROM inventory_counts
                   WHERE item_id = ?
                   ORDER BY counted_at DESC, id DESC""",
                (item_id,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"count read failed: {e}") from e
        return [
            Count(
                id=r["id"],
                item_id=r["item_id"],
                count=r["count"],
                counted_at=r["counted_at"],
                counted_by=r["counted_by"],
            )
            for r in rows
        ]

    def history(self, limit: int = 100) -> list[dict]:
        """Most recent counts joined with their item's name, category and unit."""
        try:
            rows = self._get_conn().execute(
                """SELECT c.id, c.item_id, c.count, c.counted_by, c.counted_at,
                          i.name AS item_name, i.category, i.unit
                   FROM inventory_counts AS c
                   LEFT JOIN items AS i ON i.id = c.item_id
                   ORDER BY c.counted_at DESC, c.id DESC
                   LIMIT ?""",
                (limit,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"count read failed: {e}") from e
        return [dict(r) for r in rows]
