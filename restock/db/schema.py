"""Database schema definitions and migration helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..errors import StoreUnavailableError

_SCHEMA_VERSION = 1

_DDL = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS suppliers (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    contact TEXT NOT NULL DEFAULT '',
    phone TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    supplier TEXT REFERENCES suppliers(id) ON DELETE SET NULL,
    unit TEXT NOT NULL DEFAULT '',
    location TEXT NOT NULL DEFAULT '',
    week_par REAL,
    weekend_par REAL,
    threshold REAL,
    daily_usage REAL,
    cost REAL DEFAULT 0,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_items_category ON items(category);

CREATE TABLE IF NOT EXISTS inventory_counts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id TEXT NOT NULL REFERENCES items(id),
    count REAL NOT NULL,
    counted_by TEXT NOT NULL DEFAULT 'Unknown',
    counted_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_counts_item_time
    ON inventory_counts(item_id, counted_at);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""


def ensure_schema(db_path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """Open (or create) the database and ensure the schema is up to date.

    Args:
        db_path: Path to the SQLite database file.
        timeout: Seconds to wait on a locked database.

    Returns:
        An open sqlite3.Connection with the schema applied.

    Raises:
        StoreUnavailableError: If the database cannot be opened.
    """
    db_path = Path(db_path).expanduser()
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), timeout=timeout)
    except (OSError, sqlite3.Error) as e:
        raise StoreUnavailableError(f"cannot open {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")

        # Check current schema version
        try:
            row = conn.execute("SELECT version FROM schema_version").fetchone()
            current_version = row["version"] if row else 0
        except sqlite3.OperationalError:
            current_version = 0

        if current_version < _SCHEMA_VERSION:
            conn.executescript(_DDL)
            conn.execute("DELETE FROM schema_version")
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )
            conn.commit()
    except sqlite3.DatabaseError as e:
        conn.close()
        raise StoreUnavailableError(f"cannot use {db_path}: {e}") from e

    return conn
