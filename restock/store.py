"""Store collaborator interface and the SQLite-backed implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

from .db import CatalogDB, CountDB
from .models import Category, CountEntry, Item, LatestCount, Supplier

if TYPE_CHECKING:
    from .config import RestockConfig


class InventoryStore(ABC):
    """Source of catalog snapshots and sink for count batches.

    Read methods raise StoreUnavailableError when the backing store cannot
    be reached; append_counts raises StoreError and writes nothing.
    """

    @abstractmethod
    def list_items(self) -> list[Item]: ...

    @abstractmethod
    def list_categories(self) -> list[Category]: ...

    @abstractmethod
    def list_suppliers(self) -> list[Supplier]: ...

    @abstractmethod
    def latest_count_per_item(self) -> dict[str, LatestCount]: ...

    @abstractmethod
    def append_counts(self, batch: list[CountEntry]) -> int: ...

    @abstractmethod
    def count_history(self, limit: int = 100) -> list[dict]: ...

    def close(self) -> None:
        pass

    def __enter__(self) -> InventoryStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class SQLiteStore(InventoryStore):
    """InventoryStore over a single SQLite file."""

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self.catalog = CatalogDB(db_path, timeout=timeout)
        self.counts = CountDB(db_path, timeout=timeout)

    def list_items(self) -> list[Item]:
        return self.catalog.list_items()

    def list_categories(self) -> list[Category]:
        return self.catalog.list_categories()

    def list_suppliers(self) -> list[Supplier]:
        return self.catalog.list_suppliers()

    def latest_count_per_item(self) -> dict[str, LatestCount]:
        return self.counts.latest_count_per_item()

    def append_counts(
        self, batch: list[CountEntry], *, counted_at: datetime | None = None
    ) -> int:
        return self.counts.append_counts(batch, counted_at=counted_at)

    def count_history(self, limit: int = 100) -> list[dict]:
        return self.counts.history(limit=limit)

    def close(self) -> None:
        self.catalog.close()
        self.counts.close()


def open_store(config: RestockConfig) -> SQLiteStore:
    """Create the store described by ``config.database``."""
    return SQLiteStore(config.database.path, timeout=config.database.timeout)
