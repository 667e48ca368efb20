"""SQLite storage for the catalog and the inventory count log."""

from .catalog import DEFAULT_CATEGORIES, DEFAULT_SUPPLIERS, CatalogDB
from .counts import CountDB
from .schema import ensure_schema

__all__ = [
    "CatalogDB",
    "CountDB",
    "DEFAULT_CATEGORIES",
    "DEFAULT_SUPPLIERS",
    "ensure_schema",
]
