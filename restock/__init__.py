"""Restaurant inventory tracking and reorder decisions ahead of each truck."""

from .config import RestockConfig, load_config
from .engine import classify, compute_order_list, evaluate_item, project
from .errors import DataQualityError, RestockError, StoreError, StoreUnavailableError
from .models import (
    Category,
    Count,
    CountEntry,
    DeliveryWindow,
    Item,
    LatestCount,
    OrderLine,
    OrderList,
    Supplier,
)
from .schedule import compute_delivery_window, resolve
from .store import InventoryStore, SQLiteStore, open_store

__all__ = [
    "Category",
    "Count",
    "CountEntry",
    "DataQualityError",
    "DeliveryWindow",
    "InventoryStore",
    "Item",
    "LatestCount",
    "OrderLine",
    "OrderList",
    "RestockConfig",
    "RestockError",
    "SQLiteStore",
    "StoreError",
    "StoreUnavailableError",
    "Supplier",
    "classify",
    "compute_delivery_window",
    "compute_order_list",
    "evaluate_item",
    "load_config",
    "open_store",
    "project",
    "resolve",
]
