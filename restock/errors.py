"""Exception types raised by the reorder engine and its stores."""

from __future__ import annotations


class RestockError(Exception):
    """Base class for all restock errors."""


class DataQualityError(RestockError):
    """An item record has a missing, non-numeric or out-of-range field.

    Raised at write time to reject the record, and collected (not raised)
    by the order aggregator so one bad item does not sink the whole list.
    """

    def __init__(self, item_id: str | None, field: str, reason: str) -> None:
        self.item_id = item_id
        self.field = field
        self.reason = reason
        label = item_id if item_id else "<new item>"
        super().__init__(f"{label}: {field} {reason}")


class StoreError(RestockError):
    """The store rejected an operation. Nothing from the batch was written."""


class StoreUnavailableError(StoreError):
    """The store could not be opened or read."""
