"""Data models for the restaurant catalog, counts and order decisions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .errors import DataQualityError
from .schemas import validate_quantities

TIER_GOOD = "good"
TIER_ORDER = "order"
TIER_URGENT = "urgent"

PROFILE_WEEKDAY = "weekday"
PROFILE_WEEKEND = "weekend"

SLOT_FIRST = "first"
SLOT_SECOND = "second"


@dataclass
class Category:
    id: str
    name: str


@dataclass
class Supplier:
    id: str
    name: str
    contact: str = ""
    phone: str = ""


@dataclass
class Item:
    """A trackable stock unit as supplied by the store.

    Numeric fields are whatever the store returned; call validate() before
    trusting them.
    """

    id: str
    name: str
    category: str
    weekday_par: float | None
    weekend_par: float | None
    threshold: float | None
    daily_usage: float | None
    cost: float | None = 0.0
    unit: str = ""
    location: str = ""
    supplier: str | None = None

    def validate(self) -> None:
        """Raise DataQualityError unless every quantity is a finite number >= 0."""
        validate_quantities(
            self.id,
            {
                "weekday_par": self.weekday_par,
                "weekend_par": self.weekend_par,
                "threshold": self.threshold,
                "daily_usage": self.daily_usage,
                "cost": self.cost,
            },
        )

    def par_for(self, profile: str) -> float:
        """Par level for a delivery profile ("weekday" or "weekend")."""
        if profile == PROFILE_WEEKEND:
            return float(self.weekend_par)
        return float(self.weekday_par)

    @property
    def unit_cost(self) -> float:
        return float(self.cost) if self.cost is not None else 0.0


@dataclass(frozen=True)
class Count:
    """A single stock observation. Counts are never modified."""

    id: int
    item_id: str
    count: float
    counted_at: str  # ISO 8601, UTC
    counted_by: str


@dataclass(frozen=True)
class LatestCount:
    item_id: str
    count: float
    counted_at: str


@dataclass
class CountEntry:
    """One row of a count batch waiting to be written."""

    item_id: str
    count: float
    counted_by: str = "Unknown"


@dataclass(frozen=True)
class DeliveryWindow:
    """The next truck: which day, how far away, and which par applies."""

    slot: str  # "first" | "second"
    day_name: str  # "Monday", "Thursday", ...
    date: date
    is_today: bool
    days_until: int
    par_profile: str  # "weekday" | "weekend"

    @property
    def use_weekend_par(self) -> bool:
        return self.par_profile == PROFILE_WEEKEND

    def to_dict(self) -> dict:
        return {
            "slot": self.slot,
            "day": self.day_name,
            "date": self.date.isoformat(),
            "is_today": self.is_today,
            "days_until": self.days_until,
            "par_profile": self.par_profile,
        }


@dataclass(frozen=True)
class Classification:
    needs_order: bool
    order_amount: float
    tier: str  # "good" | "order" | "urgent"


@dataclass
class OrderLine:
    item: Item
    current_count: float
    projected_stock: float
    par: float
    needs_order: bool
    order_amount: float
    tier: str

    @property
    def estimated_cost(self) -> float:
        return self.order_amount * self.item.unit_cost

    def to_dict(self) -> dict:
        return {
            "item_id": self.item.id,
            "name": self.item.name,
            "category": self.item.category,
            "unit": self.item.unit,
            "current_count": self.current_count,
            "projected_stock": self.projected_stock,
            "par": self.par,
            "needs_order": self.needs_order,
            "order_amount": self.order_amount,
            "tier": self.tier,
            "unit_cost": self.item.unit_cost,
            "estimated_cost": self.estimated_cost,
        }


@dataclass
class OrderList:
    window: DeliveryWindow
    lines: list[OrderLine] = field(default_factory=list)
    total_cost: float = 0.0
    warnings: list[DataQualityError] = field(default_factory=list)

    def by_category(
        self, categories: list[Category]
    ) -> list[tuple[Category, list[OrderLine]]]:
        """Partition the lines by category, keeping their order.

        Groups follow the order of ``categories``; lines whose category is
        not in the catalog are collected under a placeholder at the end.
        Empty groups are omitted.
        """
        buckets: dict[str, list[OrderLine]] = {}
        for line in self.lines:
            buckets.setdefault(line.item.category, []).append(line)

        groups: list[tuple[Category, list[OrderLine]]] = []
        for cat in categories:
            lines = buckets.pop(cat.id, None)
            if lines:
                groups.append((cat, lines))
        for cat_id, lines in buckets.items():
            groups.append((Category(id=cat_id, name=cat_id or "Uncategorized"), lines))
        return groups

    def to_dict(self) -> dict:
        return {
            "window": self.window.to_dict(),
            "lines": [line.to_dict() for line in self.lines],
            "total_cost": self.total_cost,
            "warnings": [str(w) for w in self.warnings],
        }

    def display(self, categories: list[Category] | None = None) -> str:
        """Format the order list for terminal display."""
        w = self.window
        when = "today" if w.is_today else f"in {w.days_until} days"
        out: list[str] = []
        out.append(
            f"Next truck: {w.day_name} {w.date.isoformat()} ({when}, "
            f"{w.par_profile} par)"
        )
        out.append(f"Items to order: {len(self.lines)}")
        out.append(f"Est. order cost: ${self.total_cost:.2f}")

        if categories is None:
            groups = [(None, self.lines)] if self.lines else []
        else:
            groups = self.by_category(categories)

        for cat, lines in groups:
            out.append("")
            if cat is not None:
                out.append(cat.name)
                out.append(f"{'─' * 60}")
            out.append(
                f"  {'Item':<24} {'On hand':>8} {'Proj.':>8} "
                f"{'Order':>8} {'Cost':>9}  Tier"
            )
            for line in lines:
                mark = "!" if line.tier == TIER_URGENT else " "
                out.append(
                    f"{mark} {line.item.name:<24} {line.current_count:>8g} "
                    f"{line.projected_stock:>8g} {line.order_amount:>8g} "
                    f"{line.estimated_cost:>9.2f}  {line.tier}"
                )

        if self.warnings:
            out.append("")
            out.append(f"Skipped {len(self.warnings)} item(s) with bad data:")
            for warning in self.warnings:
                out.append(f"  - {warning}")

        return "\n".join(out)
