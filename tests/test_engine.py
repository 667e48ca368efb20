"""Tests for stock projection, classification and order list aggregation."""

import locale
import math
from datetime import date

import pytest

from restock.engine import (
    classify,
    collation_key,
    compute_order_list,
    evaluate_item,
    project,
)
from restock.errors import DataQualityError
from restock.models import Category, DeliveryWindow, Item, LatestCount


def _window(days_until: int, profile: str = "weekend") -> DeliveryWindow:
    return DeliveryWindow(
        slot="second" if profile == "weekend" else "first",
        day_name="Thursday" if profile == "weekend" else "Monday",
        date=date(2026, 10, 15),
        is_today=days_until == 0,
        days_until=days_until,
        par_profile=profile,
    )


def _item(
    id: str,
    name: str | None = None,
    *,
    category: str = "protein",
    weekday_par: float = 10.0,
    weekend_par: float = 15.0,
    threshold: float = 5.0,
    daily_usage: float = 3.0,
    cost: float | None = 2.0,
) -> Item:
    return Item(
        id=id,
        name=name or id.title(),
        category=category,
        weekday_par=weekday_par,
        weekend_par=weekend_par,
        threshold=threshold,
        daily_usage=daily_usage,
        cost=cost,
        unit="case",
    )


# --- project ---


def test_project_basic():
    assert project(10, 3, 2) == 4


def test_project_can_go_negative():
    assert project(2, 3, 4) == -10


@pytest.mark.parametrize("days", [0, 1, 3, 6])
def test_project_zero_usage_keeps_count(days):
    assert project(7.5, 0, days) == 7.5


def test_project_decreases_with_usage_and_days():
    assert project(10, 2, 3) < project(10, 1, 3)
    assert project(10, 2, 3) < project(10, 2, 2)


# --- classify ---


def test_classify_good_when_projection_meets_threshold():
    result = classify(5, 5, par=15, current_count=10, days_until=2)
    assert result.needs_order is False
    assert result.order_amount == 0
    assert result.tier == "good"


def test_classify_order_when_truck_is_days_away():
    result = classify(4, 5, par=15, current_count=10, days_until=2)
    assert result.needs_order is True
    assert result.order_amount == 5
    assert result.tier == "order"


@pytest.mark.parametrize("days", [0, 1])
def test_classify_urgent_when_truck_is_close(days):
    result = classify(4, 5, par=15, current_count=10, days_until=days)
    assert result.tier == "urgent"
    assert result.order_amount == 5


def test_classify_order_amount_never_negative():
    """Above par but below threshold after projection still orders nothing."""
    result = classify(-1, 5, par=8, current_count=12, days_until=3)
    assert result.needs_order is True
    assert result.order_amount == 0


def test_classify_custom_urgent_window():
    result = classify(0, 5, par=15, current_count=3, days_until=2, urgent_within_days=2)
    assert result.tier == "urgent"


# --- evaluate_item ---


def test_evaluate_item_two_days_out():
    item = _item("chicken")
    line = evaluate_item(item, 10, _window(2))
    assert line.projected_stock == 4
    assert line.needs_order is True
    assert line.par == 15
    assert line.order_amount == 5
    assert line.tier == "order"


def test_evaluate_item_one_day_out_is_urgent():
    line = evaluate_item(_item("chicken"), 10, _window(1))
    assert line.projected_stock == 7
    # 7 >= 5, nothing needed with one day of usage
    assert line.needs_order is False

    heavy = _item("chicken", daily_usage=6)
    line = evaluate_item(heavy, 10, _window(1))
    assert line.needs_order is True
    assert line.tier == "urgent"
    assert line.order_amount == 5


def test_evaluate_item_uses_weekday_par_for_first_truck():
    line = evaluate_item(_item("buns"), 2, _window(3, profile="weekday"))
    assert line.par == 10
    assert line.order_amount == 8


def test_evaluate_item_uncounted_orders_full_par():
    line = evaluate_item(_item("cheese"), None, _window(2))
    assert line.current_count == 0
    assert line.needs_order is True
    assert line.order_amount == 15


def test_evaluate_item_rejects_bad_item():
    item = _item("lettuce", threshold=float("nan"))
    with pytest.raises(DataQualityError) as excinfo:
        evaluate_item(item, 3, _window(2))
    assert excinfo.value.item_id == "lettuce"
    assert excinfo.value.field == "threshold"


def test_evaluate_item_rejects_bad_count():
    with pytest.raises(DataQualityError):
        evaluate_item(_item("lettuce"), float("inf"), _window(2))


def test_evaluate_item_missing_cost_counts_as_zero():
    line = evaluate_item(_item("napkins", cost=None), 0, _window(2))
    assert line.estimated_cost == 0


# --- compute_order_list ---


def test_compute_order_list_empty_catalog():
    result = compute_order_list([], {}, _window(2))
    assert result.lines == []
    assert result.total_cost == 0
    assert result.warnings == []


def test_compute_order_list_filters_and_sorts():
    items = [
        _item("zucchini", "Zucchini"),
        _item("apples", "apples"),
        _item("bacon", "Bacon"),
        _item("rice", "Rice", daily_usage=0),
    ]
    counts = {"zucchini": 1, "apples": 2, "bacon": 0, "rice": 50}
    result = compute_order_list(items, counts, _window(2))

    names = [line.item.name for line in result.lines]
    assert names == ["apples", "Bacon", "Zucchini"]
    assert all(line.tier == "order" for line in result.lines)


def test_compute_order_list_tier_follows_window():
    items = [
        _item("apples", "Apples"),
        _item("bacon", "Bacon", daily_usage=10),
        _item("carrots", "Carrots"),
    ]
    window = _window(1)
    # apples and carrots are below threshold already; bacon only through usage
    counts = {"apples": 1, "bacon": 12, "carrots": 1}
    result = compute_order_list(items, counts, window)
    assert [line.tier for line in result.lines] == ["urgent"] * 3
    assert [line.item.name for line in result.lines] == ["Apples", "Bacon", "Carrots"]

    mixed = compute_order_list(
        items,
        counts,
        window,
        urgent_within_days=0,
    )
    assert [line.tier for line in mixed.lines] == ["order"] * 3


def test_compute_order_list_total_cost():
    items = [
        _item("a", cost=2.5),
        _item("b", cost=0.1),
        _item("c", cost=None),
    ]
    result = compute_order_list(items, {"a": 0, "b": 3}, _window(2))
    expected = sum(line.order_amount * (line.item.cost or 0) for line in result.lines)
    assert math.isclose(result.total_cost, expected, abs_tol=1e-9)
    assert math.isclose(result.total_cost, 15 * 2.5 + 12 * 0.1, abs_tol=1e-9)


def test_compute_order_list_accepts_latest_count_records():
    items = [_item("fries")]
    latest = {"fries": LatestCount("fries", 20.0, "2026-10-13T10:00:00.000Z")}
    result = compute_order_list(items, latest, _window(2))
    assert result.lines == []


def test_compute_order_list_skips_bad_items():
    items = [
        _item("good"),
        _item("broken", weekend_par=None),
        _item("negative", daily_usage=-1),
    ]
    result = compute_order_list(items, {}, _window(2))

    assert [line.item.id for line in result.lines] == ["good"]
    assert {w.item_id for w in result.warnings} == {"broken", "negative"}


def test_compute_order_list_pending_counts_take_precedence():
    items = [_item("milk")]
    latest = {"milk": 0}
    result = compute_order_list(items, latest, _window(2), pending_counts={"milk": 40})
    assert result.lines == []


def test_compute_order_list_category_filter():
    items = [
        _item("milk", category="dairy"),
        _item("steak", category="protein"),
    ]
    result = compute_order_list(items, {}, _window(2), category="dairy")
    assert [line.item.id for line in result.lines] == ["milk"]


def test_compute_order_list_sorts_accented_names():
    items = [
        _item("zucchini", "Zucchini"),
        _item("eclair", "Éclair"),
        _item("eggs", "Eggs"),
    ]
    result = compute_order_list(items, {}, _window(2))
    assert [line.item.name for line in result.lines] == ["Éclair", "Eggs", "Zucchini"]


@pytest.fixture
def c_collation():
    previous = locale.setlocale(locale.LC_COLLATE)
    locale.setlocale(locale.LC_COLLATE, "C")
    yield
    locale.setlocale(locale.LC_COLLATE, previous)


def test_collation_key_folds_accents_in_c_locale(c_collation):
    assert collation_key("Éclair") == "eclair"
    assert collation_key("CRÈME Brûlée") == "creme brulee"
    names = ["Zucchini", "Éclair", "eggs", "Apple"]
    assert sorted(names, key=collation_key) == ["Apple", "Éclair", "eggs", "Zucchini"]


def test_by_category_keeps_sorted_order():
    items = [
        _item("cream", "Cream", category="dairy"),
        _item("steak", "Steak", category="protein"),
        _item("butter", "Butter", category="dairy"),
        _item("mystery", "Mystery", category="unknown"),
    ]
    result = compute_order_list(items, {}, _window(2))
    categories = [Category("protein", "Protein"), Category("dairy", "Dairy")]

    groups = result.by_category(categories)
    assert [cat.id for cat, _ in groups] == ["protein", "dairy", "unknown"]
    assert [line.item.name for line in groups[1][1]] == ["Butter", "Cream"]
    for _, lines in groups:
        positions = [result.lines.index(line) for line in lines]
        assert positions == sorted(positions)


def test_display_lists_lines_and_warnings():
    items = [_item("steak", "Steak"), _item("broken", threshold=None)]
    result = compute_order_list(items, {}, _window(2))
    text = result.display([Category("protein", "Protein")])

    assert "Next truck: Thursday" in text
    assert "Items to order: 1" in text
    assert "Steak" in text
    assert "Protein" in text
    assert "broken: threshold is missing" in text


def test_to_dict_is_json_ready():
    import json

    result = compute_order_list([_item("steak")], {}, _window(2))
    data = json.loads(json.dumps(result.to_dict()))
    assert data["window"]["day"] == "Thursday"
    assert data["lines"][0]["order_amount"] == 15
    assert data["total_cost"] == 30
