"""Tests for the append-only count log."""

from datetime import datetime, timedelta, timezone

import pytest

from restock.db.catalog import CatalogDB
from restock.db.counts import CountDB
from restock.errors import StoreError
from restock.models import CountEntry

T0 = datetime(2026, 10, 13, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    catalog = CatalogDB(db_path=path)
    for item_id, name in [("chicken", "Chicken"), ("buns", "Buns"), ("milk", "Milk")]:
        catalog.save_item({
            "id": item_id,
            "name": name,
            "category": "protein",
            "unit": "case",
            "week_par": 10,
            "weekend_par": 15,
            "threshold": 5,
            "daily_usage": 3,
        })
    catalog.close()
    return path


@pytest.fixture
def db(db_path):
    counts = CountDB(db_path=db_path)
    yield counts
    counts.close()


def test_append_counts(db):
    saved = db.append_counts(
        [CountEntry("chicken", 4, "sam"), CountEntry("buns", 12, "sam")],
        counted_at=T0,
    )
    assert saved == 2

    rows = db.counts_for_item("chicken")
    assert len(rows) == 1
    assert rows[0].count == 4.0
    assert rows[0].counted_by == "sam"
    assert rows[0].counted_at == "2026-10-13T09:00:00.000Z"


def test_append_counts_empty_batch(db):
    assert db.append_counts([]) == 0
    assert db.history() == []


def test_append_counts_all_or_nothing(db):
    """A batch with an unknown item writes nothing."""
    batch = [CountEntry("chicken", 4), CountEntry("ghost", 1)]
    with pytest.raises(StoreError):
        db.append_counts(batch)
    assert db.latest_count_per_item() == {}


def test_latest_count_per_item(db):
    db.append_counts([CountEntry("chicken", 4)], counted_at=T0)
    db.append_counts(
        [CountEntry("chicken", 9), CountEntry("buns", 2)],
        counted_at=T0 + timedelta(hours=6),
    )

    latest = db.latest_count_per_item()
    assert set(latest) == {"chicken", "buns"}
    assert latest["chicken"].count == 9.0
    assert latest["buns"].count == 2.0
    assert "milk" not in latest


def test_latest_count_uses_timestamp_not_insert_order(db):
    db.append_counts([CountEntry("chicken", 9)], counted_at=T0 + timedelta(days=1))
    db.append_counts([CountEntry("chicken", 4)], counted_at=T0)

    assert db.latest_count_per_item()["chicken"].count == 9.0


def test_latest_count_same_timestamp_prefers_last_written(db):
    db.append_counts([CountEntry("chicken", 1)], counted_at=T0)
    db.append_counts([CountEntry("chicken", 2)], counted_at=T0)

    assert db.latest_count_per_item()["chicken"].count == 2.0


def test_counts_are_never_overwritten(db):
    db.append_counts([CountEntry("milk", 3)], counted_at=T0)
    db.append_counts([CountEntry("milk", 7)], counted_at=T0 + timedelta(hours=1))

    counts = [c.count for c in db.counts_for_item("milk")]
    assert counts == [7.0, 3.0]


def test_history_joins_item_details(db):
    db.append_counts([CountEntry("chicken", 4, "sam")], counted_at=T0)
    db.append_counts([CountEntry("buns", 6, "alex")], counted_at=T0 + timedelta(hours=1))

    rows = db.history()
    assert [r["item_name"] for r in rows] == ["Buns", "Chicken"]
    assert rows[0]["unit"] == "case"
    assert rows[0]["counted_by"] == "alex"


def test_history_limit(db):
    for hour in range(5):
        db.append_counts([CountEntry("milk", hour)], counted_at=T0 + timedelta(hours=hour))
    rows = db.history(limit=2)
    assert [r["count"] for r in rows] == [4.0, 3.0]


def test_naive_timestamp_is_kept_as_given(db):
    db.append_counts([CountEntry("milk", 1)], counted_at=datetime(2026, 10, 13, 8, 30, 0, 250000))
    assert db.counts_for_item("milk")[0].counted_at == "2026-10-13T08:30:00.250Z"
