"""Delivery schedule resolution for a two-truck weekly cycle."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from .models import (
    PROFILE_WEEKDAY,
    PROFILE_WEEKEND,
    SLOT_FIRST,
    SLOT_SECOND,
    DeliveryWindow,
)

# date.weekday() numbering: Monday == 0
MONDAY = calendar.MONDAY
THURSDAY = calendar.THURSDAY

_DAY_NAMES = {name.lower(): i for i, name in enumerate(calendar.day_name)}


def parse_weekday(value: str | int) -> int:
    """Turn "monday", "Mon" or 0 into a date.weekday() number."""
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"weekday out of range: {value}")
    key = str(value).strip().lower()
    if key in _DAY_NAMES:
        return _DAY_NAMES[key]
    for name, index in _DAY_NAMES.items():
        if len(key) >= 3 and name.startswith(key):
            return index
    raise ValueError(f"unknown weekday: {value!r}")


def resolve(
    today: date,
    first_day: int = MONDAY,
    second_day: int = THURSDAY,
) -> DeliveryWindow:
    """Resolve the next delivery for ``today``.

    The first delivery day stocks to the weekday par and the second to the
    weekend par. On a delivery day the window is that day with zero days
    to go; otherwise it is whichever delivery comes next, wrapping around
    the end of the week.
    """
    if first_day == second_day:
        raise ValueError("first and second delivery days must differ")

    dow = today.weekday()
    until_first = (first_day - dow) % 7
    until_second = (second_day - dow) % 7

    if until_first <= until_second:
        slot, weekday, days_until, profile = (
            SLOT_FIRST, first_day, until_first, PROFILE_WEEKDAY,
        )
    else:
        slot, weekday, days_until, profile = (
            SLOT_SECOND, second_day, until_second, PROFILE_WEEKEND,
        )

    return DeliveryWindow(
        slot=slot,
        day_name=calendar.day_name[weekday],
        date=today + timedelta(days=days_until),
        is_today=days_until == 0,
        days_until=days_until,
        par_profile=profile,
    )


def compute_delivery_window(
    now: date | datetime | None = None,
    first_day: int = MONDAY,
    second_day: int = THURSDAY,
) -> DeliveryWindow:
    """Delivery window for ``now`` (defaults to the local date)."""
    if now is None:
        today = date.today()
    elif isinstance(now, datetime):
        today = now.date()
    else:
        today = now
    return resolve(today, first_day, second_day)
