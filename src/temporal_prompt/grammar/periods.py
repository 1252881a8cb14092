"""Calendar arithmetic used by the grammar rules.

All functions work on local calendar dates; weekdays follow ``date.weekday()``
(Monday is 0, Sunday is 6).
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

FRIDAY = 4
WEEKEND = (5, 6)


def is_business_day(value: date) -> bool:
    return value.weekday() not in WEEKEND


def next_business_day(value: date, *, include_today: bool = False) -> date:
    """First Monday-Friday date after ``value``.

    With ``include_today`` the reference day itself is returned when it is
    already a weekday.
    """

    if include_today and is_business_day(value):
        return value
    target = value + timedelta(days=1)
    while not is_business_day(target):
        target += timedelta(days=1)
    return target


def end_of_week(value: date) -> date:
    """The Friday on or after ``value``; a Friday maps to itself."""

    return value + timedelta(days=(FRIDAY - value.weekday()) % 7)


def end_of_month(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def end_of_quarter(value: date) -> date:
    """Last day of the calendar quarter (Jan-Mar, Apr-Jun, Jul-Sep, Oct-Dec)."""

    last_month = ((value.month - 1) // 3 + 1) * 3
    return date(value.year, last_month, calendar.monthrange(value.year, last_month)[1])


def end_of_year(value: date) -> date:
    return date(value.year, 12, 31)


def days_forward_to_weekday(value: date, weekday: int) -> int:
    """Days until the next ``weekday``; 0 when ``value`` already is one."""

    return (weekday - value.weekday()) % 7


def days_back_to_weekday(value: date, weekday: int) -> int:
    """Negative day count to the previous ``weekday``, never 0."""

    return -((value.weekday() - weekday) % 7 or 7)


def weekday_offset(value: date, weekday: int, modifier: str | None = None) -> int:
    """Day offset from ``value`` to the weekday named with ``modifier``.

    - ``this``: forward, today included
    - ``last``: strictly backward
    - ``next``: that weekday in the following Monday-based week
    - no modifier: whichever occurrence is closest, today included
    """

    if modifier == "this":
        return days_forward_to_weekday(value, weekday)
    if modifier == "last":
        return days_back_to_weekday(value, weekday)
    if modifier == "next":
        monday_next_week = 7 - value.weekday()
        return monday_next_week + weekday

    forward = days_forward_to_weekday(value, weekday)
    backward = days_back_to_weekday(value, weekday)
    return forward if forward < -backward else backward


def closest_year(reference: date, month: int, day: int) -> int:
    """Year that puts ``month``/``day`` closest to ``reference``."""

    def distance(year: int) -> int:
        last_day = calendar.monthrange(year, month)[1]
        return abs((date(year, month, min(day, last_day)) - reference).days)

    return min((reference.year, reference.year + 1, reference.year - 1), key=distance)
