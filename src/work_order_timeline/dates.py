"""Calendar-date helpers shared by the column generator and the layout calculator."""

from __future__ import annotations

import calendar
import datetime as dt
from typing import Callable

from .errors import InvalidInputError

Clock = Callable[[], dt.date]
"""Zero-argument callable returning "now"; datetimes are truncated to their date."""

DateLike = dt.date | dt.datetime | str


def system_clock() -> dt.date:
    """Default clock: today's local calendar date."""
    return dt.date.today()


def to_calendar_date(value: DateLike) -> dt.date:
    """
    Truncate ``value`` to a plain calendar date.

    - ``datetime`` values lose their time of day (and any tzinfo).
    - ``date`` values are returned unchanged.
    - Strings must be ISO formatted (``YYYY-MM-DD``, optionally with a time part).
    """

    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.datetime.fromisoformat(value.strip()).date()
        except ValueError as exc:
            raise InvalidInputError(f"invalid date '{value}', expected YYYY-MM-DD") from exc
    raise InvalidInputError(f"expected a date, got {type(value).__name__}")


def read_clock(clock: Clock) -> dt.date:
    return to_calendar_date(clock())


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(value: dt.date, months: int) -> dt.date:
    """
    Shift ``value`` by whole calendar months, keeping the day of month.

    Days that do not exist in the target month clamp to its last day, so
    2024-01-31 + 1 month is 2024-02-29.
    """

    index = value.year * 12 + (value.month - 1) + months
    year, month0 = divmod(index, 12)
    month = month0 + 1
    day = min(value.day, days_in_month(year, month))
    return dt.date(year, month, day)


def month_index(value: dt.date) -> int:
    """Absolute month number, so the difference of two indexes counts whole month columns."""
    return value.year * 12 + (value.month - 1)


def start_of_week(value: dt.date) -> dt.date:
    """Monday of the ISO week containing ``value``."""
    return value - dt.timedelta(days=value.weekday())


def start_of_month(value: dt.date) -> dt.date:
    return value.replace(day=1)
