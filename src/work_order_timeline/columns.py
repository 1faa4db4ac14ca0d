from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from .dates import Clock, DateLike, add_months, read_clock, start_of_month, start_of_week, system_clock, to_calendar_date
from .errors import InvalidInputError
from .models import Column, Granularity, VisibleRange

LOGGER = logging.getLogger(__name__)

# Initial viewport half-widths, in granularity units, on each side of today.
INITIAL_DAYS_EACH_SIDE = 90
INITIAL_WEEKS_EACH_SIDE = 26
INITIAL_MONTHS_EACH_SIDE = 12


@dataclass(frozen=True)
class _GranularityPolicy:
    """Everything that varies by zoom level, colocated in one place."""

    step: Callable[[dt.date, int], dt.date]
    label: Callable[[dt.date], str]
    is_current: Callable[[dt.date, dt.date], bool]
    initial_range: Callable[[dt.date], tuple[dt.date, dt.date]]
    extension_count: int


def _step_days(value: dt.date, count: int) -> dt.date:
    return value + dt.timedelta(days=count)


def _step_weeks(value: dt.date, count: int) -> dt.date:
    return value + dt.timedelta(weeks=count)


def _day_label(value: dt.date) -> str:
    return f"{value:%b} {value.day}"


def _week_label(value: dt.date) -> str:
    week_end = value + dt.timedelta(days=6)
    return f"{value:%b} {value.day} - {week_end.day}"


def _month_label(value: dt.date) -> str:
    return f"{value:%b} {value.year}"


def _is_current_day(anchor: dt.date, now: dt.date) -> bool:
    return anchor == now


def _is_current_week(anchor: dt.date, now: dt.date) -> bool:
    return anchor <= now <= anchor + dt.timedelta(days=6)


def _is_current_month(anchor: dt.date, now: dt.date) -> bool:
    return (anchor.year, anchor.month) == (now.year, now.month)


def _initial_days(today: dt.date) -> tuple[dt.date, dt.date]:
    return _step_days(today, -INITIAL_DAYS_EACH_SIDE), _step_days(today, INITIAL_DAYS_EACH_SIDE)


def _initial_weeks(today: dt.date) -> tuple[dt.date, dt.date]:
    monday = start_of_week(today)
    return _step_weeks(monday, -INITIAL_WEEKS_EACH_SIDE), _step_weeks(monday, INITIAL_WEEKS_EACH_SIDE)


def _initial_months(today: dt.date) -> tuple[dt.date, dt.date]:
    first = start_of_month(today)
    return add_months(first, -INITIAL_MONTHS_EACH_SIDE), add_months(first, INITIAL_MONTHS_EACH_SIDE)


_POLICIES: dict[Granularity, _GranularityPolicy] = {
    Granularity.DAY: _GranularityPolicy(
        step=_step_days,
        label=_day_label,
        is_current=_is_current_day,
        initial_range=_initial_days,
        extension_count=30,
    ),
    Granularity.WEEK: _GranularityPolicy(
        step=_step_weeks,
        label=_week_label,
        is_current=_is_current_week,
        initial_range=_initial_weeks,
        extension_count=12,
    ),
    Granularity.MONTH: _GranularityPolicy(
        step=add_months,
        label=_month_label,
        is_current=_is_current_month,
        initial_range=_initial_months,
        extension_count=6,
    ),
}


def coerce_granularity(value: Granularity | str) -> Granularity:
    """Accept a Granularity or its string value ("day", "week", "month")."""

    if isinstance(value, Granularity):
        return value
    if isinstance(value, str):
        try:
            return Granularity(value.strip().lower())
        except ValueError:
            pass
    raise InvalidInputError(f"unrecognized granularity {value!r}; expected one of day, week, month")


def _policy(granularity: Granularity | str) -> _GranularityPolicy:
    return _POLICIES[coerce_granularity(granularity)]


def step(value: DateLike, granularity: Granularity | str, count: int = 1) -> dt.date:
    """Move ``value`` by ``count`` granularity units (negative counts move backwards)."""

    if not isinstance(count, int) or isinstance(count, bool):
        raise InvalidInputError(f"step count must be an integer, got {count!r}")
    return _policy(granularity).step(to_calendar_date(value), count)


def iter_column_dates(range_start: DateLike, range_end: DateLike, granularity: Granularity | str) -> Iterator[dt.date]:
    """
    Yield column anchor dates from ``range_start`` until the next one would pass ``range_end``.

    Each date is derived from the range start rather than from the previous
    column, so month columns keep the original day of month after a short month.
    """

    policy = _policy(granularity)
    start = to_calendar_date(range_start)
    end = to_calendar_date(range_end)
    if start > end:
        raise InvalidInputError(f"range start {start} is after range end {end}")

    index = 0
    cursor = start
    while cursor <= end:
        yield cursor
        index += 1
        cursor = policy.step(start, index)


def generate_columns(
    range_start: DateLike,
    range_end: DateLike,
    granularity: Granularity | str,
    clock: Clock = system_clock,
) -> list[Column]:
    """
    Build the ordered, gap-free column sequence covering [range_start, range_end].

    - The first column is anchored on ``range_start``; the last on or before ``range_end``.
    - ``clock`` is read once and only feeds ``is_current_period``.
    """

    policy = _policy(granularity)
    now = read_clock(clock)
    columns = [
        Column(label=policy.label(anchor), date=anchor, is_current_period=policy.is_current(anchor, now))
        for anchor in iter_column_dates(range_start, range_end, granularity)
    ]
    LOGGER.debug("Generated %d %s columns from %s", len(columns), coerce_granularity(granularity).value, range_start)
    return columns


def extend_left(current_start: DateLike, granularity: Granularity | str, count: int) -> dt.date:
    """Return a new range start ``count`` units before ``current_start``."""

    _require_non_negative(count)
    return step(current_start, granularity, -count)


def extend_right(current_end: DateLike, granularity: Granularity | str, count: int) -> dt.date:
    """Return a new range end ``count`` units after ``current_end``."""

    _require_non_negative(count)
    return step(current_end, granularity, count)


def get_initial_range(granularity: Granularity | str, clock: Clock = system_clock) -> VisibleRange:
    """Default viewport around today, aligned so the end is a whole number of steps from the start."""

    start, end = _policy(granularity).initial_range(read_clock(clock))
    return VisibleRange(start=start, end=end)


def get_extension_count(granularity: Granularity | str) -> int:
    """Units to add per infinite-scroll trigger."""
    return _policy(granularity).extension_count


def _require_non_negative(count: int) -> None:
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        raise InvalidInputError(f"extension count must be a non-negative integer, got {count!r}")
