from __future__ import annotations

import datetime as dt
import math
from typing import Sequence

from .columns import coerce_granularity
from .dates import DateLike, days_in_month, month_index, to_calendar_date
from .errors import InvalidInputError
from .models import BarPosition, Column, Granularity

# Mean Gregorian month length; month-mode widths scale against it so bars
# grow uniformly with column count regardless of which months they cross.
AVERAGE_MONTH_DAYS = 30.44
# Narrowest month-mode bar, in percent of the grid, so short orders stay clickable.
MIN_MONTH_BAR_WIDTH_PCT = 1.5

_MS_PER_DAY = 86_400_000


def calculate_bar_position(
    interval_start: DateLike,
    interval_end: DateLike,
    range_start: DateLike,
    range_duration: dt.timedelta | float,
    granularity: Granularity | str,
    columns: Sequence[Column],
) -> BarPosition:
    """
    Locate an interval's bar within the grid as (left %, width %).

    - Day and week zooms map dates linearly onto ``range_duration``
      (a timedelta, or a number of milliseconds).
    - Month zoom positions the bar relative to the month columns: whole columns
      up to the start month plus the fraction of that month already elapsed.
    - Every date is truncated to its calendar day before any arithmetic.
    """

    start = to_calendar_date(interval_start)
    end = to_calendar_date(interval_end)
    origin = to_calendar_date(range_start)

    if coerce_granularity(granularity) is Granularity.MONTH:
        return _month_position(start, end, origin, len(columns))
    return _linear_position(start, end, origin, _duration_ms(range_duration))


def range_duration(start: DateLike, end: DateLike) -> dt.timedelta:
    """Span between two range boundaries at day precision."""
    return to_calendar_date(end) - to_calendar_date(start)


def _linear_position(start: dt.date, end: dt.date, origin: dt.date, duration_ms: float) -> BarPosition:
    if not math.isfinite(duration_ms) or duration_ms <= 0:
        raise InvalidInputError(f"range duration must be positive, got {duration_ms} ms")

    offset_ms = (start - origin).days * _MS_PER_DAY
    length_ms = (end - start).days * _MS_PER_DAY
    return BarPosition(left=offset_ms / duration_ms * 100, width=length_ms / duration_ms * 100)


def _month_position(start: dt.date, end: dt.date, origin: dt.date, column_count: int) -> BarPosition:
    if column_count <= 0:
        raise InvalidInputError("month layout needs at least one column")

    whole_months = month_index(start) - month_index(origin)
    # Fraction of the actual start month, so the edge lines up with its own column.
    within_month = (start.day - 1) / days_in_month(start.year, start.month)
    left = (whole_months + within_month) / column_count * 100

    duration_days = (end - start).days
    width = duration_days / (column_count * AVERAGE_MONTH_DAYS) * 100
    return BarPosition(left=left, width=max(width, MIN_MONTH_BAR_WIDTH_PCT))


def _duration_ms(value: dt.timedelta | float) -> float:
    if isinstance(value, dt.timedelta):
        return value.total_seconds() * 1000
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise InvalidInputError(f"range duration must be a timedelta or milliseconds, got {type(value).__name__}")
