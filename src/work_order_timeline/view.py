from __future__ import annotations

import datetime as dt
import logging
import math

from .columns import (
    coerce_granularity,
    extend_left,
    extend_right,
    generate_columns,
    get_extension_count,
    get_initial_range,
    step,
)
from .dates import Clock, days_in_month, start_of_month, system_clock
from .layout import calculate_bar_position
from .models import BarPosition, Column, Granularity, VisibleRange, WorkOrder

LOGGER = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH_PX = 110
# Distance from either scroll edge that triggers loading another chunk.
SCROLL_ACTIVATION_THRESHOLD_PX = 300


class TimelineView:
    """
    Mutable view state around the pure timeline engine.

    Owns the zoom, the visible range and the generated columns; every change
    regenerates the columns synchronously. Pixel values describe a horizontal
    scroll container whose content is ``len(columns) * column_width`` wide.
    """

    def __init__(
        self,
        zoom: Granularity | str = Granularity.MONTH,
        *,
        clock: Clock = system_clock,
        column_width: float = DEFAULT_COLUMN_WIDTH_PX,
    ) -> None:
        if column_width <= 0:
            raise ValueError(f"column_width must be positive, got {column_width}")
        self.zoom = coerce_granularity(zoom)
        self.clock = clock
        self.column_width = column_width
        self.range: VisibleRange
        self.columns: list[Column] = []
        self.rebuild()

    def rebuild(self) -> None:
        """Reset to the initial range for the current zoom."""
        self.range = get_initial_range(self.zoom, self.clock)
        self._regenerate()

    def set_zoom(self, zoom: Granularity | str) -> bool:
        """Switch zoom level; returns False when it was already active."""

        new_zoom = coerce_granularity(zoom)
        if new_zoom is self.zoom:
            return False
        self.zoom = new_zoom
        self.rebuild()
        return True

    def set_range(self, start: dt.date, end: dt.date) -> None:
        """Show ``start``..``end``; month zoom snaps both bounds to the 1st of their month."""

        if self.zoom is Granularity.MONTH:
            start, end = start_of_month(start), start_of_month(end)
        self.range = VisibleRange(start=start, end=end)
        self._regenerate()

    @property
    def total_width(self) -> float:
        return len(self.columns) * self.column_width

    @property
    def grid_end(self) -> dt.date:
        """Exclusive end of the last column."""
        return step(self.range.start, self.zoom, len(self.columns))

    @property
    def grid_duration(self) -> dt.timedelta:
        return self.grid_end - self.range.start

    def extend_left(self, count: int | None = None) -> int:
        """Prepend ``count`` units (default: the zoom's chunk size); returns the number of columns added."""

        before = len(self.columns)
        new_start = extend_left(self.range.start, self.zoom, get_extension_count(self.zoom) if count is None else count)
        self.range = VisibleRange(start=new_start, end=self.range.end)
        self._regenerate()
        return len(self.columns) - before

    def extend_right(self, count: int | None = None) -> int:
        """Append ``count`` units (default: the zoom's chunk size); returns the number of columns added."""

        before = len(self.columns)
        new_end = extend_right(self.range.end, self.zoom, get_extension_count(self.zoom) if count is None else count)
        self.range = VisibleRange(start=self.range.start, end=new_end)
        self._regenerate()
        return len(self.columns) - before

    def handle_scroll(self, scroll_left: float, client_width: float, scroll_width: float | None = None) -> float:
        """
        Grow the range when the viewport nears either edge and return the new scroll offset.

        Prepending columns shifts the offset by the added width so the content
        under the viewport does not move.
        """

        if scroll_width is None:
            scroll_width = self.total_width
        new_scroll_left = scroll_left

        if scroll_left < SCROLL_ACTIVATION_THRESHOLD_PX:
            previous_width = self.total_width
            self.extend_left()
            new_scroll_left += self.total_width - previous_width
            LOGGER.debug("Extended %s timeline left to %s", self.zoom.value, self.range.start)

        remaining_right = scroll_width - client_width - scroll_left
        if remaining_right < SCROLL_ACTIVATION_THRESHOLD_PX:
            self.extend_right()
            LOGGER.debug("Extended %s timeline right to %s", self.zoom.value, self.range.end)

        return new_scroll_left

    def current_column_index(self) -> int | None:
        for idx, column in enumerate(self.columns):
            if column.is_current_period:
                return idx
        return None

    def scroll_to_current(self, client_width: float) -> float | None:
        """Scroll offset that centres the current-period column, or None when it is not in range."""

        idx = self.current_column_index()
        if idx is None:
            return None
        column_left = idx * self.column_width
        target = column_left - client_width / 2 + self.column_width / 2
        return max(0.0, target)

    def date_at(self, column: Column, offset_px: float) -> dt.date:
        """Resolve a click ``offset_px`` from the left edge of ``column`` to a calendar date."""

        fraction = min(max(offset_px / self.column_width, 0.0), 1.0)
        anchor = column.date
        if self.zoom is Granularity.MONTH:
            total_days = days_in_month(anchor.year, anchor.month)
            day = min(total_days, max(1, math.floor(fraction * total_days) + 1))
            return anchor.replace(day=day)
        if self.zoom is Granularity.WEEK:
            return anchor + dt.timedelta(days=min(6, math.floor(fraction * 7)))
        return anchor

    def bar_position(self, order: WorkOrder) -> BarPosition:
        return calculate_bar_position(
            order.start_date,
            order.end_date,
            self.range.start,
            self.grid_duration,
            self.zoom,
            self.columns,
        )

    def _regenerate(self) -> None:
        self.columns = generate_columns(self.range.start, self.range.end, self.zoom, self.clock)
