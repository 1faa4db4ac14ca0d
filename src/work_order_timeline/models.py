from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Literal


class Granularity(str, Enum):
    """Zoom level of the timeline; selects column stepping, labels and layout mode."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class WorkOrderStatus(str, Enum):
    """Lifecycle state of a work order; drives bar colour and label."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    WorkOrderStatus.OPEN: "Open",
    WorkOrderStatus.IN_PROGRESS: "In progress",
    WorkOrderStatus.COMPLETED: "Completed",
    WorkOrderStatus.BLOCKED: "Blocked",
}


RowKind = Literal["work_center", "bar"]
"""Allowed render row types: work center lane heading, bar (work order)."""


@dataclass(frozen=True)
class Column:
    """One grid cell of the timeline header, anchored on its first day."""

    label: str
    date: date
    is_current_period: bool = False


@dataclass(frozen=True)
class BarPosition:
    """Horizontal placement of a bar as percentages of the grid width."""

    left: float
    width: float


@dataclass(frozen=True)
class VisibleRange:
    """Inclusive date window currently covered by the grid columns."""

    start: date
    end: date


@dataclass(frozen=True)
class WorkCenter:
    """Resource that work orders are scheduled against."""

    id: str
    name: str


@dataclass(frozen=True)
class WorkOrder:
    """
    Scheduled interval on a single work center.

    Bounds are calendar dates treated as the half-open span [start_date, end_date).
    """

    id: str
    name: str
    work_center_id: str
    start_date: date
    end_date: date
    status: WorkOrderStatus = WorkOrderStatus.OPEN

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days


@dataclass
class TimelineRow:
    """
    Flattened view of the schedule used by renderers.

    Only the fields relevant to drawing are kept: positional order, row kind,
    owning work center, and the bar placement for work orders.
    """

    order: int
    node_type: RowKind
    node_id: str
    name: str
    work_center_id: str
    lane: int
    status: WorkOrderStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    position: BarPosition | None = None
