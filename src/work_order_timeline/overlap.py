from __future__ import annotations

from typing import Iterable

from .dates import DateLike, to_calendar_date
from .models import WorkOrder


def intervals_overlap(start_a: DateLike, end_a: DateLike, start_b: DateLike, end_b: DateLike) -> bool:
    """Half-open intersection test: [a) and [b) overlap; touching ends do not."""

    return to_calendar_date(start_a) < to_calendar_date(end_b) and to_calendar_date(end_a) > to_calendar_date(start_b)


def has_overlap(
    orders: Iterable[WorkOrder],
    work_center_id: str,
    candidate_start: DateLike,
    candidate_end: DateLike,
    exclude_order_id: str | None = None,
) -> bool:
    """
    Return True when the candidate span collides with any order on ``work_center_id``.

    The order whose id equals ``exclude_order_id`` is skipped so an order can be
    re-validated while it is being edited. Stops at the first conflict.
    """

    start = to_calendar_date(candidate_start)
    end = to_calendar_date(candidate_end)
    return any(
        intervals_overlap(start, end, existing.start_date, existing.end_date)
        for existing in orders
        if existing.work_center_id == work_center_id
        and not (exclude_order_id is not None and existing.id == exclude_order_id)
    )


def find_conflicts(orders: Iterable[WorkOrder], candidate: WorkOrder) -> list[WorkOrder]:
    """Every order on the candidate's work center that overlaps it, excluding the candidate itself."""

    return [
        existing
        for existing in orders
        if existing.work_center_id == candidate.work_center_id
        and existing.id != candidate.id
        and intervals_overlap(candidate.start_date, candidate.end_date, existing.start_date, existing.end_date)
    ]
