from __future__ import annotations

from typing import Iterable, List

from .models import TimelineRow, WorkCenter, WorkOrder
from .view import TimelineView


def to_timeline_rows(
    work_centers: Iterable[WorkCenter],
    orders: Iterable[WorkOrder],
    view: TimelineView,
) -> list[TimelineRow]:
    """
    Convert work centers and their orders into a flat list of render rows.

    Each work center emits a lane heading followed by one bar row per order,
    sorted by start date. Bars share their work center's lane index. Orders on
    unknown work centers are skipped.
    """

    orders_by_center: dict[str, List[WorkOrder]] = {}
    for order in orders:
        orders_by_center.setdefault(order.work_center_id, []).append(order)

    rows: List[TimelineRow] = []
    order_idx = 0
    for lane, center in enumerate(work_centers):
        rows.append(
            TimelineRow(
                order=order_idx,
                node_type="work_center",
                node_id=center.id,
                name=center.name,
                work_center_id=center.id,
                lane=lane,
            )
        )
        order_idx += 1
        for work_order in sorted(orders_by_center.get(center.id, []), key=lambda o: (o.start_date, o.id)):
            rows.append(
                TimelineRow(
                    order=order_idx,
                    node_type="bar",
                    node_id=work_order.id,
                    name=work_order.name,
                    work_center_id=center.id,
                    lane=lane,
                    status=work_order.status,
                    start_date=work_order.start_date,
                    end_date=work_order.end_date,
                    position=view.bar_position(work_order),
                )
            )
            order_idx += 1

    return rows
