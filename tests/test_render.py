import datetime as dt

import pytest

from work_order_timeline.models import Granularity, WorkCenter, WorkOrder, WorkOrderStatus
from work_order_timeline.render_rows import to_timeline_rows
from work_order_timeline.render_timeline import render_timeline
from work_order_timeline.view import TimelineView


def test_renderer_produces_svg(tmp_path):
    view = TimelineView(Granularity.MONTH, clock=lambda: dt.date(2024, 5, 15))
    centers = [WorkCenter(id="wc1", name="Line 1"), WorkCenter(id="wc2", name="Line 2")]
    orders = [
        WorkOrder("a", "Alpha", "wc1", dt.date(2024, 4, 10), dt.date(2024, 6, 1), WorkOrderStatus.IN_PROGRESS),
        WorkOrder("b", "Beta", "wc2", dt.date(2024, 7, 1), dt.date(2024, 7, 2), WorkOrderStatus.BLOCKED),
        WorkOrder("c", "Orphan", "wc9", dt.date(2024, 7, 1), dt.date(2024, 7, 2), WorkOrderStatus.OPEN),
    ]

    rows = to_timeline_rows(centers, orders, view)
    out_file = tmp_path / "chart.svg"
    render_timeline(rows, view.columns, out_path=str(out_file), title="Work order timeline")

    assert [row.node_type for row in rows] == ["work_center", "bar", "work_center", "bar"]
    assert rows[1].lane == 0 and rows[3].lane == 1
    assert rows[3].position.width == 1.5
    assert out_file.exists()
    assert out_file.stat().st_size > 0


def test_renderer_requires_columns(tmp_path):
    with pytest.raises(ValueError):
        render_timeline([], [], out_path=str(tmp_path / "empty.svg"))
