from __future__ import annotations

import logging
from importlib import metadata
from pathlib import Path
from typing import Iterable, Sequence

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt
from matplotlib.patches import Patch, Rectangle

from .models import Column, TimelineRow, WorkOrderStatus

LOGGER = logging.getLogger(__name__)

STATUS_COLORS: dict[WorkOrderStatus, str] = {
    WorkOrderStatus.OPEN: "#5b8def",
    WorkOrderStatus.IN_PROGRESS: "#7b61ff",
    WorkOrderStatus.COMPLETED: "#2fb36d",
    WorkOrderStatus.BLOCKED: "#e8a33d",
}
CURRENT_PERIOD_COLOR = "#fff4c2"
FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 10 * FONT_SCALE
BAR_FONT = 8 * FONT_SCALE
TICK_FONT = 8 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
LANE_HEIGHT = 0.6
COLUMN_WIDTH_INCH = 0.9
TITLE_Y = 0.985


def render_timeline(
    rows: list[TimelineRow],
    columns: Sequence[Column],
    out_path: str,
    title: str = "",
) -> None:
    """
    Render a static SVG of the scheduling grid to `out_path`.

    - The x axis runs over 0-100 percent of the grid; bars use their precomputed positions.
    - One lane per work center row; bars sit in their work center's lane.
    - The current period column is shaded.
    """

    if not columns:
        raise ValueError("columns must not be empty")

    lanes = [row for row in rows if row.node_type == "work_center"]
    lane_count = max(1, len(lanes))
    column_count = len(columns)
    column_pct = 100.0 / column_count

    fig_width = max(10.0, min(48.0, column_count * COLUMN_WIDTH_INCH + 3.0))
    fig_height = max(3.0, lane_count * 0.8 + 2.0)
    fig = plt.figure(figsize=(fig_width, fig_height))
    gs = fig.add_gridspec(1, 2, width_ratios=[1.0, 6.0], wspace=0.02, left=0.02, right=0.99, top=0.85, bottom=0.08)
    label_ax = fig.add_subplot(gs[0, 0])
    ax = fig.add_subplot(gs[0, 1], sharey=label_ax)

    ax.set_xlim(0, 100)
    ax.set_ylim(-0.5, lane_count - 0.5)
    ax.invert_yaxis()
    ax.xaxis.tick_top()
    ax.set_xticks([(idx + 0.5) * column_pct for idx in range(column_count)])
    ax.set_xticklabels([column.label for column in columns], fontsize=TICK_FONT, rotation=45, ha="left")
    ax.tick_params(axis="x", length=0, pad=4)
    ax.set_yticks([])

    for idx, column in enumerate(columns):
        x0 = idx * column_pct
        if column.is_current_period:
            ax.add_patch(
                Rectangle((x0, -0.5), column_pct, lane_count, facecolor=CURRENT_PERIOD_COLOR, edgecolor="none", zorder=0)
            )
        ax.axvline(x0, color="#d0d0d0", linewidth=0.6, zorder=1)
    for lane in range(lane_count + 1):
        ax.axhline(lane - 0.5, color="#e4e4e4", linewidth=0.6, zorder=1)

    label_ax.set_xlim(0, 1)
    label_ax.axis("off")
    for row in lanes:
        label_ax.text(0.98, row.lane, row.name, ha="right", va="center", fontsize=LABEL_FONT, fontweight="bold")

    for row in rows:
        if row.node_type != "bar" or row.position is None:
            continue
        color = STATUS_COLORS.get(row.status, "#999999") if row.status else "#999999"
        ax.barh(
            row.lane,
            width=row.position.width,
            left=row.position.left,
            height=LANE_HEIGHT,
            color=color,
            edgecolor="black",
            linewidth=0.5,
            zorder=2,
        )
        label_x = min(max(row.position.left, 0.0), 100.0) + 0.2
        if label_x < 100.0:
            ax.text(
                label_x,
                row.lane,
                _bar_label(row),
                ha="left",
                va="center",
                fontsize=BAR_FONT,
                color="white",
                clip_on=True,
                zorder=3,
            )

    handles = [Patch(facecolor=color, edgecolor="black", label=label) for label, color in status_legend().items()]
    fig.legend(handles=handles, loc="lower left", ncol=len(handles), fontsize=FOOTER_FONT, frameon=False)

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT, y=TITLE_Y)
    footer = f"Work order timeline v{_tool_version()} · {columns[0].date} to {columns[-1].date}"
    fig.text(0.99, 0.01, footer, ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)
    LOGGER.info("Rendered %d columns and %d lanes to %s", column_count, lane_count, out_path)


def _bar_label(row: TimelineRow) -> str:
    if row.status is None:
        return row.name
    return f"{row.name} ({row.status.label})"


def status_legend(statuses: Iterable[WorkOrderStatus] = tuple(WorkOrderStatus)) -> dict[str, str]:
    """Human status label to bar colour."""
    return {status.label: STATUS_COLORS[status] for status in statuses}


def _tool_version() -> str:
    try:
        return metadata.version("work-order-timeline")
    except metadata.PackageNotFoundError:
        return "0.0.0"
