from __future__ import annotations

import argparse
import datetime as dt
import logging
import sys
import webbrowser
from dataclasses import replace
from pathlib import Path

import yaml

from .config import ConfigError, load_env_file, load_settings
from .errors import InvalidInputError, WorkOrderNotFoundError, WorkOrderValidationError
from .logging_conf import configure_logging
from .models import Granularity, WorkOrder
from .overlap import find_conflicts
from .parse_orders import parse_status
from .render_rows import to_timeline_rows
from .render_timeline import render_timeline
from .store import WorkOrderStore
from .validation import DEFAULT_NEW_ORDER_DAYS, WorkOrderDraft, draft_from_order, submit_work_order
from .view import TimelineView

LOGGER = logging.getLogger(__name__)


def _parse_date(value: str):
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _zoom(value: str) -> Granularity:
    try:
        return Granularity(value.lower())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid zoom '{value}', expected day, week or month") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="work-order-timeline",
        description="Work order scheduling timeline",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--env-file", type=Path, default=None, help="Optional .env file loaded before settings")
    parser.add_argument("--store", type=Path, default=None, help="Work order YAML store (overrides environment)")
    parser.add_argument("--log-level", default=None, help="Log level name (overrides environment)")
    commands = parser.add_subparsers(dest="command", required=True)

    columns = commands.add_parser("columns", help="Print the grid columns for a zoom level")
    _add_range_args(columns)

    render = commands.add_parser("render", help="Render the timeline grid to SVG")
    _add_range_args(render)
    render.add_argument("--out", default="output/timeline.svg", help="Output SVG path")
    render.add_argument("--title", default="Work Orders", help="Chart title")
    render.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=False,
        help="Best-effort open the output file after rendering",
    )

    orders = commands.add_parser("orders", help="Manage work orders")
    order_commands = orders.add_subparsers(dest="order_command", required=True)

    listing = order_commands.add_parser("list", help="List work orders")
    listing.add_argument("--work-center", help="Only orders on this work center id")

    add = order_commands.add_parser("add", help="Create a work order")
    add.add_argument("--work-center", required=True, help="Work center id")
    add.add_argument("--name", required=True, help="Order name")
    add.add_argument("--start", type=_parse_date, required=True, help="Start date (YYYY-MM-DD)")
    add.add_argument("--end", type=_parse_date, default=None, help="End date (YYYY-MM-DD); defaults to start + 7 days")
    add.add_argument("--status", default="open", help="open, in-progress, completed or blocked")

    update = order_commands.add_parser("update", help="Edit a work order")
    update.add_argument("order_id", help="Work order id")
    update.add_argument("--name", help="New name")
    update.add_argument("--start", type=_parse_date, help="New start date (YYYY-MM-DD)")
    update.add_argument("--end", type=_parse_date, help="New end date (YYYY-MM-DD)")
    update.add_argument("--status", help="New status")

    delete = order_commands.add_parser("delete", help="Delete a work order")
    delete.add_argument("order_id", help="Work order id")

    check = commands.add_parser("check", help="Check a candidate span, or the whole store, for conflicts")
    check.add_argument("--work-center", help="Work center id of the candidate")
    check.add_argument("--start", type=_parse_date, help="Candidate start date (YYYY-MM-DD)")
    check.add_argument("--end", type=_parse_date, help="Candidate end date (YYYY-MM-DD)")
    check.add_argument("--exclude", help="Order id to ignore (the order being edited)")
    return parser


def _add_range_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--zoom", type=_zoom, default=None, help="day, week or month (overrides environment)")
    parser.add_argument("--start", type=_parse_date, help="Override the initial range start (YYYY-MM-DD)")
    parser.add_argument("--end", type=_parse_date, help="Override the initial range end (YYYY-MM-DD)")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        load_env_file(args.env_file)
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    configure_logging(args.log_level or settings.log_level)

    if args.command == "columns":
        try:
            return _cmd_columns(args, settings.zoom, settings.column_width)
        except InvalidInputError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2

    store_path = args.store or settings.store_path
    try:
        store = WorkOrderStore(store_path)
    except (yaml.YAMLError, WorkOrderValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading store {store_path}: {exc}", file=sys.stderr)
        return 1

    try:
        if args.command == "render":
            return _cmd_render(args, store, settings.zoom, settings.column_width)
        if args.command == "orders":
            return _cmd_orders(args, store)
        if args.command == "check":
            return _cmd_check(args, store)
    except (InvalidInputError, WorkOrderValidationError, WorkOrderNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        LOGGER.exception("Unexpected error while running %s", args.command)
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return 1

    parser.error(f"unknown command {args.command!r}")
    return 2  # pragma: no cover


def _build_view(args: argparse.Namespace, default_zoom: Granularity, column_width: float) -> TimelineView:
    view = TimelineView(args.zoom or default_zoom, column_width=column_width)
    if args.start or args.end:
        if not (args.start and args.end):
            raise InvalidInputError("--start and --end must be given together")
        view.set_range(args.start, args.end)
    return view


def _cmd_columns(args: argparse.Namespace, default_zoom: Granularity, column_width: float) -> int:
    view = _build_view(args, default_zoom, column_width)
    for column in view.columns:
        marker = " *" if column.is_current_period else ""
        print(f"{column.date.isoformat()}\t{column.label}{marker}")
    return 0


def _cmd_render(args: argparse.Namespace, store: WorkOrderStore, default_zoom: Granularity, column_width: float) -> int:
    view = _build_view(args, default_zoom, column_width)
    rows = to_timeline_rows(store.work_centers, store.list_orders(), view)
    render_timeline(rows, view.columns, out_path=args.out, title=args.title)
    print(f"Wrote {args.out}")

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except webbrowser.Error:
            LOGGER.warning("Could not open %s in a browser", args.out)
    return 0


def _cmd_orders(args: argparse.Namespace, store: WorkOrderStore) -> int:
    if args.order_command == "list":
        orders = store.orders_for_work_center(args.work_center) if args.work_center else store.list_orders()
        for order in sorted(orders, key=lambda o: (o.work_center_id, o.start_date, o.id)):
            print(_format_order(order))
        return 0

    if args.order_command == "add":
        store.get_work_center(args.work_center)
        draft = WorkOrderDraft(
            work_center_id=args.work_center,
            name=args.name,
            status=parse_status(args.status, "--status"),
            start_date=args.start,
            end_date=args.end or args.start + dt.timedelta(days=DEFAULT_NEW_ORDER_DAYS),
        )
        created = submit_work_order(store, draft)
        print(_format_order(created))
        return 0

    if args.order_command == "update":
        existing = store.get_order(args.order_id)
        draft = draft_from_order(existing)
        if args.name is not None:
            draft = replace(draft, name=args.name)
        if args.status is not None:
            draft = replace(draft, status=parse_status(args.status, "--status"))
        if args.start is not None:
            draft = replace(draft, start_date=args.start)
        if args.end is not None:
            draft = replace(draft, end_date=args.end)
        updated = submit_work_order(store, draft, editing_order=existing)
        print(_format_order(updated))
        return 0

    if args.order_command == "delete":
        store.delete_order(args.order_id)
        print(f"Deleted {args.order_id}")
        return 0

    raise InvalidInputError(f"unknown orders command {args.order_command!r}")


def _cmd_check(args: argparse.Namespace, store: WorkOrderStore) -> int:
    candidate_args = (args.work_center, args.start, args.end)
    if any(value is not None for value in candidate_args):
        if not all(value is not None for value in candidate_args):
            raise InvalidInputError("--work-center, --start and --end must be given together")
        store.get_work_center(args.work_center)
        if store.has_overlap(args.work_center, args.start, args.end, args.exclude):
            print(f"Conflict: {args.start} to {args.end} overlaps an order on {args.work_center}")
            return 2
        print(f"OK: {args.start} to {args.end} is free on {args.work_center}")
        return 0

    orders = store.list_orders()
    conflicts = 0
    for order in orders:
        for other in find_conflicts(orders, order):
            # Each pair is found from both sides; report it once.
            if order.id < other.id:
                print(f"Conflict: {order.id} overlaps {other.id} on {order.work_center_id}")
                conflicts += 1
    if conflicts:
        return 2
    print("OK: no conflicting work orders")
    return 0


def _format_order(order: WorkOrder) -> str:
    return "\t".join(
        [
            order.id,
            order.work_center_id,
            order.start_date.isoformat(),
            order.end_date.isoformat(),
            order.status.label,
            order.name,
        ]
    )


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
