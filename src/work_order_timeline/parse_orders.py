from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import WorkOrderValidationError
from .models import WorkCenter, WorkOrder, WorkOrderStatus


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like work_orders[0].start_date."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


@dataclass
class StoreDocument:
    """Parsed contents of a work-order store file."""

    work_centers: list[WorkCenter]
    work_orders: list[WorkOrder]


def load_document(path: str | Path) -> StoreDocument:
    """Load work centers and work orders from a YAML file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_document(raw)


def parse_document(data: Any) -> StoreDocument:
    path = _Path()
    if not isinstance(data, dict):
        raise WorkOrderValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"work_centers", "work_orders"}, path)

    centers_raw = _require_list(data, "work_centers", path)
    center_ids: set[str] = set()
    work_centers: list[WorkCenter] = []
    for idx, center_raw in enumerate(centers_raw):
        work_centers.append(_parse_work_center(center_raw, path.child(f"work_centers[{idx}]"), center_ids))

    orders_raw = data.get("work_orders")
    if orders_raw is None:
        orders_raw = []
    if not isinstance(orders_raw, list):
        raise WorkOrderValidationError(f"{path.child('work_orders')}: expected list")

    order_ids: set[str] = set()
    work_orders: list[WorkOrder] = []
    for idx, order_raw in enumerate(orders_raw):
        work_orders.append(_parse_work_order(order_raw, path.child(f"work_orders[{idx}]"), order_ids, center_ids))

    return StoreDocument(work_centers=work_centers, work_orders=work_orders)


def dump_document(document: StoreDocument, path: str | Path) -> None:
    """Write ``document`` as YAML, creating parent directories as needed."""

    raw = {
        "work_centers": [{"id": wc.id, "name": wc.name} for wc in document.work_centers],
        "work_orders": [_order_to_raw(order) for order in document.work_orders],
    }
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as fh:
        yaml.safe_dump(raw, fh, sort_keys=False, allow_unicode=True)


def _order_to_raw(order: WorkOrder) -> dict[str, Any]:
    return {
        "id": order.id,
        "name": order.name,
        "work_center_id": order.work_center_id,
        "start_date": order.start_date.isoformat(),
        "end_date": order.end_date.isoformat(),
        "status": order.status.value,
    }


def _parse_work_center(data: Any, path: _Path, ids: set[str]) -> WorkCenter:
    if not isinstance(data, dict):
        raise WorkOrderValidationError(f"{path}: expected mapping for work center")

    _assert_allowed_keys(data, {"id", "name"}, path)
    center_id = _require_str(data, "id", path)
    _register_id(center_id, path.child("id"), ids, "work center")
    name = _require_str(data, "name", path)
    return WorkCenter(id=center_id, name=name)


def _parse_work_order(data: Any, path: _Path, ids: set[str], center_ids: set[str]) -> WorkOrder:
    if not isinstance(data, dict):
        raise WorkOrderValidationError(f"{path}: expected mapping for work order")

    _assert_allowed_keys(data, {"id", "name", "work_center_id", "start_date", "end_date", "status"}, path)
    order_id = _require_str(data, "id", path)
    _register_id(order_id, path.child("id"), ids, "work order")
    name = _require_str(data, "name", path)

    work_center_id = _require_str(data, "work_center_id", path)
    if work_center_id not in center_ids:
        raise WorkOrderValidationError(f"{path.child('work_center_id')}: unknown work center '{work_center_id}'")

    start_date = parse_date(_require_value(data, "start_date", path), path.child("start_date"))
    end_date = parse_date(_require_value(data, "end_date", path), path.child("end_date"))
    if end_date <= start_date:
        raise WorkOrderValidationError(f"{path}: end_date {end_date} must be after start_date {start_date}")

    status = parse_status(_require_value(data, "status", path), path.child("status"))

    return WorkOrder(
        id=order_id,
        name=name,
        work_center_id=work_center_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )


def parse_date(value: Any, path: _Path | str = _Path()) -> _dt.date:
    # PyYAML already turns unquoted ISO dates into date objects.
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if not isinstance(value, str):
        raise WorkOrderValidationError(f"{path}: expected YYYY-MM-DD string")
    try:
        parsed = _dt.date.fromisoformat(value.strip())
    except ValueError as exc:
        raise WorkOrderValidationError(f"{path}: expected YYYY-MM-DD string") from exc
    return parsed


def parse_status(value: Any, path: _Path | str = _Path()) -> WorkOrderStatus:
    if isinstance(value, WorkOrderStatus):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
        try:
            return WorkOrderStatus(normalized)
        except ValueError:
            pass
    allowed = ", ".join(status.value for status in WorkOrderStatus)
    raise WorkOrderValidationError(f"{path}: expected one of {allowed}")


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(set(data.keys()) - allowed)
    if extras:
        raise WorkOrderValidationError(f"{path}: unexpected fields {extras}")


def _require_list(data: dict[str, Any], key: str, path: _Path) -> list[Any]:
    value = _require_value(data, key, path)
    if not isinstance(value, list):
        raise WorkOrderValidationError(f"{path.child(key)}: expected list")
    return value


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    if not isinstance(value, str) or not value.strip():
        raise WorkOrderValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise WorkOrderValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _register_id(value: str, path: _Path, ids: set[str], kind: str) -> None:
    if value in ids:
        raise WorkOrderValidationError(f"{path}: duplicate {kind} id '{value}'")
    ids.add(value)
