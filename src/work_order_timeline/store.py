from __future__ import annotations

import datetime as dt
import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable
from uuid import uuid4

from .dates import DateLike, to_calendar_date
from .errors import InvalidInputError, WorkOrderNotFoundError, WorkOrderValidationError
from .models import WorkCenter, WorkOrder, WorkOrderStatus
from .overlap import has_overlap
from .parse_orders import StoreDocument, dump_document, load_document

LOGGER = logging.getLogger(__name__)

DEFAULT_WORK_CENTERS: tuple[WorkCenter, ...] = (
    WorkCenter(id="wc1", name="Genesis Hardware"),
    WorkCenter(id="wc2", name="Rodriques Electrics"),
    WorkCenter(id="wc3", name="Konsulting Inc"),
    WorkCenter(id="wc4", name="McMarrow Distribution"),
    WorkCenter(id="wc5", name="Spartan Manufacturing"),
)


def _seed(order_id: str, name: str, wc: str, start: str, end: str, status: WorkOrderStatus) -> WorkOrder:
    return WorkOrder(
        id=order_id,
        name=name,
        work_center_id=wc,
        start_date=dt.date.fromisoformat(start),
        end_date=dt.date.fromisoformat(end),
        status=status,
    )


SEED_ORDERS: tuple[WorkOrder, ...] = (
    _seed("wo1", "Intrix Ltd", "wc1", "2026-01-15", "2026-03-20", WorkOrderStatus.COMPLETED),
    _seed("wo2", "Rodriques Electrics", "wc2", "2026-09-01", "2026-12-15", WorkOrderStatus.IN_PROGRESS),
    _seed("wo3", "Konsulting Inc", "wc3", "2026-09-10", "2026-11-01", WorkOrderStatus.IN_PROGRESS),
    _seed("wo4", "Complex Systems", "wc3", "2025-11-10", "2026-02-15", WorkOrderStatus.IN_PROGRESS),
    _seed("wo5", "McMarrow Distribution", "wc4", "2025-09-20", "2026-01-25", WorkOrderStatus.BLOCKED),
    _seed("wo6", "Apex Manufacturing", "wc1", "2026-05-01", "2026-07-15", WorkOrderStatus.IN_PROGRESS),
    _seed("wo7", "Global Logistics", "wc5", "2026-02-01", "2026-04-10", WorkOrderStatus.COMPLETED),
    _seed("wo8", "Solaris Energy", "wc2", "2026-01-10", "2026-05-20", WorkOrderStatus.BLOCKED),
    _seed("wo9", "Nova Tech Solutions", "wc4", "2026-03-15", "2026-06-01", WorkOrderStatus.IN_PROGRESS),
    _seed("wo10", "Starlight Foundry", "wc5", "2026-07-20", "2026-10-30", WorkOrderStatus.IN_PROGRESS),
    _seed("wo11", "Blue Horizon Labs", "wc1", "2025-06-01", "2025-08-30", WorkOrderStatus.COMPLETED),
    _seed("wo12", "Quantum Circuits", "wc3", "2026-03-01", "2026-05-15", WorkOrderStatus.IN_PROGRESS),
    _seed("wo13", "Horizon Analytics", "wc2", "2025-11-01", "2025-12-20", WorkOrderStatus.OPEN),
    _seed("wo14", "Titan Heavy Industries", "wc4", "2026-07-10", "2026-09-05", WorkOrderStatus.OPEN),
    _seed("wo15", "Velocity Cargo", "wc5", "2026-11-15", "2027-01-10", WorkOrderStatus.OPEN),
)


class WorkOrderStore:
    """
    Resource directory plus work-order collection with durable YAML persistence.

    - ``path=None`` keeps everything in memory (nothing is written).
    - A missing file is seeded with the default work centers and orders and saved.
    - Every mutation replaces the order list and persists it.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
        seed_orders: tuple[WorkOrder, ...] = SEED_ORDERS,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.id_factory = id_factory

        if self.path is not None and self.path.exists():
            document = load_document(self.path)
            LOGGER.info("Loaded %d work orders from %s", len(document.work_orders), self.path)
        else:
            document = StoreDocument(work_centers=list(DEFAULT_WORK_CENTERS), work_orders=list(seed_orders))
            if self.path is not None:
                LOGGER.info("Store %s not found; seeding %d work orders", self.path, len(document.work_orders))
                dump_document(document, self.path)

        self._work_centers: tuple[WorkCenter, ...] = tuple(document.work_centers)
        self._orders: tuple[WorkOrder, ...] = tuple(document.work_orders)

    @property
    def work_centers(self) -> tuple[WorkCenter, ...]:
        return self._work_centers

    def get_work_center(self, work_center_id: str) -> WorkCenter:
        for center in self._work_centers:
            if center.id == work_center_id:
                return center
        raise WorkOrderValidationError(f"unknown work center '{work_center_id}'")

    def list_orders(self) -> list[WorkOrder]:
        return list(self._orders)

    def orders_for_work_center(self, work_center_id: str) -> list[WorkOrder]:
        return [order for order in self._orders if order.work_center_id == work_center_id]

    def get_order(self, order_id: str) -> WorkOrder:
        for order in self._orders:
            if order.id == order_id:
                return order
        raise WorkOrderNotFoundError(order_id)

    def has_overlap(
        self,
        work_center_id: str,
        candidate_start: DateLike,
        candidate_end: DateLike,
        exclude_order_id: str | None = None,
    ) -> bool:
        """True when the candidate span conflicts with another order on the same work center."""
        return has_overlap(
            self.orders_for_work_center(work_center_id),
            work_center_id,
            candidate_start,
            candidate_end,
            exclude_order_id,
        )

    def add_order(
        self,
        name: str,
        work_center_id: str,
        start_date: DateLike,
        end_date: DateLike,
        status: WorkOrderStatus = WorkOrderStatus.OPEN,
    ) -> WorkOrder:
        order = self._checked(
            WorkOrder(
                id=self.id_factory(),
                name=name,
                work_center_id=work_center_id,
                start_date=_as_date(start_date),
                end_date=_as_date(end_date),
                status=status,
            )
        )
        self._commit(self._orders + (order,))
        LOGGER.info("Added work order %s on %s", order.id, order.work_center_id)
        return order

    def update_order(self, updated: WorkOrder) -> WorkOrder:
        """Replace the stored order that has ``updated.id``."""

        self.get_order(updated.id)
        checked = self._checked(updated)
        self._commit(tuple(checked if order.id == checked.id else order for order in self._orders))
        LOGGER.info("Updated work order %s", checked.id)
        return checked

    def reschedule(self, order_id: str, start_date: DateLike, end_date: DateLike) -> WorkOrder:
        order = self.get_order(order_id)
        return self.update_order(replace(order, start_date=_as_date(start_date), end_date=_as_date(end_date)))

    def delete_order(self, order_id: str) -> None:
        self.get_order(order_id)
        self._commit(tuple(order for order in self._orders if order.id != order_id))
        LOGGER.info("Deleted work order %s", order_id)

    def _checked(self, order: WorkOrder) -> WorkOrder:
        if not order.name.strip():
            raise WorkOrderValidationError("work order name must not be empty")
        self.get_work_center(order.work_center_id)
        if order.end_date <= order.start_date:
            raise WorkOrderValidationError(
                f"work order '{order.id}' end_date {order.end_date} must be after start_date {order.start_date}"
            )
        return order

    def _commit(self, orders: tuple[WorkOrder, ...]) -> None:
        self._orders = orders
        if self.path is None:
            return
        dump_document(StoreDocument(work_centers=list(self._work_centers), work_orders=list(orders)), self.path)
        LOGGER.debug("Persisted %d work orders to %s", len(orders), self.path)


def _as_date(value: DateLike) -> dt.date:
    try:
        return to_calendar_date(value)
    except InvalidInputError as exc:
        raise WorkOrderValidationError(str(exc)) from exc
