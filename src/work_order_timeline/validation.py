"""Create/edit rules applied to work-order drafts before they reach the store."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import cast

from .dates import DateLike, to_calendar_date
from .errors import InvalidInputError, WorkOrderValidationError
from .models import WorkOrder, WorkOrderStatus
from .store import WorkOrderStore

NAME_REQUIRED = "name_required"
STATUS_REQUIRED = "status_required"
START_DATE_REQUIRED = "start_date_required"
END_DATE_REQUIRED = "end_date_required"
INVALID_DATE = "invalid_date"
DATE_ORDER = "date_order"
WORK_CENTER_OVERLAP = "work_center_overlap"

# Span pre-filled for an order created by clicking an empty grid cell.
DEFAULT_NEW_ORDER_DAYS = 7


@dataclass
class WorkOrderDraft:
    """Editable form state; any field may still be missing."""

    work_center_id: str
    name: str = ""
    status: WorkOrderStatus | None = None
    start_date: DateLike | None = None
    end_date: DateLike | None = None


def draft_from_click(work_center_id: str, clicked: DateLike) -> WorkOrderDraft:
    """New-order form pre-filled from a clicked date: open status, one week long."""

    start = to_calendar_date(clicked)
    return WorkOrderDraft(
        work_center_id=work_center_id,
        status=WorkOrderStatus.OPEN,
        start_date=start,
        end_date=start + dt.timedelta(days=DEFAULT_NEW_ORDER_DAYS),
    )


def draft_from_order(order: WorkOrder) -> WorkOrderDraft:
    return WorkOrderDraft(
        work_center_id=order.work_center_id,
        name=order.name,
        status=order.status,
        start_date=order.start_date,
        end_date=order.end_date,
    )


def validate_work_order(
    store: WorkOrderStore,
    draft: WorkOrderDraft,
    editing_order: WorkOrder | None = None,
) -> list[str]:
    """
    Return the error codes for ``draft``; an empty list means it may be saved.

    When editing, the order keeps its own work center and is excluded from the
    overlap check so unchanged bounds never conflict with themselves.
    """

    errors: list[str] = []
    if not draft.name or not draft.name.strip():
        errors.append(NAME_REQUIRED)
    if draft.status is None:
        errors.append(STATUS_REQUIRED)

    start = _optional_date(draft.start_date, START_DATE_REQUIRED, errors)
    end = _optional_date(draft.end_date, END_DATE_REQUIRED, errors)
    if start is None or end is None:
        return errors

    if end <= start:
        errors.append(DATE_ORDER)
        return errors

    work_center_id = editing_order.work_center_id if editing_order else draft.work_center_id
    exclude_id = editing_order.id if editing_order else None
    if store.has_overlap(work_center_id, start, end, exclude_id):
        errors.append(WORK_CENTER_OVERLAP)
    return errors


def submit_work_order(
    store: WorkOrderStore,
    draft: WorkOrderDraft,
    editing_order: WorkOrder | None = None,
) -> WorkOrder:
    """Validate ``draft`` and add or update it in ``store``."""

    errors = validate_work_order(store, draft, editing_order)
    if errors:
        raise WorkOrderValidationError(f"work order rejected: {', '.join(errors)}")

    status = cast(WorkOrderStatus, draft.status)
    start = to_calendar_date(cast(DateLike, draft.start_date))
    end = to_calendar_date(cast(DateLike, draft.end_date))

    if editing_order is None:
        return store.add_order(draft.name.strip(), draft.work_center_id, start, end, status)
    return store.update_order(
        replace(editing_order, name=draft.name.strip(), status=status, start_date=start, end_date=end)
    )


def _optional_date(value: DateLike | None, missing_code: str, errors: list[str]) -> dt.date | None:
    if value is None or value == "":
        errors.append(missing_code)
        return None
    try:
        return to_calendar_date(value)
    except InvalidInputError:
        errors.append(INVALID_DATE)
        return None
