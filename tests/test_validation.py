import datetime as dt

import pytest

from work_order_timeline.errors import WorkOrderValidationError
from work_order_timeline.models import WorkOrder, WorkOrderStatus
from work_order_timeline.store import WorkOrderStore
from work_order_timeline.validation import (
    DATE_ORDER,
    END_DATE_REQUIRED,
    INVALID_DATE,
    NAME_REQUIRED,
    STATUS_REQUIRED,
    WORK_CENTER_OVERLAP,
    WorkOrderDraft,
    draft_from_click,
    draft_from_order,
    submit_work_order,
    validate_work_order,
)

EXISTING = WorkOrder(
    id="wo-r",
    name="Existing",
    work_center_id="wc1",
    start_date=dt.date(2024, 3, 1),
    end_date=dt.date(2024, 3, 10),
    status=WorkOrderStatus.IN_PROGRESS,
)


@pytest.fixture()
def store():
    return WorkOrderStore(None, id_factory=lambda: "generated", seed_orders=(EXISTING,))


def _draft(**overrides):
    values = dict(
        work_center_id="wc1",
        name="New order",
        status=WorkOrderStatus.OPEN,
        start_date=dt.date(2024, 3, 10),
        end_date=dt.date(2024, 3, 15),
    )
    values.update(overrides)
    return WorkOrderDraft(**values)


def test_draft_from_click_prefills_one_open_week():
    draft = draft_from_click("wc3", dt.datetime(2024, 5, 6, 14, 0))

    assert draft.status is WorkOrderStatus.OPEN
    assert draft.start_date == dt.date(2024, 5, 6)
    assert draft.end_date == dt.date(2024, 5, 13)
    assert draft.name == ""


def test_valid_adjacent_draft_has_no_errors(store):
    assert validate_work_order(store, _draft()) == []


def test_missing_fields_are_reported(store):
    errors = validate_work_order(store, _draft(name="  ", status=None, end_date=None))

    assert errors == [NAME_REQUIRED, STATUS_REQUIRED, END_DATE_REQUIRED]


@pytest.mark.parametrize("end", [dt.date(2024, 3, 9), dt.date(2024, 3, 10)])
def test_end_must_follow_start(store, end):
    errors = validate_work_order(store, _draft(end_date=end))

    assert errors == [DATE_ORDER]


def test_unparseable_date_is_reported(store):
    assert validate_work_order(store, _draft(start_date="2024-02-30")) == [INVALID_DATE]


def test_overlap_on_same_work_center_is_reported(store):
    errors = validate_work_order(store, _draft(start_date=dt.date(2024, 3, 9)))

    assert errors == [WORK_CENTER_OVERLAP]


def test_overlap_on_other_work_center_is_allowed(store):
    assert validate_work_order(store, _draft(work_center_id="wc2", start_date=dt.date(2024, 3, 2))) == []


def test_editing_unchanged_order_does_not_conflict_with_itself(store):
    draft = draft_from_order(EXISTING)

    assert validate_work_order(store, draft, editing_order=EXISTING) == []


def test_submit_creates_new_order(store):
    created = submit_work_order(store, _draft(name="  Trimmed  "))

    assert created.id == "generated"
    assert created.name == "Trimmed"
    assert store.get_order("generated") == created


def test_submit_updates_edited_order(store):
    draft = draft_from_order(EXISTING)
    draft.end_date = dt.date(2024, 3, 12)
    draft.status = WorkOrderStatus.COMPLETED

    updated = submit_work_order(store, draft, editing_order=EXISTING)

    assert updated.id == EXISTING.id
    assert updated.end_date == dt.date(2024, 3, 12)
    assert store.get_order(EXISTING.id).status is WorkOrderStatus.COMPLETED


def test_submit_rejects_invalid_draft(store):
    with pytest.raises(WorkOrderValidationError, match=WORK_CENTER_OVERLAP):
        submit_work_order(store, _draft(start_date=dt.date(2024, 3, 1)))
    assert len(store.list_orders()) == 1


def test_submit_with_missing_fields_raises_validation_error(store):
    with pytest.raises(WorkOrderValidationError, match=STATUS_REQUIRED):
        submit_work_order(store, _draft(status=None))
    assert len(store.list_orders()) == 1
