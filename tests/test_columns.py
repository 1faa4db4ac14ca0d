import dataclasses
import datetime as dt

import pytest

from work_order_timeline.columns import (
    extend_left,
    extend_right,
    generate_columns,
    get_extension_count,
    get_initial_range,
    step,
)
from work_order_timeline.errors import InvalidInputError
from work_order_timeline.models import Granularity


def _fixed(day: dt.date):
    return lambda: day


def test_month_columns_are_labelled_by_month_and_year():
    columns = generate_columns(dt.date(2024, 1, 1), dt.date(2024, 12, 1), Granularity.MONTH, clock=_fixed(dt.date(2030, 1, 1)))

    assert len(columns) == 12
    assert columns[0].label == "Jan 2024"
    assert columns[-1].label == "Dec 2024"
    assert [c.date.month for c in columns] == list(range(1, 13))


def test_day_columns_cross_month_boundary():
    columns = generate_columns(dt.date(2024, 1, 30), dt.date(2024, 2, 2), "day", clock=_fixed(dt.date(2030, 1, 1)))

    assert [c.label for c in columns] == ["Jan 30", "Jan 31", "Feb 1", "Feb 2"]


def test_week_label_spans_anchor_plus_six_days():
    columns = generate_columns(dt.date(2024, 1, 29), dt.date(2024, 2, 26), Granularity.WEEK, clock=_fixed(dt.date(2030, 1, 1)))

    assert [c.date for c in columns] == [
        dt.date(2024, 1, 29),
        dt.date(2024, 2, 5),
        dt.date(2024, 2, 12),
        dt.date(2024, 2, 19),
        dt.date(2024, 2, 26),
    ]
    assert columns[0].label == "Jan 29 - 4"
    assert columns[1].label == "Feb 5 - 11"


@pytest.mark.parametrize(
    "granularity, start, end",
    [
        (Granularity.DAY, dt.date(2024, 2, 20), dt.date(2024, 3, 5)),
        (Granularity.WEEK, dt.date(2024, 1, 1), dt.date(2024, 1, 20)),
        (Granularity.MONTH, dt.date(2023, 11, 1), dt.date(2024, 6, 15)),
    ],
)
def test_columns_step_exactly_once_and_stop_at_range_end(granularity, start, end):
    columns = generate_columns(start, end, granularity, clock=_fixed(dt.date(2030, 1, 1)))
    dates = [c.date for c in columns]

    assert dates[0] == start
    for previous, current in zip(dates, dates[1:]):
        assert current == step(previous, granularity, 1)
    assert dates[-1] <= end < step(dates[-1], granularity, 1)


def test_month_columns_keep_day_of_month_after_short_month():
    columns = generate_columns(dt.date(2024, 1, 31), dt.date(2024, 4, 30), Granularity.MONTH, clock=_fixed(dt.date(2030, 1, 1)))

    assert [c.date for c in columns] == [
        dt.date(2024, 1, 31),
        dt.date(2024, 2, 29),
        dt.date(2024, 3, 31),
        dt.date(2024, 4, 30),
    ]


def test_current_week_includes_days_after_the_anchor():
    monday = dt.date(2024, 3, 4)

    inside = generate_columns(monday, monday, Granularity.WEEK, clock=_fixed(monday + dt.timedelta(days=3)))
    before = generate_columns(monday, monday, Granularity.WEEK, clock=_fixed(monday - dt.timedelta(days=1)))

    assert inside[0].is_current_period is True
    assert before[0].is_current_period is False


def test_current_week_includes_last_day_late_in_the_evening():
    monday = dt.date(2024, 3, 4)

    columns = generate_columns(monday, monday, Granularity.WEEK, clock=lambda: dt.datetime(2024, 3, 10, 23, 59))

    assert columns[0].is_current_period is True


def test_only_the_current_month_is_flagged():
    columns = generate_columns(dt.date(2024, 1, 1), dt.date(2024, 12, 1), Granularity.MONTH, clock=_fixed(dt.date(2024, 5, 20)))

    flagged = [c.label for c in columns if c.is_current_period]
    assert flagged == ["May 2024"]


def test_current_day_uses_calendar_date_equality():
    columns = generate_columns(dt.date(2024, 5, 18), dt.date(2024, 5, 22), Granularity.DAY, clock=_fixed(dt.date(2024, 5, 20)))

    assert [c.is_current_period for c in columns] == [False, False, True, False, False]


def test_generation_is_restartable_and_returns_fresh_lists():
    args = (dt.date(2024, 1, 1), dt.date(2024, 3, 1), Granularity.MONTH)
    first = generate_columns(*args, clock=_fixed(dt.date(2024, 2, 2)))
    second = generate_columns(*args, clock=_fixed(dt.date(2024, 2, 2)))

    assert first == second
    assert first is not second


def test_columns_are_immutable():
    column = generate_columns(dt.date(2024, 1, 1), dt.date(2024, 1, 1), Granularity.DAY)[0]

    with pytest.raises(dataclasses.FrozenInstanceError):
        column.label = "changed"


def test_reversed_range_is_rejected():
    with pytest.raises(InvalidInputError):
        generate_columns(dt.date(2024, 2, 1), dt.date(2024, 1, 1), Granularity.DAY)


def test_unknown_granularity_is_rejected():
    with pytest.raises(InvalidInputError):
        generate_columns(dt.date(2024, 1, 1), dt.date(2024, 2, 1), "year")


def test_malformed_date_is_rejected():
    with pytest.raises(InvalidInputError):
        generate_columns("2024-13-01", dt.date(2024, 2, 1), Granularity.DAY)


@pytest.mark.parametrize("granularity", [Granularity.DAY, Granularity.WEEK])
def test_day_and_week_extension_round_trips(granularity):
    origin = dt.date(2024, 1, 31)

    assert extend_left(extend_right(origin, granularity, 5), granularity, 5) == origin
    assert extend_right(extend_left(origin, granularity, 5), granularity, 5) == origin


def test_week_extension_moves_by_whole_weeks():
    assert extend_right(dt.date(2024, 1, 1), Granularity.WEEK, 2) == dt.date(2024, 1, 15)
    assert extend_left(dt.date(2024, 1, 1), Granularity.WEEK, 1) == dt.date(2023, 12, 25)


def test_month_extension_round_trips_for_early_days():
    origin = dt.date(2024, 3, 15)

    assert extend_left(extend_right(origin, Granularity.MONTH, 7), Granularity.MONTH, 7) == origin


def test_month_extension_clamps_at_month_end():
    forward = extend_right(dt.date(2024, 1, 31), Granularity.MONTH, 1)
    back = extend_left(forward, Granularity.MONTH, 1)

    assert forward == dt.date(2024, 2, 29)
    assert back == dt.date(2024, 1, 29)
    assert extend_left(dt.date(2024, 3, 31), Granularity.MONTH, 1) == dt.date(2024, 2, 29)
    assert extend_right(dt.date(2023, 1, 31), Granularity.MONTH, 1) == dt.date(2023, 2, 28)


def test_month_extension_crosses_years():
    assert extend_left(dt.date(2024, 2, 1), Granularity.MONTH, 6) == dt.date(2023, 8, 1)
    assert extend_right(dt.date(2024, 11, 1), Granularity.MONTH, 3) == dt.date(2025, 2, 1)


def test_extension_rejects_negative_count():
    with pytest.raises(InvalidInputError):
        extend_right(dt.date(2024, 1, 1), Granularity.DAY, -1)


def test_initial_month_range_is_anchored_on_the_first():
    today = dt.date(2024, 5, 15)

    visible = get_initial_range(Granularity.MONTH, clock=_fixed(today))

    assert visible.start == dt.date(2023, 5, 1)
    assert visible.end == dt.date(2025, 5, 1)


def test_initial_week_range_is_aligned_to_mondays():
    today = dt.date(2024, 5, 15)  # a Wednesday

    visible = get_initial_range(Granularity.WEEK, clock=_fixed(today))

    assert visible.start.weekday() == 0
    assert (visible.end - visible.start).days % 7 == 0
    assert visible.start < today < visible.end


def test_initial_day_range_is_centred_on_today():
    today = dt.date(2024, 5, 15)

    visible = get_initial_range(Granularity.DAY, clock=_fixed(today))

    assert visible.start == today - dt.timedelta(days=90)
    assert visible.end == today + dt.timedelta(days=90)


@pytest.mark.parametrize("granularity", list(Granularity))
def test_initial_range_contains_exactly_one_current_column(granularity):
    today = dt.date(2024, 5, 15)
    visible = get_initial_range(granularity, clock=_fixed(today))

    columns = generate_columns(visible.start, visible.end, granularity, clock=_fixed(today))

    assert visible.start < today < visible.end
    assert columns[-1].date == visible.end
    assert sum(1 for c in columns if c.is_current_period) == 1


def test_extension_counts_are_positive_and_finer_zooms_load_more():
    counts = {g: get_extension_count(g) for g in Granularity}

    assert all(count > 0 for count in counts.values())
    assert counts[Granularity.DAY] > counts[Granularity.WEEK] > counts[Granularity.MONTH]
    assert get_extension_count("month") == 6
