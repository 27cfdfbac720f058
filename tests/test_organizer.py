# tests/test_organizer.py

from __future__ import annotations

from datetime import date

import pytest

from weekboard.board.organizer import (
    WORK_WEEKDAYS,
    BoardFilters,
    organize,
    suggest_kinds,
)
from weekboard.board.week import dates_of_week
from weekboard.tasks.task_models import TaskStatus

from .fakes import make_task

WEEK_3 = dates_of_week(3, 2024)  # Mon 2024-01-15 .. Sun 2024-01-21


def _ids(cards) -> list[int]:
    return [c.id for c in cards]


def test_one_bucket_per_viewed_date() -> None:
    buckets = organize([], WEEK_3)
    assert list(buckets.days) == WEEK_3
    assert buckets.unassigned == []


def test_backlog_and_in_week_tasks() -> None:
    snapshot = [
        make_task(1, "no date"),
        make_task(2, "monday", assigned="2024-01-15"),
        make_task(3, "sunday", assigned="2024-01-21"),
    ]
    buckets = organize(snapshot, WEEK_3)

    assert _ids(buckets.unassigned) == [1]
    assert _ids(buckets.days[date(2024, 1, 15)]) == [2]
    assert _ids(buckets.days[date(2024, 1, 21)]) == [3]
    card = buckets.days[date(2024, 1, 15)][0]
    assert card.is_rollover is False
    assert card.original_date is None


def test_past_tuesday_rolls_over_onto_this_tuesday() -> None:
    task = make_task(7, "overdue", assigned="2024-01-02")
    buckets = organize([task], WEEK_3)

    cards = buckets.days[date(2024, 1, 16)]
    assert _ids(cards) == [7]
    assert cards[0].is_rollover is True
    assert cards[0].original_date == date(2024, 1, 2)
    # The stored task itself is untouched.
    assert cards[0].task.assigned_date == date(2024, 1, 2)
    assert buckets.find(7) == date(2024, 1, 16)


@pytest.mark.parametrize("status", [TaskStatus.COMPLETED, TaskStatus.CANCELLED])
def test_finished_tasks_never_on_board(status: TaskStatus) -> None:
    snapshot = [
        make_task(1, "backlog", status=status, completed="2024-01-10"),
        make_task(2, "this week", status=status, assigned="2024-01-16", completed="2024-01-16"),
        make_task(3, "past", status=status, assigned="2024-01-02", completed="2024-01-03"),
    ]
    buckets = organize(snapshot, WEEK_3)
    assert buckets.card_count() == 0


@pytest.mark.parametrize("status", [TaskStatus.IN_PROGRESS, TaskStatus.ON_HOLD])
def test_unfinished_statuses_roll_over(status: TaskStatus) -> None:
    buckets = organize([make_task(1, status=status, assigned="2023-12-29")], WEEK_3)
    # 2023-12-29 is a Friday.
    assert _ids(buckets.days[date(2024, 1, 19)]) == [1]


def test_future_tasks_are_not_shown() -> None:
    buckets = organize([make_task(1, assigned="2024-01-22")], WEEK_3)
    assert buckets.card_count() == 0


def test_rollovers_from_different_weeks_share_a_day_in_snapshot_order() -> None:
    snapshot = [
        make_task(1, "b", assigned="2024-01-09"),  # Tue, week 2
        make_task(2, "in week", assigned="2024-01-16"),
        make_task(3, "a", assigned="2023-11-14"),  # Tue, long ago
    ]
    buckets = organize(snapshot, WEEK_3)
    cards = buckets.days[date(2024, 1, 16)]
    assert _ids(cards) == [1, 2, 3]
    assert [c.is_rollover for c in cards] == [True, False, True]


def test_search_is_case_insensitive_substring_of_title() -> None:
    snapshot = [make_task(1, "Weekly REPORT"), make_task(2, "groceries")]
    buckets = organize(snapshot, WEEK_3, BoardFilters(search="report"))
    assert _ids(buckets.unassigned) == [1]


def test_search_and_status_filters_compose() -> None:
    snapshot = [
        make_task(1, "Report draft", status=TaskStatus.NOT_STARTED, assigned="2024-01-17"),
        make_task(2, "Weekly report", status=TaskStatus.IN_PROGRESS, assigned="2024-01-17"),
    ]
    flt = BoardFilters(search="report", status=TaskStatus.IN_PROGRESS)
    buckets = organize(snapshot, WEEK_3, flt)
    assert _ids(buckets.days[date(2024, 1, 17)]) == [2]


def test_status_filter_applies_to_rollovers() -> None:
    snapshot = [
        make_task(1, status=TaskStatus.ON_HOLD, assigned="2024-01-03"),
        make_task(2, status=TaskStatus.NOT_STARTED, assigned="2024-01-03"),
    ]
    buckets = organize(snapshot, WEEK_3, BoardFilters(status=TaskStatus.ON_HOLD))
    assert _ids(buckets.days[date(2024, 1, 17)]) == [1]


def test_hidden_weekend_gets_no_rollover() -> None:
    snapshot = [
        make_task(1, "saturday chore", assigned="2024-01-06"),
        make_task(2, "monday", assigned="2024-01-08"),
        make_task(3, "sunday in week", assigned="2024-01-21"),
    ]
    buckets = organize(snapshot, WEEK_3, visible_weekdays=WORK_WEEKDAYS)

    assert list(buckets.days) == WEEK_3[:5]
    assert _ids(buckets.days[date(2024, 1, 15)]) == [2]
    assert buckets.find(1) is None
    assert buckets.find(3) is None


def test_requires_seven_dates() -> None:
    with pytest.raises(ValueError):
        organize([], WEEK_3[:5])


def test_suggest_kinds_defaults_first_then_used_labels() -> None:
    snapshot = [make_task(1, kind="work"), make_task(2, kind="Gym"), make_task(3, kind="")]
    assert suggest_kinds(snapshot, ["Work", "Personal"]) == ["Work", "Personal", "Gym"]
