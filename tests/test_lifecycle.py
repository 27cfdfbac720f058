# tests/test_lifecycle.py

from __future__ import annotations

from datetime import date
from itertools import permutations

import pytest

from weekboard.board.lifecycle import change_status, initial_fields, transition_fields
from weekboard.core.clock import FixedClock
from weekboard.tasks.task_models import TaskStatus

from .fakes import FakeTaskRepo, make_task

TODAY = date(2024, 1, 17)


def test_initial_state() -> None:
    assert initial_fields() == {"status": TaskStatus.NOT_STARTED, "completion_date": None}


@pytest.mark.parametrize(("old", "new"), list(permutations(TaskStatus, 2)))
def test_every_transition_is_allowed(old: TaskStatus, new: TaskStatus) -> None:
    completed = "2024-01-01" if old.is_finished else None
    repo = FakeTaskRepo([make_task(1, status=old, completed=completed)])

    change_status(repo, 1, new, FixedClock(TODAY))

    task = repo.tasks[1]
    assert task.status == new
    assert task.completion_date == (TODAY if new.is_finished else None)


def test_there_are_twenty_transitions() -> None:
    assert len(list(permutations(TaskStatus, 2))) == 20


def test_completion_is_written_in_the_same_update() -> None:
    repo = FakeTaskRepo([make_task(1, status=TaskStatus.IN_PROGRESS)])

    change_status(repo, 1, TaskStatus.COMPLETED, FixedClock(TODAY))

    assert repo.updates == [(1, {"status": TaskStatus.COMPLETED, "completion_date": TODAY})]


def test_reopening_clears_completion_date() -> None:
    repo = FakeTaskRepo([make_task(1, status=TaskStatus.CANCELLED, completed="2024-01-05")])

    change_status(repo, 1, TaskStatus.ON_HOLD, FixedClock(TODAY))

    assert repo.updates == [(1, {"status": TaskStatus.ON_HOLD, "completion_date": None})]


def test_transition_fields_accepts_plain_strings() -> None:
    assert transition_fields("Cancelled", TODAY) == {  # type: ignore[arg-type]
        "status": TaskStatus.CANCELLED,
        "completion_date": TODAY,
    }


def test_status_parse_is_lenient() -> None:
    assert TaskStatus.parse("in progress") is TaskStatus.IN_PROGRESS
    assert TaskStatus.parse("on_hold") is TaskStatus.ON_HOLD
    assert TaskStatus.parse("NotStarted") is TaskStatus.NOT_STARTED
    with pytest.raises(ValueError):
        TaskStatus.parse("done")
