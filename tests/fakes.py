# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from typing import Any

from weekboard.core.errors import TaskNotFoundError
from weekboard.core.ports import SnapshotListener
from weekboard.tasks.task_models import Task, TaskStatus

OWNER = "me"


def make_task(
    task_id: int,
    title: str = "task",
    *,
    status: TaskStatus = TaskStatus.NOT_STARTED,
    assigned: str | None = None,
    completed: str | None = None,
    kind: str = "",
    owner_id: str = OWNER,
) -> Task:
    return Task(
        id=task_id,
        owner_id=owner_id,
        title=title,
        kind=kind,
        status=status,
        created_at=float(task_id),
        updated_at=float(task_id),
        assigned_date=date.fromisoformat(assigned) if assigned else None,
        completion_date=date.fromisoformat(completed) if completed else None,
    )


@dataclass(slots=True)
class FakeSubscription:
    owner_id: str
    listener: SnapshotListener
    active: bool = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeTaskRepo:
    """
    In-memory TaskRepo used for board unit tests.

    - records every update_task call for assertions
    - fail_with makes the next mutations raise (simulated outage)
    - auto_notify=False holds snapshots back until push() is called
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self.tasks: dict[int, Task] = {t.id: t for t in tasks}
        self.updates: list[tuple[int, dict[str, Any]]] = []
        self.subs: list[FakeSubscription] = []
        self.fail_with: Exception | None = None
        self.auto_notify = True
        self._next_id = max(self.tasks, default=0) + 1

    # ---- snapshots ----

    def subscribe(self, owner_id: str, listener: SnapshotListener) -> FakeSubscription:
        sub = FakeSubscription(owner_id, listener)
        self.subs.append(sub)
        listener(self.list_tasks(owner_id))
        return sub

    def push(self) -> None:
        for sub in self.subs:
            if sub.active:
                sub.listener(self.list_tasks(sub.owner_id))

    def _changed(self) -> None:
        if self.auto_notify:
            self.push()

    def list_tasks(self, owner_id: str) -> list[Task]:
        return [t for t in self.tasks.values() if t.owner_id == owner_id]

    def get_task(self, task_id: int) -> Task | None:
        return self.tasks.get(task_id)

    def list_history(self, owner_id: str) -> list[Task]:
        return [t for t in self.list_tasks(owner_id) if t.status.is_finished]

    # ---- mutations ----

    def create_task(
        self,
        *,
        owner_id: str,
        title: str,
        kind: str = "",
        notes: str | None = None,
        assigned_date: date | None = None,
        assignees: Iterable[str] | None = None,
    ) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        task_id = self._next_id
        self._next_id += 1
        self.tasks[task_id] = Task(
            id=task_id,
            owner_id=owner_id,
            title=title.strip(),
            kind=kind,
            status=TaskStatus.NOT_STARTED,
            created_at=float(task_id),
            updated_at=float(task_id),
            notes=notes,
            assigned_date=assigned_date,
            assignees=list(assignees or []),
        )
        self._changed()
        return task_id

    def _owned(self, task_id: int, owner_id: str | None) -> Task | None:
        task = self.tasks.get(task_id)
        if task is None or (owner_id is not None and task.owner_id != owner_id):
            return None
        return task

    def update_task(self, task_id: int, *, owner_id: str | None = None, **fields: Any) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.updates.append((task_id, dict(fields)))
        task = self._owned(task_id, owner_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        self.tasks[task_id] = replace(task, **fields)
        self._changed()

    def delete_task(self, task_id: int, *, owner_id: str | None = None) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        if self._owned(task_id, owner_id) is None:
            raise TaskNotFoundError(task_id)
        del self.tasks[task_id]
        self._changed()
