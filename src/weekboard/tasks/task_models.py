# src/weekboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Values are persisted verbatim, so they must never be renamed.
    """

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_finished(self) -> bool:
        return self in FINISHED_STATUSES

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED

    @classmethod
    def parse(cls, text: str) -> TaskStatus:
        """
        Lenient parser for user input: accepts "InProgress", "in_progress",
        "in-progress", "in progress" (any case).
        """
        key = "".join(ch for ch in text.lower() if ch.isalnum())
        for status in cls:
            if status.value.lower() == key:
                return status
        raise ValueError(f"unknown status: {text!r}")


FINISHED_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


@dataclass(slots=True)
class Task:
    id: int
    owner_id: str
    title: str
    kind: str  # free-form "type" label
    status: TaskStatus
    created_at: float
    updated_at: float

    notes: str | None = None
    assigned_date: date | None = None
    completion_date: date | None = None
    assignees: list[str] = field(default_factory=list)
