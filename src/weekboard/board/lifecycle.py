# src/weekboard/board/lifecycle.py

from __future__ import annotations

"""
Task status lifecycle.

Every status may move to every other status (no guards). Entering Completed
or Cancelled stamps completion_date with today's date; entering any other
status clears it. Both fields always go to the store in one update.
"""

import logging
from datetime import date
from typing import Any

from ..core.ports import Clock, TaskRepo
from ..tasks.task_models import FINISHED_STATUSES, TaskStatus

logger = logging.getLogger(__name__)

INITIAL_STATUS = TaskStatus.NOT_STARTED


def initial_fields() -> dict[str, Any]:
    return {"status": INITIAL_STATUS, "completion_date": None}


def transition_fields(new_status: TaskStatus, today: date) -> dict[str, Any]:
    """The single mutation that moves a task into `new_status`."""
    new_status = TaskStatus(new_status)
    completion = today if new_status in FINISHED_STATUSES else None
    return {"status": new_status, "completion_date": completion}


def change_status(
    store: TaskRepo,
    task_id: int,
    new_status: TaskStatus,
    clock: Clock,
    *,
    owner_id: str | None = None,
) -> None:
    """
    Apply a status transition through the store.

    Store errors (TaskNotFoundError, TransientStoreFailure) propagate; the
    reassignment controller decides how to surface them.
    """
    fields = transition_fields(new_status, clock.today())
    store.update_task(task_id, owner_id=owner_id, **fields)
    logger.info(
        "Task %s -> %s (completion_date=%s)",
        task_id,
        fields["status"].value,
        fields["completion_date"],
    )
