# src/weekboard/board/reassign.py

from __future__ import annotations

"""
Reassignment controller.

Turns board gestures (move a card to a day, drop it on the backlog, pick a
status) into single store mutations. Nothing is patched locally: the board
changes when the store pushes its next snapshot.
"""

import logging
from datetime import date

from ..core.errors import TaskNotFoundError, TransientStoreFailure
from ..core.ports import Clock, TaskRepo
from ..tasks.task_models import TaskStatus
from .lifecycle import change_status

logger = logging.getLogger(__name__)


class ReassignmentController:
    """
    With owner_id set, only that owner's tasks can be changed; an id of
    another owner is handled like a deleted task.
    """

    def __init__(self, store: TaskRepo, clock: Clock, *, owner_id: str | None = None) -> None:
        self._store = store
        self._clock = clock
        self.owner_id = owner_id

    def reassign(self, task_id: int, target_date: date | None) -> bool:
        """
        Write assigned_date := target_date and nothing else.

        Returns False (no-op) if the task is gone or the store is unavailable.
        """
        try:
            self._store.update_task(task_id, owner_id=self.owner_id, assigned_date=target_date)
        except TaskNotFoundError:
            logger.info("Reassign ignored: no task %s for owner %s", task_id, self.owner_id)
            return False
        except TransientStoreFailure:
            logger.warning("Reassign failed task_id=%s target=%s", task_id, target_date, exc_info=True)
            return False

        logger.info("Task %s -> %s", task_id, target_date.isoformat() if target_date else "backlog")
        return True

    def to_backlog(self, task_id: int) -> bool:
        return self.reassign(task_id, None)

    def set_status(self, task_id: int, status: TaskStatus) -> bool:
        """Status-menu action; same no-op-on-failure contract as reassign()."""
        try:
            change_status(self._store, task_id, status, self._clock, owner_id=self.owner_id)
        except TaskNotFoundError:
            logger.info("Status change ignored: no task %s for owner %s", task_id, self.owner_id)
            return False
        except TransientStoreFailure:
            logger.warning("Status change failed task_id=%s status=%s", task_id, status, exc_info=True)
            return False
        return True
