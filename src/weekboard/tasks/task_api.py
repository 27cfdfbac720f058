# src/weekboard/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from ..core.errors import TaskNotFoundError, TransientStoreFailure, ValidationFailure
from ..core.state import AppState
from .task_models import Task

logger = logging.getLogger(__name__)

_EDITABLE = ("title", "kind", "notes", "assignees")


def add_task(
    state: AppState,
    *,
    title: str,
    kind: str = "",
    notes: str | None = None,
    assigned_date: date | None = None,
    assignees: Iterable[str] | None = None,
) -> int | None:
    """
    Create a task for the current owner.

    Raises ValidationFailure for an empty title (before touching the store).
    Returns None if the store is unavailable.
    """
    if not title or not title.strip():
        raise ValidationFailure("title must not be empty")

    try:
        task_id = state.task_store.create_task(
            owner_id=state.owner_id,
            title=title,
            kind=kind,
            notes=notes,
            assigned_date=assigned_date,
            assignees=assignees,
        )
    except TransientStoreFailure:
        logger.warning("create_task failed title=%r", title, exc_info=True)
        return None

    logger.info("Created task id=%s date=%s", task_id, assigned_date)
    return task_id


def edit_task(state: AppState, task_id: int, **changes: object) -> bool:
    """
    Update descriptive fields (title / kind / notes / assignees).

    Dates and status have their own entry points (ReassignmentController).
    Only tasks of the current owner are editable.
    """
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise ValidationFailure(f"not editable here: {', '.join(sorted(unknown))}")
    if "title" in changes and not str(changes["title"] or "").strip():
        raise ValidationFailure("title must not be empty")
    if not changes:
        return True

    try:
        state.task_store.update_task(task_id, owner_id=state.owner_id, **changes)
    except TaskNotFoundError:
        logger.info("Edit ignored: no task %s for owner %s", task_id, state.owner_id)
        return False
    except TransientStoreFailure:
        logger.warning("edit_task failed task_id=%s", task_id, exc_info=True)
        return False
    return True


def remove_task(state: AppState, task_id: int) -> bool:
    try:
        state.task_store.delete_task(task_id, owner_id=state.owner_id)
    except TaskNotFoundError:
        logger.info("Delete ignored: no task %s for owner %s", task_id, state.owner_id)
        return False
    except TransientStoreFailure:
        logger.warning("delete_task failed task_id=%s", task_id, exc_info=True)
        return False
    logger.info("Deleted task id=%s", task_id)
    return True


def find_task(state: AppState, task_id: int | None) -> Task | None:
    """
    Resolve a (possibly dangling) task reference for the current owner.

    Missing ids and tasks of other owners resolve to None.
    """
    if task_id is None:
        return None
    try:
        task = state.task_store.get_task(task_id)
    except TransientStoreFailure:
        logger.warning("get_task failed task_id=%s", task_id, exc_info=True)
        return None
    if task is None or task.owner_id != state.owner_id:
        return None
    return task
