# src/weekboard/board/history.py

from __future__ import annotations

from collections.abc import Iterable

from ..tasks.task_models import Task


def history(tasks: Iterable[Task]) -> list[Task]:
    """
    Finished tasks, most recently completed first; tasks without a
    completion date go last. Ties keep their input order.
    """
    finished = [t for t in tasks if t.status.is_finished]
    dated = [t for t in finished if t.completion_date is not None]
    undated = [t for t in finished if t.completion_date is None]
    dated.sort(key=lambda t: t.completion_date.toordinal(), reverse=True)  # type: ignore[union-attr]
    return dated + undated
