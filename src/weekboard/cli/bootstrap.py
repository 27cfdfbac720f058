# src/weekboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store/clock/board/controller).
"""

from __future__ import annotations

import logging

from ..board.reassign import ReassignmentController
from ..board.view import BoardView
from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Clock, TaskRepo
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    store: TaskRepo | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings/store/clock injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    The board view is returned open (subscribed).
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if store is None:
        store = TaskStore(settings.tasks_db_path)
    if clock is None:
        clock = SystemClock()

    board = BoardView(
        store,
        owner_id=settings.owner_id,
        clock=clock,
        visible_weekdays=settings.visible_weekdays,
    )
    state = AppState(
        settings=settings,
        task_store=store,
        clock=clock,
        board=board,
        controller=ReassignmentController(store, clock, owner_id=settings.owner_id),
    )
    board.open()
    logger.info(
        "Board ready owner=%s week=%s/%s", board.owner_id, board.week_number, board.week_year
    )
    return state
