# src/weekboard/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..board.reassign import ReassignmentController
from ..board.view import BoardView
from .ports import Clock, TaskRepo


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskRepo
    clock: Clock
    board: BoardView
    controller: ReassignmentController

    # Serializes console commands and watcher-driven snapshot delivery.
    lock: threading.RLock = field(default_factory=threading.RLock)

    @property
    def owner_id(self) -> str:
        return self.board.owner_id
