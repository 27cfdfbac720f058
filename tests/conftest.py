# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from weekboard.cli.bootstrap import create_initial_state
from weekboard.core.clock import FixedClock
from weekboard.core.state import AppState
from weekboard.tasks.task_store import TaskStore

from .fakes import OWNER

# Wednesday of ISO week 3 / 2024 (Mon 2024-01-15 .. Sun 2024-01-21).
TODAY = date(2024, 1, 17)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="weekboard-test",
        log_level="DEBUG",
        background_log_level="WARNING",
        owner_id=OWNER,
        visible_weekdays=None,
        type_suggestions=["Work", "Personal"],
        watch_enabled=False,
        watch_interval_seconds=0.01,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, clock: FixedClock) -> Iterator[AppState]:
    """
    AppState wired with a real SQLite store and a fixed clock.

    NOTE: We keep the real TaskStore here because its snapshot delivery
    is part of what we want to test.
    """
    app = create_initial_state(settings=settings, store=store, clock=clock)
    yield app
    app.board.close()
