# src/weekboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the board core.

The core depends on Protocols instead of concrete implementations.
This keeps the store swappable (SQLite, in-memory fake) and makes testing easier.
"""

from collections.abc import Callable, Iterable
from datetime import date
from typing import Any, Protocol

SnapshotListener = Callable[[list[Any]], None]
# Receives the full current list of Task objects for one owner.


class Clock(Protocol):
    """Single source of "today" (calendar date, not an instant)."""
    def today(self) -> date: ...


class Subscription(Protocol):
    @property
    def active(self) -> bool: ...
    def unsubscribe(self) -> None: ...


class TaskRepo(Protocol):
    # Live snapshot API
    def subscribe(self, owner_id: str, listener: SnapshotListener) -> Subscription: ...
    def list_tasks(self, owner_id: str) -> list[Any]: ...
    def get_task(self, task_id: int) -> Any | None: ...
    def list_history(self, owner_id: str) -> list[Any]: ...

    # Mutations (partial-field semantics: only given fields are written)
    def create_task(
            self,
            *,
            owner_id: str,
            title: str,
            kind: str = "",
            notes: str | None = None,
            assigned_date: date | None = None,
            assignees: Iterable[str] | None = None,
    ) -> int: ...

    # owner_id, when given, scopes the write: another owner's task counts as missing.
    def update_task(self, task_id: int, *, owner_id: str | None = None, **fields: Any) -> None: ...
    def delete_task(self, task_id: int, *, owner_id: str | None = None) -> None: ...
