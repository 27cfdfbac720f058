# src/weekboard/core/errors.py

"""
Error taxonomy of the board.

None of these are fatal: callers log them and leave the board unchanged.
"""

from __future__ import annotations


class BoardError(Exception):
    """Base class for all board errors."""


class TransientStoreFailure(BoardError):
    """The task store could not be reached (locked / unreadable database, I/O error)."""


class TaskNotFoundError(BoardError):
    """A mutation targeted a task id that no longer exists."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"task {task_id} not found")
        self.task_id = task_id


class ValidationFailure(BoardError, ValueError):
    """Input rejected before any store call (e.g. empty title)."""
