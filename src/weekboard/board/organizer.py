# src/weekboard/board/organizer.py

from __future__ import annotations

"""
Task organizer.

Pure function of (snapshot, viewed week, filters) -> display buckets:
- tasks without a date go to the backlog ("unassigned"),
- tasks dated inside the viewed week go to their day,
- unfinished tasks dated before the viewed week roll over onto the viewed
  week's day with the same weekday,
- tasks dated after the viewed week are not shown.

No I/O here: the board view calls organize() every time a snapshot, the
week or the filters change.
"""

from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from ..tasks.task_models import Task, TaskStatus
from .week import DAYS_PER_WEEK, weekday_index

ALL_WEEKDAYS = frozenset(range(DAYS_PER_WEEK))
WORK_WEEKDAYS = frozenset(range(5))


@dataclass(slots=True, frozen=True)
class BoardFilters:
    """
    search: case-insensitive substring of the title ("" = no search).
    status: one concrete status, or None for "All".
    """

    search: str = ""
    status: TaskStatus | None = None

    def matches(self, task: Task) -> bool:
        if self.search and self.search.lower() not in task.title.lower():
            return False
        if self.status is not None and task.status != self.status:
            return False
        return True


@dataclass(slots=True, frozen=True)
class BoardCard:
    """
    A task as placed on the board.

    is_rollover / original_date are derived at read time and never stored.
    """

    task: Task
    is_rollover: bool = False
    original_date: date | None = None

    @property
    def id(self) -> int:
        return self.task.id


@dataclass(slots=True)
class BoardBuckets:
    unassigned: list[BoardCard] = field(default_factory=list)
    days: dict[date, list[BoardCard]] = field(default_factory=dict)

    def find(self, task_id: int) -> date | None:
        """Day a task is shown on (None if in the backlog or not shown)."""
        for day, cards in self.days.items():
            if any(c.id == task_id for c in cards):
                return day
        return None

    def card_count(self) -> int:
        return len(self.unassigned) + sum(len(c) for c in self.days.values())


def organize(
        snapshot: Iterable[Task],
        week_dates: Sequence[date],
        filters: BoardFilters | None = None,
        *,
        visible_weekdays: Collection[int] | None = None,
) -> BoardBuckets:
    """
    Partition a snapshot into backlog and day buckets for the viewed week.

    week_dates: the 7 dates (Monday..Sunday) of the viewed week.
    visible_weekdays: weekday indexes that are displayed (default: all).
      Hidden days get no bucket, and whatever would land there (including
      rollovers) is not shown.
    """
    if len(week_dates) != DAYS_PER_WEEK:
        raise ValueError(f"expected {DAYS_PER_WEEK} week dates, got {len(week_dates)}")

    filters = filters or BoardFilters()
    shown = ALL_WEEKDAYS if visible_weekdays is None else frozenset(visible_weekdays)

    buckets = BoardBuckets(days={d: [] for i, d in enumerate(week_dates) if i in shown})
    first_day, last_day = week_dates[0], week_dates[-1]

    for task in snapshot:
        if task.status.is_finished:
            continue
        if not filters.matches(task):
            continue

        assigned = task.assigned_date
        if assigned is None:
            buckets.unassigned.append(BoardCard(task))
            continue

        if assigned > last_day:
            continue

        if assigned >= first_day:
            target, card = assigned, BoardCard(task)
        else:
            target = week_dates[weekday_index(assigned)]
            card = BoardCard(task, is_rollover=True, original_date=assigned)

        day_bucket = buckets.days.get(target)
        if day_bucket is not None:
            day_bucket.append(card)

    return buckets


def suggest_kinds(snapshot: Iterable[Task], defaults: Sequence[str] = ()) -> list[str]:
    """Type labels to offer: configured defaults first, then labels in use (case-insensitive dedup)."""
    seen: set[str] = set()
    out: list[str] = []
    for kind in [*defaults, *(t.kind for t in snapshot)]:
        label = (kind or "").strip()
        if label and label.lower() not in seen:
            seen.add(label.lower())
            out.append(label)
    return out
