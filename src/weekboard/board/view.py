# src/weekboard/board/view.py

from __future__ import annotations

"""
Board view: the live observer between the task store and the display.

It owns one store subscription and recomputes the buckets whenever
- a new snapshot arrives,
- the viewed week changes,
- the filters change.

Only the latest snapshot is kept. After close() any late snapshot is ignored.
"""

import logging
from collections.abc import Callable, Collection
from datetime import date
from typing import Any

from ..core.ports import Clock, Subscription, TaskRepo
from ..tasks.task_models import Task, TaskStatus
from .organizer import BoardBuckets, BoardFilters, organize
from .week import dates_of_week, shift_week, week_of

logger = logging.getLogger(__name__)

BucketsListener = Callable[["BoardView"], None]


class BoardView:
    def __init__(
        self,
        store: TaskRepo,
        *,
        owner_id: str,
        clock: Clock,
        visible_weekdays: Collection[int] | None = None,
        on_change: BucketsListener | None = None,
    ) -> None:
        self._store = store
        self.owner_id = owner_id
        self._clock = clock
        self.visible_weekdays = visible_weekdays
        self._on_change = on_change

        self.week_number, self.week_year = week_of(clock.today())
        self.filters = BoardFilters()

        self._snapshot: list[Task] = []
        self._buckets = organize([], self.week_dates, visible_weekdays=visible_weekdays)
        self._subscription: Subscription | None = None
        self._generation = 0

    # ---- lifetime ----

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def open(self) -> None:
        if self.is_open:
            return
        self._generation += 1
        generation = self._generation

        def listener(snapshot: list[Any]) -> None:
            self._on_snapshot(generation, snapshot)

        self._subscription = self._store.subscribe(self.owner_id, listener)
        logger.debug("BoardView opened owner=%s", self.owner_id)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        # Invalidate listeners of the closed subscription.
        self._generation += 1
        logger.debug("BoardView closed owner=%s", self.owner_id)

    def __enter__(self) -> BoardView:
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _on_snapshot(self, generation: int, snapshot: list[Any]) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale snapshot (generation %s != %s)", generation, self._generation)
            return
        self._snapshot = list(snapshot)
        self._recompute()

    # ---- derived state ----

    @property
    def snapshot(self) -> list[Task]:
        return list(self._snapshot)

    @property
    def buckets(self) -> BoardBuckets:
        return self._buckets

    @property
    def week_dates(self) -> list[date]:
        return dates_of_week(self.week_number, self.week_year)

    @property
    def visible_dates(self) -> list[date]:
        return list(self._buckets.days)

    def is_today(self, d: date) -> bool:
        return d == self._clock.today()

    def _recompute(self) -> None:
        self._buckets = organize(
            self._snapshot,
            self.week_dates,
            self.filters,
            visible_weekdays=self.visible_weekdays,
        )
        if self._on_change is not None:
            try:
                self._on_change(self)
            except Exception:
                logger.exception("BoardView change listener failed")

    # ---- navigation ----

    def show_week(self, week_number: int, week_year: int) -> None:
        # Validates the pair (raises ValueError for a week the year lacks).
        dates_of_week(week_number, week_year)
        self.week_number, self.week_year = week_number, week_year
        self._recompute()

    def next_week(self) -> None:
        self.show_week(*shift_week(self.week_number, self.week_year, 1))

    def previous_week(self) -> None:
        self.show_week(*shift_week(self.week_number, self.week_year, -1))

    def go_to_today(self) -> None:
        self.show_week(*week_of(self._clock.today()))

    # ---- filters ----

    def set_search(self, term: str) -> None:
        self.filters = BoardFilters(search=term, status=self.filters.status)
        self._recompute()

    def set_status_filter(self, status: TaskStatus | None) -> None:
        """None means "All"."""
        self.filters = BoardFilters(
            search=self.filters.search,
            status=TaskStatus(status) if status is not None else None,
        )
        self._recompute()

    def clear_filters(self) -> None:
        self.filters = BoardFilters()
        self._recompute()
