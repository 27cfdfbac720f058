# src/weekboard/core/clock.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


class SystemClock:
    """Local calendar date of the machine running the board."""

    def today(self) -> date:
        return datetime.now().astimezone().date()


@dataclass(slots=True)
class FixedClock:
    """Clock pinned to a given date. Handy for tests and demos."""

    current: date

    def today(self) -> date:
        return self.current
