# src/weekboard/board/week.py

"""
ISO-8601 week arithmetic.

Weeks start on Monday; week 1 of a year is the week holding its first
Thursday, so the "week year" of late-December / early-January dates can
differ from their calendar year. Everything here works on calendar dates,
never on instants.
"""

from __future__ import annotations

from datetime import date, timedelta

DAYS_PER_WEEK = 7
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def week_of(d: date) -> tuple[int, int]:
    """Return (week_number, week_year) of `d`."""
    iso = d.isocalendar()
    return iso.week, iso.year


def dates_of_week(week_number: int, week_year: int) -> list[date]:
    """
    Monday..Sunday of the given ISO week, ascending.

    Raises ValueError for a week the year does not have (e.g. 53 in a 52-week year).
    """
    monday = date.fromisocalendar(week_year, week_number, 1)
    return [monday + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def weekday_index(d: date) -> int:
    """Monday = 0 ... Sunday = 6."""
    return d.weekday()


def week_dates_for(d: date) -> list[date]:
    return dates_of_week(*week_of(d))


def weeks_in_year(week_year: int) -> int:
    # Dec 28 always falls in the last ISO week of its year.
    return date(week_year, 12, 28).isocalendar().week


def shift_week(week_number: int, week_year: int, delta: int) -> tuple[int, int]:
    """
    Move `delta` weeks forward (or back), crossing year boundaries.

    Raises ValueError for an invalid week or when the result leaves the
    supported date range (years 1..9999).
    """
    monday = date.fromisocalendar(week_year, week_number, 1)
    try:
        return week_of(monday + timedelta(weeks=delta))
    except OverflowError:
        raise ValueError(f"no week {delta:+d} from week {week_number}/{week_year}") from None
