"""Week numbering and the process-wide clock it reads from."""

from __future__ import annotations

import math
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional, Protocol


class Clock(Protocol):
    """Anything that can tell the current wall-clock time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Real local time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, moment: datetime) -> None:
        self._moment = moment

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime) -> None:
        self._moment = moment

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a ``timedelta(**kwargs)`` and return the new time."""
        self._moment = self._moment + timedelta(**kwargs)
        return self._moment


_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _clock


def set_clock(clock: Clock) -> Clock:
    """Install ``clock`` as the process-wide time source and return the previous one."""
    global _clock
    previous = _clock
    _clock = clock
    return previous


@contextmanager
def use_clock(clock: Clock) -> Iterator[Clock]:
    """Temporarily install ``clock``, restoring the previous one on exit."""
    previous = set_clock(clock)
    try:
        yield clock
    finally:
        set_clock(previous)


def week_number_for(moment: datetime) -> int:
    """Return the 1-based week of year that ``moment`` falls in.

    Weeks run Sunday to Saturday and week 1 is the one containing January
    1st, so it may be shorter than seven days. Only the calendar date of
    ``moment`` matters; the time of day does not move the boundary.
    """

    start_of_year = date(moment.year, 1, 1)
    days_elapsed = (moment.date() - start_of_year).days
    # date.weekday() is Monday=0; the numbering counts from Sunday=0.
    start_weekday = (start_of_year.weekday() + 1) % 7
    return math.ceil((days_elapsed + start_weekday + 1) / 7)


def current_week(now: Optional[datetime] = None) -> int:
    """Return the week number for ``now``, or for the installed clock's time."""
    moment = now if now is not None else get_clock().now()
    return week_number_for(moment)


def current_week_since(now: Optional[datetime] = None) -> datetime:
    """Return the UTC instant one week before ``now``.

    Week numbers carry no year, so a row stamped before this instant cannot
    belong to the current week even when its week number matches. Naive
    times are read as local time, like the week numbering itself.
    """
    moment = now if now is not None else get_clock().now()
    return moment.astimezone(timezone.utc) - timedelta(days=7)


__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "current_week",
    "current_week_since",
    "get_clock",
    "set_clock",
    "use_clock",
    "week_number_for",
]
