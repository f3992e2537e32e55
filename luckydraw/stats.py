"""Current-week snapshot for the admin view."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from .models import Drawing, Patron, SignIn
from .week_clock import current_week, current_week_since

logger = logging.getLogger(__name__)

PRIZE_PER_SIGN_IN = 1
"""Dollars added to the pot for every sign-in."""

UNKNOWN_PATRON_NAME = "Unknown"


@dataclass(frozen=True)
class LatestDrawingSummary:
    drawn_number: int
    drawn_name: str
    was_winner: bool


@dataclass(frozen=True)
class WeekStats:
    """Snapshot of the current week.

    Attributes
    ----------
    week_number : int
        Week number of the clock's current time.
    effective_week : int
        Week that new sign-ins count towards; ``week_number + 1`` once this
        week has been drawn.
    sign_in_count : int
        Sign-ins recorded for ``effective_week``.
    prize_amount : int
        ``sign_in_count`` dollars plus the unclaimed pot of the most recent
        drawing.
    is_drawing_done : bool
        Whether this week already has a drawing.
    latest_drawing : Optional[LatestDrawingSummary]
        This week's drawing, when done.
    """

    week_number: int
    effective_week: int
    sign_in_count: int
    prize_amount: int
    is_drawing_done: bool
    latest_drawing: Optional[LatestDrawingSummary] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "weekNumber": self.week_number,
            "effectiveWeek": self.effective_week,
            "signInCount": self.sign_in_count,
            "prizeAmount": self.prize_amount,
            "isDrawingDone": self.is_drawing_done,
        }
        if self.latest_drawing is not None:
            data["latestDrawing"] = {
                "drawnNumber": self.latest_drawing.drawn_number,
                "drawnName": self.latest_drawing.drawn_name,
                "wasWinner": self.latest_drawing.was_winner,
            }
        return data


def _this_weeks_drawing(
    session: Session, week_number: int, now: Optional[datetime]
) -> Optional[Drawing]:
    return Drawing.get_by_week(session, week_number, since=current_week_since(now))


def _roll_forward(week_number: int, drawing: Optional[Drawing]) -> int:
    # Once a week is drawn, new sign-ins count towards the next one.
    return week_number + 1 if drawing is not None else week_number


def sign_in_week(session: Session, now: Optional[datetime] = None) -> int:
    """Return the week a sign-in made at ``now`` belongs to.

    This is the current week until its drawing has been performed, and the
    following week afterwards, matching :attr:`WeekStats.effective_week`.
    """
    week_number = current_week(now)
    return _roll_forward(week_number, _this_weeks_drawing(session, week_number, now))


def fetch_week_stats(session: Session, now: Optional[datetime] = None) -> WeekStats:
    """Build the :class:`WeekStats` snapshot for the current week.

    The pot is this effective week's sign-ins at one dollar each, plus the
    prize of the single most recent drawing when that drawing had no winner.
    Older unclaimed drawings are not added up.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session; only reads are performed.
    now : Optional[datetime], default: None
        Time to compute the week for. Defaults to the installed clock.
    """

    week_number = current_week(now)
    this_week_drawing = _this_weeks_drawing(session, week_number, now)

    latest_summary: Optional[LatestDrawingSummary] = None
    if this_week_drawing is not None:
        drawn = Patron.get_by_number(session, this_week_drawing.drawn_number)
        latest_summary = LatestDrawingSummary(
            drawn_number=this_week_drawing.drawn_number,
            drawn_name=drawn.name if drawn is not None else UNKNOWN_PATRON_NAME,
            was_winner=this_week_drawing.has_winner,
        )

    effective_week = _roll_forward(week_number, this_week_drawing)
    sign_in_count = SignIn.count_for_week(session, effective_week)

    last_drawing = Drawing.get_latest(session)
    previous_unclaimed = last_drawing.unclaimed_amount if last_drawing is not None else 0

    stats = WeekStats(
        week_number=week_number,
        effective_week=effective_week,
        sign_in_count=sign_in_count,
        prize_amount=sign_in_count * PRIZE_PER_SIGN_IN + previous_unclaimed,
        is_drawing_done=this_week_drawing is not None,
        latest_drawing=latest_summary,
    )
    logger.debug(f"Week stats: {stats}")
    return stats


__all__ = [
    "LatestDrawingSummary",
    "PRIZE_PER_SIGN_IN",
    "UNKNOWN_PATRON_NAME",
    "WeekStats",
    "fetch_week_stats",
    "sign_in_week",
]
