import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .db.utils import env_flag
from .drawing.engine import DrawingEngine, DrawingResult
from .drawing.selection import RandomSource
from .models import Patron, SignIn
from .stats import WeekStats, fetch_week_stats, sign_in_week
from .week_clock import current_week, current_week_since

logger = logging.getLogger(__name__)

ALLOW_DRAWING_RESET_ENV = "ALLOW_DRAWING_RESET"


@dataclass(frozen=True)
class PatronSearchHit:
    """A search result annotated with sign-in status for the next drawing."""

    patron: Patron
    is_already_signed_in: bool


def register_patron(
    session: Session,
    name: str,
    contact: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Patron:
    """Create a patron and sign them in for the next drawing.

    The sign-in goes to the current week, or to the following week once the
    current week has been drawn.

    The two inserts are independent: if the sign-in fails after the patron
    row was flushed, the caller's transaction decides whether the patron is
    kept.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    name : str
        Display name of the new patron.
    contact : Optional[str]
        Optional contact string (typically a phone number).
    now : Optional[datetime]
        Time used to compute the week. Defaults to the installed clock.

    Returns
    -------
    Patron
        The persisted patron with its assigned number.
    """
    patron = Patron.create(session, name=name, contact=contact)
    week_number = sign_in_week(session, now)
    SignIn.record(session, patron.id, week_number)
    logger.info(
        f"Patron #{patron.assigned_number} auto signed in for week {week_number}"
    )
    return patron


def search_patrons_with_status(
    session: Session, query: str, now: Optional[datetime] = None
) -> list[PatronSearchHit]:
    """Search patrons and flag the ones already signed in for the next drawing."""
    patrons = Patron.search(session, query)
    if not patrons:
        return []

    week_number = sign_in_week(session, now)
    signed_in = SignIn.signed_in_set(session, [p.id for p in patrons], week_number)
    return [
        PatronSearchHit(patron=p, is_already_signed_in=p.id in signed_in)
        for p in patrons
    ]


def sign_in_patron(
    session: Session, patron_id: int, now: Optional[datetime] = None
) -> SignIn:
    """Record a sign-in for the next drawing.

    Uses the same week as :attr:`WeekStats.effective_week`: the current week
    while it is pending, the following week once it has been drawn.

    Raises
    ------
    ValueError
        If the patron does not exist or already signed in for that week.
    """
    patron = Patron.find_by_id(session, patron_id)
    if patron is None:
        raise ValueError(f"Patron {patron_id} does not exist.")

    week_number = sign_in_week(session, now)
    if SignIn.has_signed_in(session, patron.id, week_number):
        raise ValueError(
            f"Patron #{patron.assigned_number} already signed in for week {week_number}."
        )

    sign_in = SignIn.record(session, patron.id, week_number)
    logger.info(f"Patron #{patron.assigned_number} signed in for week {week_number}")
    return sign_in


def lookup_number(session: Session, name: str) -> Patron:
    """Return the patron whose name best matches ``name`` so they can see their number.

    Raises
    ------
    ValueError
        If no patron name contains ``name``.
    """
    patron = Patron.lookup_by_name(session, name)
    if patron is None:
        raise ValueError("No patron found with that name")
    return patron


def run_weekly_drawing(
    session: Session,
    now: Optional[datetime] = None,
    rng: Optional[RandomSource] = None,
) -> DrawingResult:
    """Perform this week's drawing with the pot from :func:`fetch_week_stats`.

    This function performs the following steps:

    1. Compute the week stats, refusing when this week is already drawn.
    2. Collect the ids of this week's sign-ins and the full patron list.
    3. Delegate to :meth:`DrawingEngine.perform_drawing`.

    Raises
    ------
    ValueError
        If the week already has a drawing or no patrons are registered.
    """
    stats = fetch_week_stats(session, now)
    if stats.is_drawing_done:
        raise ValueError(f"Week {stats.week_number} has already been drawn.")

    signed_in_ids = set(SignIn.ids_for_week(session, stats.week_number))
    all_patrons = Patron.list_all(session)

    engine = DrawingEngine(session, rng=rng)
    return engine.perform_drawing(
        stats.week_number, stats.prize_amount, all_patrons, signed_in_ids
    )


def reset_weekly_drawing(
    session: Session,
    now: Optional[datetime] = None,
    allow_reset: Optional[bool] = None,
) -> WeekStats:
    """Undo this week's drawing and return the refreshed stats.

    Resetting is a development affordance; it is refused unless
    ``allow_reset`` is true or, when omitted, ``ALLOW_DRAWING_RESET`` is set.

    Raises
    ------
    PermissionError
        If resetting is disabled.
    ValueError
        If this week has no drawing.
    """
    if allow_reset is None:
        allow_reset = env_flag(ALLOW_DRAWING_RESET_ENV)
    if not allow_reset:
        raise PermissionError(
            f"Drawing reset is disabled; set {ALLOW_DRAWING_RESET_ENV}=1 to enable it."
        )

    week_number = current_week(now)
    DrawingEngine(session).reset_drawing(week_number, since=current_week_since(now))
    return fetch_week_stats(session, now)
