"""Engine that performs, records, and reverts weekly drawings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Collection, Optional, Sequence

from sqlalchemy.orm import Session

from .selection import RandomSource, pick_uniform
from ..models import Drawing, Patron

logger = logging.getLogger(__name__)

OUTCOME_WIN = "win"
OUTCOME_NO_SIGN_INS = "no_sign_ins"
OUTCOME_ROLLED_OVER = "rolled_over"


@dataclass
class DrawingResult:
    """Value object describing a drawing produced by the engine.

    Attributes
    ----------
    selected_patron : Patron
        Patron whose number was drawn, whether or not they signed in.
    is_winner : bool
        ``True`` when the drawn patron signed in for the week.
    no_sign_ins : bool
        ``True`` when nobody signed in, so there could be no winner at all.
    prize_amount : int
        Pot in whole dollars recorded with the drawing.
    drawing : Drawing
        The persisted row.
    """

    selected_patron: Patron
    is_winner: bool
    no_sign_ins: bool
    prize_amount: int
    drawing: Drawing

    @property
    def outcome(self) -> str:
        """One of ``"win"``, ``"no_sign_ins"`` or ``"rolled_over"``."""
        if self.is_winner:
            return OUTCOME_WIN
        if self.no_sign_ins:
            return OUTCOME_NO_SIGN_INS
        return OUTCOME_ROLLED_OVER


class DrawingEngine:
    """Engine that manages random selection, outcome evaluation and persistence."""

    def __init__(
        self,
        session: Session,
        *,
        rng: Optional[RandomSource] = None,
    ) -> None:
        """Create a drawing engine bound to a SQLAlchemy session.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session used for lookups and persistence.
        rng : Optional[RandomSource], default: None
            Source of uniform floats used to pick the drawn patron. Typically
            omitted, in which case the operating system's CSPRNG is used.
        """

        self._session = session
        self._rng = rng

    def get_drawing_by_week(
        self, week_number: int, since: Optional[datetime] = None
    ) -> Optional[Drawing]:
        return Drawing.get_by_week(self._session, week_number, since=since)

    def get_latest_drawing(self) -> Optional[Drawing]:
        return Drawing.get_latest(self._session)

    def perform_drawing(
        self,
        week_number: int,
        prize_amount: int,
        all_patrons: Sequence[Patron],
        signed_in_ids: Collection[int],
    ) -> DrawingResult:
        """Draw a patron for ``week_number`` and persist the outcome.

        Parameters
        ----------
        week_number : int
            Week the drawing belongs to.
        prize_amount : int
            Current pot in whole dollars, stored with the drawing.
        all_patrons : Sequence[Patron]
            Every registered patron. The draw is made from this full list,
            not from the week's sign-ins.
        signed_in_ids : Collection[int]
            Ids of the patrons who signed in for ``week_number``.

        Returns
        -------
        DrawingResult
            The drawn patron, win and no-sign-in flags, the prize and the row.

        Notes
        -----
        Selection is uniform over ``all_patrons``: every registrant is equally
        likely to be drawn, and signing in only decides whether they collect.
        The steps are:

        1. Refuse an empty patron list.
        2. Pick ``all_patrons[floor(random() * len(all_patrons))]``.
        3. The patron wins when their id is in ``signed_in_ids``.
        4. Insert the :class:`Drawing` row, with ``winner_id`` left ``None``
           when the pot rolls over.

        Nothing here guards against a second drawing for the same week.

        Raises
        ------
        ValueError
            If ``all_patrons`` is empty.
        """

        if not all_patrons:
            raise ValueError("No patrons found in database")

        selected = pick_uniform(all_patrons, self._rng)
        signed_in = set(signed_in_ids)
        is_winner = selected.id in signed_in
        no_sign_ins = len(signed_in) == 0

        drawing = Drawing(
            week_number=week_number,
            drawn_number=selected.assigned_number,
            winner_id=selected.id if is_winner else None,
            prize_amount=prize_amount,
        )
        self._session.add(drawing)
        self._session.flush()

        logger.info(
            f"Week {week_number} drawing: #{selected.assigned_number} drawn, "
            f"winner={is_winner}, no_sign_ins={no_sign_ins}, prize=${prize_amount}"
        )
        return DrawingResult(
            selected_patron=selected,
            is_winner=is_winner,
            no_sign_ins=no_sign_ins,
            prize_amount=prize_amount,
            drawing=drawing,
        )

    def reset_drawing(self, week_number: int, since: Optional[datetime] = None) -> None:
        """Delete the drawing for ``week_number`` so the week returns to pending.

        ``since`` limits the lookup as in :meth:`Drawing.get_by_week`.

        Raises
        ------
        ValueError
            If the week has no drawing.
        """

        drawing = self.get_drawing_by_week(week_number, since=since)
        if drawing is None:
            raise ValueError("No drawing found for this week")

        self._session.delete(drawing)
        self._session.flush()
        logger.info(f"Week {week_number} drawing (id={drawing.id}) reset")


__all__ = [
    "DrawingEngine",
    "DrawingResult",
    "OUTCOME_NO_SIGN_INS",
    "OUTCOME_ROLLED_OVER",
    "OUTCOME_WIN",
]
