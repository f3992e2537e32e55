"""Registered raffle participants."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, String, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .id_type import ID_TYPE

if TYPE_CHECKING:
    from .drawing import Drawing
    from .sign_in import SignIn

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
MAX_ASSIGNED_NUMBER = 2**63 - 1
"""Largest value the ``assigned_number`` column can hold."""


class Patron(Base):
    """A registered participant identified by a sequential assigned number."""

    __tablename__ = "patrons"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    assigned_number: Mapped[int] = mapped_column(
        ID_TYPE, unique=True, nullable=False, index=True
    )

    sign_ins: Mapped[list["SignIn"]] = relationship(
        back_populates="patron", cascade="all, delete-orphan"
    )
    drawings_won: Mapped[list["Drawing"]] = relationship(back_populates="winner")

    def __init__(
        self,
        name: str,
        assigned_number: int,
        contact: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.name = name
        self.assigned_number = assigned_number
        self.contact = contact
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:
        return (
            f"<Patron(id={self.id}, assigned_number={self.assigned_number}, "
            f"name='{self.name}')>"
        )

    @classmethod
    def next_assigned_number(cls, session: Session) -> int:
        """Return ``max(assigned_number) + 1``, or ``1`` for an empty directory."""
        highest = session.scalar(select(func.max(cls.assigned_number)))
        return 1 if highest is None else highest + 1

    @classmethod
    def create(
        cls, session: Session, name: str, contact: Optional[str] = None
    ) -> "Patron":
        """Register a new patron with the next assigned number.

        The number is read and written in two steps, so two concurrent
        registrations can race for the same value. The unique constraint on
        ``assigned_number`` turns the loser into an ``IntegrityError`` rather
        than a duplicate.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session. The new row is flushed, not committed.
        name : str
            Display name. Surrounding whitespace is removed.
        contact : Optional[str], default: None
            Free-form contact string. Blank values are stored as ``NULL``.

        Raises
        ------
        ValueError
            If ``name`` is blank.
        """

        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Patron name must not be empty")
        contact = (contact or "").strip() or None

        patron = cls(
            name=cleaned,
            contact=contact,
            assigned_number=cls.next_assigned_number(session),
        )
        session.add(patron)
        session.flush()
        logger.info(f"Registered patron #{patron.assigned_number} (id={patron.id})")
        return patron

    @classmethod
    def find_by_id(cls, session: Session, patron_id: int) -> Optional["Patron"]:
        """Return the patron with ``patron_id``, or ``None``."""
        return session.get(cls, patron_id)

    @classmethod
    def get_by_number(
        cls, session: Session, assigned_number: int
    ) -> Optional["Patron"]:
        """Return the patron holding ``assigned_number``, or ``None``."""
        return session.scalar(
            select(cls).where(cls.assigned_number == assigned_number)
        )

    @classmethod
    def find_by_number(cls, session: Session, assigned_number: int) -> "Patron":
        """Return the patron holding ``assigned_number``.

        Raises
        ------
        sqlalchemy.exc.NoResultFound
            If no patron holds that number.
        """
        return session.execute(
            select(cls).where(cls.assigned_number == assigned_number)
        ).scalar_one()

    @classmethod
    def search(
        cls, session: Session, query: str, limit: int = SEARCH_LIMIT
    ) -> list["Patron"]:
        """Find patrons by assigned number or by part of their name.

        A query that reads as a number matches the assigned number exactly;
        anything else is a case-insensitive substring match on the name. A
        blank query returns an empty list without touching the database.
        """

        text = (query or "").strip()
        if not text:
            return []

        stmt = select(cls)
        number = _parse_number(text)
        if number is not None:
            if not _is_assignable(number):
                return []
            stmt = stmt.where(cls.assigned_number == int(number))
        else:
            stmt = stmt.where(cls.name.icontains(text, autoescape=True))

        stmt = stmt.order_by(cls.assigned_number.asc()).limit(limit)
        return list(session.scalars(stmt).all())

    @classmethod
    def lookup_by_name(cls, session: Session, name: str) -> Optional["Patron"]:
        """Return the first patron, alphabetically, whose name contains ``name``."""
        text = (name or "").strip()
        if not text:
            return None
        stmt = (
            select(cls)
            .where(cls.name.icontains(text, autoescape=True))
            .order_by(cls.name.asc(), cls.assigned_number.asc())
            .limit(1)
        )
        return session.scalars(stmt).first()

    @classmethod
    def list_all(cls, session: Session) -> list["Patron"]:
        """Return every patron ordered by assigned number."""
        return list(
            session.scalars(select(cls).order_by(cls.assigned_number.asc())).all()
        )


def _parse_number(text: str) -> Optional[Decimal]:
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if value.is_nan():
        return None
    return value


def _is_assignable(number: Decimal) -> bool:
    # Bounds first: huge exponents must not reach int().
    if not number.is_finite():
        return False
    if number < 1 or number > MAX_ASSIGNED_NUMBER:
        return False
    return number == number.to_integral_value()


__all__ = ["MAX_ASSIGNED_NUMBER", "Patron", "SEARCH_LIMIT"]
