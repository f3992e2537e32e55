"""Weekly attendance records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .id_type import ID_TYPE

if TYPE_CHECKING:
    from .patron import Patron


class SignIn(Base):
    """Marks a patron as eligible to collect the prize for one week.

    A (patron, week) pair is expected to appear once, but nothing at this
    layer enforces it; callers that care check :meth:`has_signed_in` first.
    """

    __tablename__ = "sign_ins"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    patron_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("patrons.id", ondelete="CASCADE"), nullable=False
    )
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)

    patron: Mapped["Patron"] = relationship(back_populates="sign_ins")

    __table_args__ = (
        Index("ix_sign_ins_week_number_patron_id", "week_number", "patron_id"),
    )

    def __init__(
        self,
        patron_id: int,
        week_number: int,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.patron_id = patron_id
        self.week_number = week_number
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:
        return (
            f"<SignIn(id={self.id}, patron_id={self.patron_id}, "
            f"week_number={self.week_number})>"
        )

    @classmethod
    def has_signed_in(cls, session: Session, patron_id: int, week_number: int) -> bool:
        """Return whether ``patron_id`` signed in for ``week_number``."""
        stmt = (
            select(cls.id)
            .where(cls.patron_id == patron_id, cls.week_number == week_number)
            .limit(1)
        )
        return session.scalar(stmt) is not None

    @classmethod
    def signed_in_set(
        cls, session: Session, patron_ids: Iterable[int], week_number: int
    ) -> set[int]:
        """Return the subset of ``patron_ids`` that signed in for ``week_number``."""
        ids = list(patron_ids)
        if not ids:
            return set()
        stmt = select(cls.patron_id).where(
            cls.patron_id.in_(ids), cls.week_number == week_number
        )
        return set(session.scalars(stmt).all())

    @classmethod
    def record(cls, session: Session, patron_id: int, week_number: int) -> "SignIn":
        """Insert a sign-in row without checking for an existing one."""
        sign_in = cls(patron_id=patron_id, week_number=week_number)
        session.add(sign_in)
        session.flush()
        return sign_in

    @classmethod
    def list_for_week(cls, session: Session, week_number: int) -> list["SignIn"]:
        stmt = (
            select(cls)
            .where(cls.week_number == week_number)
            .order_by(cls.created_at.asc(), cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def ids_for_week(cls, session: Session, week_number: int) -> list[int]:
        """Return the patron ids signed in for ``week_number``."""
        stmt = (
            select(cls.patron_id)
            .where(cls.week_number == week_number)
            .order_by(cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def count_for_week(cls, session: Session, week_number: int) -> int:
        return session.scalar(
            select(func.count(cls.id)).where(cls.week_number == week_number)
        ) or 0


__all__ = ["SignIn"]
