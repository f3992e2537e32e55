"""Persisted outcome of a weekly drawing."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .id_type import ID_TYPE

if TYPE_CHECKING:
    from .patron import Patron


class Drawing(Base):
    """One drawing per week: the number drawn, the winner if any, and the pot.

    At most one row per ``week_number`` is expected; the drawing workflow
    checks for an existing row instead of relying on a constraint.
    """

    __tablename__ = "drawings"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """When the drawing was performed."""

    week_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    """Week the drawing belongs to."""

    drawn_number: Mapped[int] = mapped_column(Integer, nullable=False)
    """Assigned number of the patron that was drawn."""

    winner_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("patrons.id", ondelete="SET NULL"), nullable=True
    )
    """Drawn patron's id when they had signed in; ``None`` when the pot rolls over."""

    prize_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Pot in whole dollars at the time of the drawing."""

    winner: Mapped[Optional["Patron"]] = relationship(back_populates="drawings_won")

    def __init__(
        self,
        *,
        week_number: int,
        drawn_number: int,
        prize_amount: int,
        winner_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.week_number = week_number
        self.drawn_number = drawn_number
        self.prize_amount = prize_amount
        self.winner_id = winner_id
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            "<Drawing(id={id}, week_number={week}, drawn_number={drawn}, "
            "winner_id={winner}, prize_amount={prize})>"
        ).format(
            id=self.id,
            week=self.week_number,
            drawn=self.drawn_number,
            winner=self.winner_id,
            prize=self.prize_amount,
        )

    @property
    def has_winner(self) -> bool:
        return self.winner_id is not None

    @property
    def unclaimed_amount(self) -> int:
        """Prize that carries forward: the full pot if nobody won, else 0."""
        return 0 if self.has_winner else self.prize_amount

    @classmethod
    def get_by_week(
        cls,
        session: Session,
        week_number: int,
        since: Optional[datetime] = None,
    ) -> Optional["Drawing"]:
        """Return the drawing for ``week_number`` if one has been performed.

        ``since`` ignores drawings created before it, e.g. last year's drawing
        with the same week number.
        """
        stmt = select(cls).where(cls.week_number == week_number)
        if since is not None:
            stmt = stmt.where(cls.created_at >= since)
        stmt = stmt.order_by(cls.created_at.desc(), cls.id.desc())
        return session.scalars(stmt).first()

    @classmethod
    def get_latest(cls, session: Session) -> Optional["Drawing"]:
        """Return the most recently created drawing across all weeks."""
        stmt = select(cls).order_by(cls.created_at.desc(), cls.id.desc()).limit(1)
        return session.scalars(stmt).first()


__all__ = ["Drawing"]
