"""Declarative base shared by the raffle models."""

from sqlalchemy.orm import DeclarativeBase

from luckydraw.db.metadata import metadata_obj


class Base(DeclarativeBase):
    """Base for ``Patron``, ``SignIn`` and ``Drawing``.

    Uses the project's ``metadata_obj`` so constraint names follow one naming
    convention in both ``create_all`` and Alembic migrations.
    """

    metadata = metadata_obj
