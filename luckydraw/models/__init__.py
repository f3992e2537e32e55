from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .patron import Patron  # noqa: F401
from .sign_in import SignIn  # noqa: F401
from .drawing import Drawing  # noqa: F401

__all__ = [
    "Base",
    "Patron",
    "SignIn",
    "Drawing",
]
