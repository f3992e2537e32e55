"""Uniform random selection of the drawn patron."""

from __future__ import annotations

import math
import random
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything with a ``random()`` returning a float in ``[0.0, 1.0)``."""

    def random(self) -> float: ...


_system_random = random.SystemRandom()


def pick_index(length: int, rng: Optional[RandomSource] = None) -> int:
    """Return ``floor(uniform(0, 1) * length)``.

    Parameters
    ----------
    length : int
        Number of candidates; must be positive.
    rng : Optional[RandomSource], default: None
        Source of uniform floats. Defaults to the operating system's CSPRNG.

    Raises
    ------
    ValueError
        If ``length`` is not positive or the source returns a value outside
        ``[0.0, 1.0)``.
    """

    if length <= 0:
        raise ValueError("Cannot pick from an empty candidate list")
    source = rng if rng is not None else _system_random
    value = source.random()
    if not 0.0 <= value < 1.0:
        raise ValueError(f"Random source returned {value!r}, expected [0.0, 1.0)")
    return math.floor(value * length)


def pick_uniform(candidates: Sequence[T], rng: Optional[RandomSource] = None) -> T:
    """Return one element of ``candidates``, each equally likely."""
    return candidates[pick_index(len(candidates), rng)]


__all__ = ["RandomSource", "pick_index", "pick_uniform"]
