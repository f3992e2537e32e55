"""Utilities for the weekly drawing."""

from .engine import (
    DrawingEngine,
    DrawingResult,
    OUTCOME_NO_SIGN_INS,
    OUTCOME_ROLLED_OVER,
    OUTCOME_WIN,
)
from .selection import RandomSource, pick_index, pick_uniform

__all__ = [
    "DrawingEngine",
    "DrawingResult",
    "OUTCOME_NO_SIGN_INS",
    "OUTCOME_ROLLED_OVER",
    "OUTCOME_WIN",
    "RandomSource",
    "pick_index",
    "pick_uniform",
]
