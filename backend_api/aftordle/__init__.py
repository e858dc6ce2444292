"""
Before & Aftordle Django app.

Re-exports the hint engine so callers can import from aftordle directly, e.g.:

    from aftordle import structure_reveal, RevealTracker
"""

# PUBLIC_INTERFACE
from .hints import (
    structure_reveal,
    word_hint,
    RevealTracker,
    GameProgress,
    HintError,
)

__all__ = [
    "structure_reveal",
    "word_hint",
    "RevealTracker",
    "GameProgress",
    "HintError",
]
