"""
Hint engine for Before & After puzzles.

Exports:
- structure_reveal and word_hint, the stateless server-side hint policy
- RevealTracker and WordRevealState, the client-side reveal state
- GameProgress and its transition helpers for a whole day's game
- the HintError family of exceptions

These modules are framework-agnostic and can be reused by views, the game
client or tests without importing Django models.
"""

from .errors import HintError, HintValidationError, LinkingWordLocked, HintNotAllowed, TrackerStateError
from .policy import structure_reveal, word_hint, normalize_answer, answers_match, split_answer, find_linking_index
from .tracker import RevealTracker, WordRevealState
from .progress import GameProgress, record_hint, record_wrong_answer, advance, final_score, performance_grade

__all__ = [
    "HintError",
    "HintValidationError",
    "LinkingWordLocked",
    "HintNotAllowed",
    "TrackerStateError",
    "structure_reveal",
    "word_hint",
    "normalize_answer",
    "answers_match",
    "split_answer",
    "find_linking_index",
    "RevealTracker",
    "WordRevealState",
    "GameProgress",
    "record_hint",
    "record_wrong_answer",
    "advance",
    "final_score",
    "performance_grade",
]
