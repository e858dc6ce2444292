from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .hints.progress import CLUES_PER_PUZZLE

MIXED = "mixed"

# (difficulty, how many) picked first for a mixed puzzle.
MIXED_QUOTAS = ((1, 2), (2, 2), (3, 1))


# PUBLIC_INTERFACE
def select_clues(available: Sequence, target_difficulty: Optional[str] = None, count: int = CLUES_PER_PUZZLE) -> List:
    """Pick the clues of a generated puzzle from library entries.

    ``available`` is taken in the order given, so callers shuffle it first.
    A mixed target (the default) takes up to two easy, two medium and one hard
    clue. A numeric target takes clues of that difficulty. Either way, missing
    slots are filled with any remaining clues.
    """
    if not target_difficulty or target_difficulty == MIXED:
        selected = []
        for difficulty, quota in MIXED_QUOTAS:
            selected.extend([c for c in available if c.difficulty == difficulty][:quota])
    else:
        wanted = int(target_difficulty)
        selected = [c for c in available if c.difficulty == wanted][:count]

    for clue in available:
        if len(selected) >= count:
            break
        if clue not in selected:
            selected.append(clue)
    return selected[:count]


def average_difficulty(clues: Sequence) -> int:
    """Mean difficulty rounded half up."""
    return math.floor(sum(c.difficulty for c in clues) / len(clues) + 0.5)


def matches_theme(entry, theme: str) -> bool:
    """Case-insensitive substring match of a theme against category and tags."""
    needle = theme.strip().lower()
    if needle in (entry.category or "").lower():
        return True
    return any(needle in str(tag).lower() for tag in entry.tags or [])
