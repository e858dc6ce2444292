import datetime
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from .models import DailyPuzzle, PuzzleClue

DEFAULT_CLUES: List[Dict[str, Any]] = [
    {"clue": "Pop singer's red planet invasion film", "answer": "BRUNO MARS ATTACKS", "linkingWord": "MARS"},
    {"clue": "Sandwich spread for a clumsy catcher", "answer": "PEANUT BUTTER FINGERS", "linkingWord": "BUTTER"},
    {"clue": "Galactic saga meets English dynastic conflicts", "answer": "STAR WARS OF THE ROSES", "linkingWord": "WARS"},
    {"clue": "Fast food order that rules a drive-thru chain", "answer": "CHEESE BURGER KING", "linkingWord": "BURGER"},
    {"clue": "Orchard dessert for presenting data slices", "answer": "APPLE PIE CHART", "linkingWord": "PIE"},
]


# PUBLIC_INTERFACE
def ensure_daily_puzzle(date: Optional[datetime.date] = None, clues: Optional[List[Dict[str, Any]]] = None) -> bool:
    """Ensure a playable puzzle exists for ``date`` (default today).

    Returns True if a puzzle was created, False if one was already present.
    """
    date = date or timezone.localdate()
    if DailyPuzzle.objects.filter(date=date).exists():
        return False
    with transaction.atomic():
        puzzle = DailyPuzzle.objects.create(date=date, difficulty=1)
        PuzzleClue.objects.bulk_create([
            PuzzleClue(
                puzzle=puzzle,
                clue_number=number,
                clue=c["clue"],
                answer=c["answer"].upper(),
                linking_word=c["linkingWord"].upper(),
            )
            for number, c in enumerate(clues or DEFAULT_CLUES, start=1)
        ])
    return True
