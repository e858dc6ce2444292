from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

CLUES_PER_PUZZLE = 5

BASE_POINTS_PER_CLUE = 100
TIME_BONUS_WINDOW_SECS = 300
WRONG_ANSWER_PENALTY = 10


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class GameProgress:
    """Progress through one day's puzzle.

    Instances never change; every transition returns a new instance.

    Fields:
    - total_questions: number of clues in the puzzle
    - question_index: 0-based index of the clue being played
    - hint_penalties: accumulated hint points
    - hints_used: number of hints bought over the whole game
    - wrong_answers: number of incorrect submissions
    - question_hints: hints bought per clue
    - completed: whether every clue has been solved
    """

    total_questions: int = CLUES_PER_PUZZLE
    question_index: int = 0
    hint_penalties: int = 0
    hints_used: int = 0
    wrong_answers: int = 0
    question_hints: Tuple[int, ...] = ()
    completed: bool = False

    def __post_init__(self):
        # One hint counter per question, whatever the caller passed.
        missing = self.total_questions - len(self.question_hints)
        if missing > 0:
            object.__setattr__(self, "question_hints", tuple(self.question_hints) + (0,) * missing)

    @classmethod
    def start(cls, total_questions: int = CLUES_PER_PUZZLE) -> "GameProgress":
        return cls(total_questions=total_questions)

    @property
    def clue_number(self) -> int:
        """1-based clue number of the current question."""
        return self.question_index + 1

    @property
    def is_last_question(self) -> bool:
        return self.question_index >= self.total_questions - 1


def record_hint(progress: GameProgress, penalty: int) -> GameProgress:
    """Bill one hint against the current question."""
    if progress.completed:
        raise ValueError("Cannot use hints on a completed game.")
    hints = list(progress.question_hints)
    hints[progress.question_index] += 1
    return replace(
        progress,
        hint_penalties=progress.hint_penalties + penalty,
        hints_used=progress.hints_used + 1,
        question_hints=tuple(hints),
    )


def record_wrong_answer(progress: GameProgress) -> GameProgress:
    return replace(progress, wrong_answers=progress.wrong_answers + 1)


def advance(progress: GameProgress) -> GameProgress:
    """Move to the next clue, or mark the game completed after the last one."""
    if progress.is_last_question:
        return replace(progress, completed=True)
    return replace(progress, question_index=progress.question_index + 1)


# PUBLIC_INTERFACE
def final_score(progress: GameProgress, total_time_secs: int) -> int:
    """Score a finished game.

    100 points per clue, plus one point per second under five minutes, minus
    hint penalties and 10 points per wrong answer.
    """
    base = progress.total_questions * BASE_POINTS_PER_CLUE
    time_bonus = max(0, TIME_BONUS_WINDOW_SECS - total_time_secs)
    return base + time_bonus - progress.hint_penalties - progress.wrong_answers * WRONG_ANSWER_PENALTY


def performance_grade(hints: int) -> str:
    """Bucket a per-clue hint count for the results grid."""
    if hints == 0:
        return "perfect"
    if hints <= 2:
        return "good"
    if hints <= 4:
        return "struggled"
    return "heavy-struggle"
