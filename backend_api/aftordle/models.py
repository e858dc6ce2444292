from __future__ import annotations

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from .hints.policy import find_linking_index, split_answer
from .hints.progress import CLUES_PER_PUZZLE

LIBRARY_MAX_DIFFICULTY = 3


# PUBLIC_INTERFACE
class TimeStampedModel(models.Model):
    """Abstract base model providing created/updated timestamps.

    Notes:
        Keep this abstract model free of any logic that would access the Django
        app registry or execute queries at module import time.
    """
    created_at = models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")
    updated_at = models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")

    class Meta:
        abstract = True


# PUBLIC_INTERFACE
class DailyPuzzle(TimeStampedModel):
    """One puzzle per calendar day, made of five clues.

    Fields:
    - date: the day this puzzle is served (unique)
    - difficulty: 1 (easiest) to 5
    - is_active: inactive puzzles are never served to players
    - plays: number of saved results
    - avg_score / avg_time: running averages over saved results
    """
    date = models.DateField(unique=True, db_index=True, help_text="Day this puzzle is served.")
    difficulty = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="Difficulty level (1 = easiest).",
    )
    is_active = models.BooleanField(default=True, help_text="If false, the puzzle is not served.")
    plays = models.PositiveIntegerField(default=0)
    avg_score = models.FloatField(default=0)
    avg_time = models.FloatField(default=0, help_text="Average completion time in seconds.")

    class Meta:
        ordering = ["-date"]
        verbose_name = "Daily Puzzle"
        verbose_name_plural = "Daily Puzzles"

    def refresh_statistics(self) -> None:
        """Recompute plays and averages from saved game results."""
        agg = self.results.aggregate(
            plays=models.Count("id"),
            avg_score=models.Avg("score"),
            avg_time=models.Avg("completion_time"),
        )
        self.plays = agg["plays"] or 0
        self.avg_score = agg["avg_score"] or 0
        self.avg_time = agg["avg_time"] or 0
        self.save(update_fields=["plays", "avg_score", "avg_time", "updated_at"])

    def __str__(self) -> str:  # pragma: no cover
        return f"Puzzle {self.date.isoformat()}"


def validate_clue_fields(clue: str, answer: str, linking_word: str) -> None:
    """Check the authoring rules of a clue.

    - the linking word is one of the answer's words, neither first nor last
    - the clue text gives away no answer word longer than two letters

    Raises django.core.exceptions.ValidationError.
    """
    words = split_answer((answer or "").upper())
    if len(words) < 3:
        raise ValidationError("Answer must have at least three words.")
    if find_linking_index(words, linking_word) is None:
        raise ValidationError("Linking word must be a middle word of the answer.")
    clue_upper = (clue or "").upper()
    forbidden = [w for w in words if len(w) > 2 and w in clue_upper]
    if forbidden:
        raise ValidationError(f"Clue cannot contain these words from the answer: {', '.join(forbidden)}")


def normalize_stored_answer(answer: str) -> str:
    """Upper-case an answer and collapse its whitespace to single spaces."""
    return " ".join(split_answer((answer or "").upper()))


# PUBLIC_INTERFACE
class ClueLibraryEntry(TimeStampedModel):
    """A reusable clue waiting to be scheduled into a daily puzzle.

    Fields:
    - clue / answer / linking_word: same meaning and rules as on PuzzleClue
    - difficulty: 1 (easy) to 3 (hard)
    - category / tags: free-form labels used for search and themed puzzles
    - used / last_used_date: set when a generated puzzle is saved with this clue
    - is_active: deleted entries are only deactivated
    """
    clue = models.TextField()
    answer = models.CharField(max_length=200)
    linking_word = models.CharField(max_length=64)
    difficulty = models.PositiveSmallIntegerField(
        default=2,
        validators=[MinValueValidator(1), MaxValueValidator(LIBRARY_MAX_DIFFICULTY)],
        help_text="1 = easy, 2 = medium, 3 = hard.",
    )
    category = models.CharField(max_length=64, blank=True, default="")
    tags = models.JSONField(default=list, blank=True)
    used = models.BooleanField(default=False, help_text="Already scheduled into a daily puzzle.")
    last_used_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Clue Library Entry"
        verbose_name_plural = "Clue Library"

    def clean(self):
        validate_clue_fields(self.clue, self.answer, self.linking_word)

    def save(self, *args, **kwargs):
        self.answer = normalize_stored_answer(self.answer)
        self.linking_word = (self.linking_word or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.answer} ({self.linking_word})"


# PUBLIC_INTERFACE
class PuzzleClue(TimeStampedModel):
    """A single Before & After clue of a daily puzzle.

    Fields:
    - puzzle: owning daily puzzle
    - clue_number: 1-based position within the puzzle
    - clue: the text shown to the player
    - answer: the compound phrase, stored upper-case
    - linking_word: the seam word shared by both phrases, stored upper-case
    - source_clue: the library entry this clue was scheduled from, if any
    """
    puzzle = models.ForeignKey(DailyPuzzle, on_delete=models.CASCADE, related_name="clues")
    clue_number = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(CLUES_PER_PUZZLE)],
    )
    clue = models.TextField()
    answer = models.CharField(max_length=200)
    linking_word = models.CharField(max_length=64)
    source_clue = models.ForeignKey(
        ClueLibraryEntry, null=True, blank=True, on_delete=models.SET_NULL, related_name="puzzle_clues"
    )

    class Meta:
        ordering = ["puzzle", "clue_number"]
        unique_together = (("puzzle", "clue_number"),)
        verbose_name = "Puzzle Clue"
        verbose_name_plural = "Puzzle Clues"

    def clean(self):
        validate_clue_fields(self.clue, self.answer, self.linking_word)

    def save(self, *args, **kwargs):
        if self.answer:
            self.answer = normalize_stored_answer(self.answer)
        if self.linking_word:
            self.linking_word = self.linking_word.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:  # pragma: no cover
        return f"Clue {self.clue_number} of {self.puzzle}"


# PUBLIC_INTERFACE
class GameResult(models.Model):
    """A finished game submitted by a player.

    Fields:
    - puzzle: the daily puzzle played
    - score: final score
    - completion_time: seconds from start to finish
    - hints_used / wrong_answers: counters over the whole game
    - hint_breakdown / clue_results: free-form JSON detail from the client
    """
    puzzle = models.ForeignKey(DailyPuzzle, on_delete=models.CASCADE, related_name="results")
    score = models.IntegerField()
    completion_time = models.PositiveIntegerField(help_text="Completion time in seconds.")
    hints_used = models.PositiveIntegerField(default=0)
    wrong_answers = models.PositiveIntegerField(default=0)
    hint_breakdown = models.JSONField(default=dict, blank=True)
    clue_results = models.JSONField(default=list, blank=True)
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-completed_at"]
        verbose_name = "Game Result"
        verbose_name_plural = "Game Results"

    def __str__(self) -> str:  # pragma: no cover
        return f"Result #{self.pk} for {self.puzzle}: {self.score}"


# PUBLIC_INTERFACE
class HintEvent(models.Model):
    """A hint served to a client that identified its play with a play id.

    Only recorded when the client sends ``playId``; lets the server check
    that every other word was fully revealed before revealing a linking word.
    """
    play_id = models.CharField(max_length=64, db_index=True)
    clue = models.ForeignKey(PuzzleClue, on_delete=models.CASCADE, related_name="hint_events")
    word_index = models.SmallIntegerField(null=True, blank=True)
    hint_type = models.CharField(max_length=32)
    penalty = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Hint Event"
        verbose_name_plural = "Hint Events"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.hint_type} on word {self.word_index} ({self.play_id})"
