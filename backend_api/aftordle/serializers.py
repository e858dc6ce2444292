from __future__ import annotations

from typing import Dict, Any

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .hints.progress import CLUES_PER_PUZZLE
from .library import MIXED
from .models import LIBRARY_MAX_DIFFICULTY, ClueLibraryEntry, DailyPuzzle, PuzzleClue, validate_clue_fields


# PUBLIC_INTERFACE
class PublicClueSerializer(serializers.Serializer):
    """A clue as shown to players: never includes the answer."""

    clueNumber = serializers.IntegerField(source="clue_number")
    clue = serializers.CharField()


# PUBLIC_INTERFACE
class TodayPuzzleResponseSerializer(serializers.Serializer):
    """Response payload for today's puzzle."""

    id = serializers.IntegerField()
    date = serializers.DateField()
    difficulty = serializers.IntegerField()
    plays = serializers.IntegerField()
    avgScore = serializers.FloatField(source="avg_score")
    clues = PublicClueSerializer(many=True)
    totalClues = serializers.IntegerField()


# PUBLIC_INTERFACE
class ValidateClueRequestSerializer(serializers.Serializer):
    """Request payload to check one answer."""

    clueNumber = serializers.IntegerField(min_value=1, max_value=CLUES_PER_PUZZLE)
    answer = serializers.CharField(trim_whitespace=True)


# PUBLIC_INTERFACE
class ValidateAllRequestSerializer(serializers.Serializer):
    """Request payload to check every answer of the puzzle at once."""

    answers = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        min_length=CLUES_PER_PUZZLE,
        max_length=CLUES_PER_PUZZLE,
    )


# PUBLIC_INTERFACE
class HintRequestSerializer(serializers.Serializer):
    """Request payload for a hint.

    Fields:
    - clueNumber: 1-based clue number in today's puzzle
    - wordIndex: optional; omit it to get the word structure
    - hintType: firstLetter | fullWord | checkLinkingAvailable; required with wordIndex
    - playId: optional client play identifier; enables server-side linking word gating

    Range checks of wordIndex and the hint type value are left to the hint
    policy, which reports them as validation errors without charging.
    """

    clueNumber = serializers.IntegerField(min_value=1, max_value=CLUES_PER_PUZZLE)
    wordIndex = serializers.IntegerField(
        required=False,
        allow_null=True,
        error_messages={"invalid": "Invalid wordIndex", "max_string_length": "Invalid wordIndex"},
    )
    hintType = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    playId = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        if attrs.get("wordIndex") is not None and not attrs.get("hintType"):
            raise serializers.ValidationError("hintType is required when wordIndex is specified")
        return attrs


# PUBLIC_INTERFACE
class HintStateRequestSerializer(serializers.Serializer):
    """Request payload for the blank word state of a clue."""

    clueNumber = serializers.IntegerField(min_value=1, max_value=CLUES_PER_PUZZLE)


# PUBLIC_INTERFACE
class WordStructureSerializer(serializers.Serializer):
    """One word of a hint response."""

    wordIndex = serializers.IntegerField()
    length = serializers.IntegerField()
    isLinking = serializers.BooleanField()
    letters = serializers.ListField(child=serializers.CharField(trim_whitespace=False))
    state = serializers.CharField()
    selectable = serializers.BooleanField()


# PUBLIC_INTERFACE
class HintResponseSerializer(serializers.Serializer):
    """Response payload for a structure or word hint."""

    clueNumber = serializers.IntegerField()
    hintType = serializers.CharField()
    wordStructure = WordStructureSerializer(many=True, required=False)
    penalty = serializers.IntegerField()
    revealedWord = serializers.DictField(required=False)
    linkingAvailable = serializers.BooleanField(required=False)


# PUBLIC_INTERFACE
class SubmitResultRequestSerializer(serializers.Serializer):
    """Request payload for a finished game."""

    score = serializers.IntegerField()
    completionTime = serializers.IntegerField(min_value=0)
    hintsUsed = serializers.IntegerField(required=False, min_value=0, default=0)
    wrongAnswers = serializers.IntegerField(required=False, min_value=0, default=0)
    hintBreakdown = serializers.JSONField(required=False, default=dict)
    clueResults = serializers.JSONField(required=False, default=list)
    isTest = serializers.BooleanField(required=False, default=False)


# PUBLIC_INTERFACE
class ClueInputSerializer(serializers.Serializer):
    """One clue in an admin create/update/import payload."""

    clue = serializers.CharField()
    answer = serializers.CharField(max_length=200)
    linkingWord = serializers.CharField(max_length=64)
    sourceClueId = serializers.IntegerField(required=False, allow_null=True)

    def validate_sourceClueId(self, value):
        if value is not None and not ClueLibraryEntry.objects.filter(pk=value, is_active=True).exists():
            raise serializers.ValidationError("Library clue not found.")
        return value

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validate_clue_fields(attrs["clue"], attrs["answer"], attrs["linkingWord"])
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return attrs


# PUBLIC_INTERFACE
class DailyPuzzleInputSerializer(serializers.Serializer):
    """Admin payload to create or replace a daily puzzle."""

    date = serializers.DateField()
    difficulty = serializers.IntegerField(required=False, min_value=1, max_value=5, default=1)
    isActive = serializers.BooleanField(required=False, default=True)
    clues = ClueInputSerializer(many=True)

    def validate_clues(self, value):
        if len(value) != CLUES_PER_PUZZLE:
            raise serializers.ValidationError(f"Exactly {CLUES_PER_PUZZLE} clues are required.")
        return value

    def validate_date(self, value):
        existing = DailyPuzzle.objects.filter(date=value)
        instance = self.context.get("instance")
        if instance is not None:
            existing = existing.exclude(pk=instance.pk)
        if existing.exists():
            raise serializers.ValidationError("A daily puzzle already exists for this date.")
        return value


# PUBLIC_INTERFACE
class AdminClueSerializer(serializers.ModelSerializer):
    """A clue including its answer, for admins."""

    clueNumber = serializers.IntegerField(source="clue_number")
    linkingWord = serializers.CharField(source="linking_word")
    sourceClueId = serializers.IntegerField(source="source_clue_id", allow_null=True)

    class Meta:
        model = PuzzleClue
        fields = ["clueNumber", "clue", "answer", "linkingWord", "sourceClueId"]


# PUBLIC_INTERFACE
class AdminDailyPuzzleSerializer(serializers.ModelSerializer):
    """A daily puzzle with its clues and statistics, for admins."""

    isActive = serializers.BooleanField(source="is_active")
    avgScore = serializers.FloatField(source="avg_score")
    avgTime = serializers.FloatField(source="avg_time")
    clues = AdminClueSerializer(many=True)

    class Meta:
        model = DailyPuzzle
        fields = ["id", "date", "difficulty", "isActive", "plays", "avgScore", "avgTime", "clues"]


# PUBLIC_INTERFACE
class AdminLoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


# PUBLIC_INTERFACE
class LibraryClueInputSerializer(serializers.Serializer):
    """Admin payload to add or replace a clue library entry."""

    clue = serializers.CharField()
    answer = serializers.CharField(max_length=200)
    linkingWord = serializers.CharField(max_length=64)
    difficulty = serializers.IntegerField(required=False, min_value=1, max_value=LIBRARY_MAX_DIFFICULTY, default=2)
    category = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    tags = serializers.ListField(child=serializers.CharField(), required=False, default=list)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validate_clue_fields(attrs["clue"], attrs["answer"], attrs["linkingWord"])
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return attrs


# PUBLIC_INTERFACE
class LibraryClueSerializer(serializers.ModelSerializer):
    """A clue library entry with its usage, for admins."""

    linkingWord = serializers.CharField(source="linking_word")
    lastUsedDate = serializers.DateField(source="last_used_date")
    createdAt = serializers.DateTimeField(source="created_at")
    usageCount = serializers.SerializerMethodField()

    class Meta:
        model = ClueLibraryEntry
        fields = [
            "id", "clue", "answer", "linkingWord", "difficulty", "category", "tags",
            "used", "lastUsedDate", "usageCount", "createdAt",
        ]

    def get_usageCount(self, obj) -> int:
        count = getattr(obj, "usage_count", None)
        return obj.puzzle_clues.count() if count is None else count


# PUBLIC_INTERFACE
class GeneratePuzzleRequestSerializer(serializers.Serializer):
    """Admin payload to draft a daily puzzle from unused library clues.

    Fields:
    - date: day of the new puzzle; must not have a puzzle yet
    - targetDifficulty: mixed (default) or 1, 2, 3
    - theme: optional text matched against category and tags
    """

    date = serializers.DateField()
    targetDifficulty = serializers.ChoiceField(
        choices=[MIXED, "1", "2", "3"], required=False, allow_blank=True, allow_null=True
    )
    theme = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_date(self, value):
        if DailyPuzzle.objects.filter(date=value).exists():
            raise serializers.ValidationError("A daily puzzle already exists for this date.")
        return value
