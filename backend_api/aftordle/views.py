from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Avg, Count, Max, Min
from django.utils import timezone
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .hints import HintValidationError, LinkingWordLocked, answers_match, structure_reveal, word_hint
from .hints.policy import HINT_FULL_WORD
from .models import DailyPuzzle, GameResult, HintEvent, PuzzleClue
from .serializers import (
    HintRequestSerializer,
    HintStateRequestSerializer,
    HintResponseSerializer,
    SubmitResultRequestSerializer,
    TodayPuzzleResponseSerializer,
    ValidateAllRequestSerializer,
    ValidateClueRequestSerializer,
    WordStructureSerializer,
)

logger = logging.getLogger(__name__)


def _today() -> datetime.date:
    """Today's date in the configured puzzle time zone."""
    return timezone.localdate()


def _todays_puzzle() -> Optional[DailyPuzzle]:
    return DailyPuzzle.objects.filter(date=_today(), is_active=True).first()


def _no_puzzle_response() -> Response:
    return Response(
        {"error": "No puzzle available for today", "date": _today().isoformat()},
        status=status.HTTP_404_NOT_FOUND,
    )


def _fully_revealed_for_play(clue: PuzzleClue, play_id: str) -> List[int]:
    """Word indices the given play already bought a full reveal for."""
    return list(
        HintEvent.objects.filter(play_id=play_id, clue=clue, hint_type=HINT_FULL_WORD)
        .values_list("word_index", flat=True)
    )


def _first_error(errors: Dict[str, Any]) -> str:
    """Flatten DRF serializer errors into the single ``error`` message clients read."""
    for messages in errors.values():
        if isinstance(messages, dict):
            return _first_error(messages)
        if messages:
            return str(messages[0])
    return "Invalid request"


# PUBLIC_INTERFACE
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def health(request):
    """Health check endpoint for the API.

    Returns:
    - 200 OK with {"status": "OK", "timestamp": ..., "version": ...}
    """
    return Response({"status": "OK", "timestamp": timezone.now().isoformat(), "version": "1.0.0"})


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="today_puzzle",
    operation_summary="Get today's puzzle",
    operation_description="""
Return today's active daily puzzle with its clues. Answers are never included.

Response:
- id, date, difficulty, plays, avgScore
- clues: list of {clueNumber, clue}
- totalClues
""",
    responses={200: TodayPuzzleResponseSerializer},
    tags=["puzzles"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def today_puzzle(request):
    """Serve today's puzzle without answers."""
    puzzle = _todays_puzzle()
    if puzzle is None:
        return _no_puzzle_response()

    clues = list(puzzle.clues.order_by("clue_number"))
    if not clues:
        return Response(
            {"error": "No clues found for today's puzzle", "date": _today().isoformat()},
            status=status.HTTP_404_NOT_FOUND,
        )

    resp = {
        "id": puzzle.id,
        "date": puzzle.date,
        "difficulty": puzzle.difficulty,
        "plays": puzzle.plays,
        "avg_score": puzzle.avg_score,
        "clues": clues,
        "totalClues": len(clues),
    }
    return Response(TodayPuzzleResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="validate_clue",
    operation_summary="Check the answer to one clue",
    operation_description="""
Compare an answer with today's clue, ignoring case, punctuation and spacing.

Request body:
- clueNumber (int, required)
- answer (string, required)

Response:
- correct, clueNumber, dailyPuzzleId
- linkingWord and fullAnswer when correct
""",
    request_body=ValidateClueRequestSerializer,
    tags=["puzzles"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def validate_clue(request):
    """Validate the answer to a single clue of today's puzzle."""
    serializer = ValidateClueRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data

    puzzle = _todays_puzzle()
    if puzzle is None:
        return _no_puzzle_response()
    clue = puzzle.clues.filter(clue_number=vd["clueNumber"]).first()
    if clue is None:
        return Response({"error": "Clue not found"}, status=status.HTTP_404_NOT_FOUND)

    is_correct = answers_match(vd["answer"], clue.answer)
    resp: Dict[str, Any] = {
        "correct": is_correct,
        "clueNumber": clue.clue_number,
        "dailyPuzzleId": puzzle.id,
    }
    if is_correct:
        resp["linkingWord"] = clue.linking_word
        resp["fullAnswer"] = clue.answer
    return Response(resp, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="get_hint",
    operation_summary="Request a hint for a clue",
    operation_description="""
Without wordIndex, reveal the word structure of the answer (5 points).
With wordIndex and hintType, reveal the first letter or the full word
(3 points, 5 for the linking word). checkLinkingAvailable is free.

Request body:
- clueNumber (int, required)
- wordIndex (int, optional)
- hintType (string, required with wordIndex: firstLetter | fullWord | checkLinkingAvailable)
- playId (string, optional): when sent, the linking word is only revealed
  after this play fully revealed every other word

Errors: 400 for an invalid wordIndex or hintType, 403 when the linking word
is still locked, 404 when there is no puzzle or clue. Errors cost nothing.
""",
    request_body=HintRequestSerializer,
    responses={200: HintResponseSerializer},
    tags=["puzzles", "hints"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def get_hint(request):
    """Serve a structure or word hint for a clue of today's puzzle."""
    serializer = HintRequestSerializer(data=request.data or {})
    if not serializer.is_valid():
        return Response({"error": _first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)
    vd = serializer.validated_data
    word_index = vd.get("wordIndex")
    hint_type = vd.get("hintType")
    play_id = vd.get("playId") or None

    puzzle = _todays_puzzle()
    if puzzle is None:
        return _no_puzzle_response()
    clue = puzzle.clues.filter(clue_number=vd["clueNumber"]).first()
    if clue is None:
        return Response({"error": "Clue not found"}, status=status.HTTP_404_NOT_FOUND)

    try:
        if word_index is None:
            payload = structure_reveal(clue.answer, clue.linking_word)
        else:
            fully_revealed = _fully_revealed_for_play(clue, play_id) if play_id else None
            payload = word_hint(clue.answer, clue.linking_word, word_index, hint_type, fully_revealed)
    except LinkingWordLocked as e:
        return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)
    except HintValidationError as e:
        logger.info("Invalid hint request for clue %s: %s", clue.clue_number, e)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    if play_id:
        HintEvent.objects.create(
            play_id=play_id,
            clue=clue,
            word_index=word_index,
            hint_type=payload["hintType"],
            penalty=payload["penalty"],
        )
    logger.debug("Served %s hint for clue %s word %s", payload["hintType"], clue.clue_number, word_index)

    resp = {"clueNumber": clue.clue_number, **payload}
    return Response(HintResponseSerializer(resp).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="get_hint_state",
    operation_summary="Blank word state of a clue",
    operation_description="""
Return the unrevealed word layout of a clue so a client can reset its display.
This is free and does not count as a structure hint.

Request body:
- clueNumber (int, required)

Response:
- clueNumber, wordStructure (every word empty), structureRevealed (always false)
""",
    request_body=HintStateRequestSerializer,
    tags=["puzzles", "hints"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def get_hint_state(request):
    """Serve the blank word layout of a clue without charging for it."""
    serializer = HintStateRequestSerializer(data=request.data or {})
    if not serializer.is_valid():
        return Response({"error": _first_error(serializer.errors)}, status=status.HTTP_400_BAD_REQUEST)

    puzzle = _todays_puzzle()
    if puzzle is None:
        return _no_puzzle_response()
    clue = puzzle.clues.filter(clue_number=serializer.validated_data["clueNumber"]).first()
    if clue is None:
        return Response({"error": "Clue not found"}, status=status.HTTP_404_NOT_FOUND)

    structure = structure_reveal(clue.answer, clue.linking_word)["wordStructure"]
    resp = {
        "clueNumber": clue.clue_number,
        "wordStructure": WordStructureSerializer(structure, many=True).data,
        "structureRevealed": False,
    }
    return Response(resp, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="validate_all",
    operation_summary="Check every answer at once",
    operation_description="""
Request body:
- answers (list of 5 strings, in clue order)

Response:
- allCorrect, correctCount, dailyPuzzleId
- results: list of {clueNumber, correct[, linkingWord, fullAnswer]}
""",
    request_body=ValidateAllRequestSerializer,
    tags=["puzzles"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def validate_all(request):
    """Validate the answers to all clues of today's puzzle."""
    serializer = ValidateAllRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    answers: List[str] = serializer.validated_data["answers"]

    puzzle = _todays_puzzle()
    if puzzle is None:
        return _no_puzzle_response()
    clues = list(puzzle.clues.order_by("clue_number"))
    if len(clues) != len(answers):
        logger.error("Puzzle %s has %d clues, expected %d", puzzle.id, len(clues), len(answers))
        return Response({"error": "Invalid puzzle configuration"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    results: List[Dict[str, Any]] = []
    for clue, answer in zip(clues, answers):
        entry: Dict[str, Any] = {"clueNumber": clue.clue_number, "correct": answers_match(answer, clue.answer)}
        if entry["correct"]:
            entry["linkingWord"] = clue.linking_word
            entry["fullAnswer"] = clue.answer
        results.append(entry)

    correct_count = sum(1 for r in results if r["correct"])
    return Response(
        {
            "allCorrect": correct_count == len(results),
            "correctCount": correct_count,
            "dailyPuzzleId": puzzle.id,
            "results": results,
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="submit_result",
    operation_summary="Submit a finished game",
    operation_description="""
Save the result of a finished game and update the puzzle's statistics.
Results flagged isTest are acknowledged but not saved.

Request body:
- score (int, required), completionTime (int seconds, required)
- hintsUsed, wrongAnswers (int, optional)
- hintBreakdown (object, optional), clueResults (list, optional)
- isTest (bool, optional)
""",
    request_body=SubmitResultRequestSerializer,
    tags=["puzzles"],
)
@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_result(request):
    """Record a finished game for today's puzzle."""
    serializer = SubmitResultRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data

    if vd["isTest"]:
        return Response(
            {"success": True, "isTest": True, "message": "Test result acknowledged but not saved to statistics"},
            status=status.HTTP_200_OK,
        )

    puzzle = _todays_puzzle()
    if puzzle is None:
        return Response({"error": "No active daily puzzle for today"}, status=status.HTTP_404_NOT_FOUND)

    with transaction.atomic():
        result = GameResult.objects.create(
            puzzle=puzzle,
            score=vd["score"],
            completion_time=vd["completionTime"],
            hints_used=vd["hintsUsed"],
            wrong_answers=vd["wrongAnswers"],
            hint_breakdown=vd["hintBreakdown"] or {},
            clue_results=vd["clueResults"] or [],
        )
        puzzle.refresh_statistics()
    logger.info("Saved result %s for puzzle %s (score %s)", result.id, puzzle.date, result.score)

    return Response(
        {"success": True, "resultId": result.id, "message": "Result saved successfully"},
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="puzzle_stats",
    operation_summary="Get statistics of a daily puzzle",
    operation_description="Aggregate statistics for the puzzle of the given date (default today).",
    tags=["puzzles"],
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def puzzle_stats(request, date: Optional[datetime.date] = None):
    """Aggregate results of one daily puzzle."""
    date = date or _today()
    puzzle = DailyPuzzle.objects.filter(date=date).first()
    if puzzle is None:
        return Response({"error": "No daily puzzle found for this date"}, status=status.HTTP_404_NOT_FOUND)

    agg = puzzle.results.aggregate(
        totalCompletions=Count("id"),
        actualAvgScore=Avg("score"),
        minScore=Min("score"),
        maxScore=Max("score"),
        actualAvgTime=Avg("completion_time"),
        avgHints=Avg("hints_used"),
        avgWrongAnswers=Avg("wrong_answers"),
    )
    resp = {
        "date": puzzle.date.isoformat(),
        "plays": puzzle.plays,
        "avgScore": puzzle.avg_score,
        "avgTime": puzzle.avg_time,
        "difficulty": puzzle.difficulty,
        **agg,
    }
    return Response(resp, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="get_hint_types",
    operation_summary="List word hint types",
    operation_description="Returns the hint types accepted with a wordIndex.",
    tags=["meta"],
    responses={200: openapi.Response("OK", schema=openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Items(type=openapi.TYPE_STRING)))},
)
@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def get_hint_types(request):
    """List the word-level hint types."""
    return Response(["firstLetter", "fullWord", "checkLinkingAvailable"], status=status.HTTP_200_OK)
