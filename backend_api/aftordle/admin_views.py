from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.contrib.auth import authenticate
from django.db import transaction
from django.db.models import Avg
from django.http import HttpResponse
from django.utils import timezone
from drf_yasg.utils import swagger_auto_schema
from rest_framework import permissions, status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from .authentication import IsAdminToken, StaticTokenAuthentication
from .csv_io import read_puzzles_csv, write_puzzles_csv
from .models import ClueLibraryEntry, DailyPuzzle, GameResult, PuzzleClue
from .serializers import (
    AdminDailyPuzzleSerializer,
    AdminLoginRequestSerializer,
    DailyPuzzleInputSerializer,
)

logger = logging.getLogger(__name__)


def save_daily_puzzle(vd: Dict[str, Any], instance: Optional[DailyPuzzle] = None) -> DailyPuzzle:
    """Create or replace a daily puzzle and its clues in one transaction.

    Library clues referenced by ``sourceClueId`` are marked used on the puzzle date.
    """
    with transaction.atomic():
        puzzle = instance or DailyPuzzle()
        puzzle.date = vd["date"]
        puzzle.difficulty = vd.get("difficulty", 1)
        puzzle.is_active = vd.get("isActive", True)
        puzzle.save()
        puzzle.clues.all().delete()
        for number, clue in enumerate(vd["clues"], start=1):
            PuzzleClue.objects.create(
                puzzle=puzzle,
                clue_number=number,
                clue=clue["clue"],
                answer=clue["answer"],
                linking_word=clue["linkingWord"],
                source_clue_id=clue.get("sourceClueId"),
            )
        source_ids = [c["sourceClueId"] for c in vd["clues"] if c.get("sourceClueId")]
        if source_ids:
            ClueLibraryEntry.objects.filter(pk__in=source_ids).update(
                used=True, last_used_date=puzzle.date, updated_at=timezone.now()
            )
    return puzzle


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="admin_login",
    operation_summary="Log in as an administrator",
    operation_description="""
Check staff credentials and return the admin API token.

Request body:
- username, password
""",
    request_body=AdminLoginRequestSerializer,
    tags=["admin"],
)
@api_view(["POST"])
@authentication_classes([])
@permission_classes([permissions.AllowAny])
def admin_login(request):
    """Exchange staff credentials for the admin token."""
    serializer = AdminLoginRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data

    user = authenticate(request, username=vd["username"], password=vd["password"])
    if user is None or not user.is_staff:
        logger.warning("Failed admin login for %r", vd["username"])
        return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

    return Response(
        {
            "success": True,
            "token": settings.ADMIN_API_TOKEN,
            "user": {"id": user.id, "username": user.username, "email": user.email, "isAdmin": True},
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="create_daily_puzzle",
    operation_summary="Create a daily puzzle",
    operation_description="""
Request body:
- date (YYYY-MM-DD, required, unique)
- difficulty (1-5, optional)
- isActive (bool, optional)
- clues: exactly 5 of {clue, answer, linkingWord}; the linking word must be a
  middle word of the answer and the clue must not give away answer words.
""",
    request_body=DailyPuzzleInputSerializer,
    responses={201: AdminDailyPuzzleSerializer},
    tags=["admin"],
)
@api_view(["GET", "POST"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def daily_puzzles(request):
    """List daily puzzles (newest first) or create a new one."""
    if request.method == "GET":
        qs = DailyPuzzle.objects.prefetch_related("clues").order_by("-date")
        return Response(AdminDailyPuzzleSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    serializer = DailyPuzzleInputSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    puzzle = save_daily_puzzle(serializer.validated_data)
    logger.info("Created daily puzzle %s for %s", puzzle.id, puzzle.date)
    return Response(AdminDailyPuzzleSerializer(puzzle).data, status=status.HTTP_201_CREATED)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="put",
    operation_id="update_daily_puzzle",
    operation_summary="Replace a daily puzzle",
    request_body=DailyPuzzleInputSerializer,
    responses={200: AdminDailyPuzzleSerializer},
    tags=["admin"],
)
@api_view(["GET", "PUT", "DELETE"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def daily_puzzle_detail(request, puzzle_id: int):
    """Fetch, replace or delete one daily puzzle."""
    try:
        puzzle = DailyPuzzle.objects.get(pk=puzzle_id)
    except DailyPuzzle.DoesNotExist:
        return Response({"error": "Daily puzzle not found"}, status=status.HTTP_404_NOT_FOUND)

    if request.method == "GET":
        return Response(AdminDailyPuzzleSerializer(puzzle).data, status=status.HTTP_200_OK)

    if request.method == "DELETE":
        puzzle.delete()
        logger.info("Deleted daily puzzle %s", puzzle_id)
        return Response({"success": True, "message": "Daily puzzle deleted"}, status=status.HTTP_200_OK)

    serializer = DailyPuzzleInputSerializer(data=request.data or {}, context={"instance": puzzle})
    serializer.is_valid(raise_exception=True)
    puzzle = save_daily_puzzle(serializer.validated_data, instance=puzzle)
    return Response(AdminDailyPuzzleSerializer(puzzle).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="admin_dashboard",
    operation_summary="Admin dashboard counters",
    tags=["admin"],
)
@api_view(["GET"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def dashboard(request):
    """Counters for the admin dashboard."""
    today = timezone.localdate()
    week_ago = today - datetime.timedelta(days=7)
    active = DailyPuzzle.objects.filter(is_active=True)
    today_results = GameResult.objects.filter(puzzle__date=today)
    resp = {
        "totalPuzzles": active.count(),
        "futurePuzzles": active.filter(date__gt=today).count(),
        "todayPuzzle": active.filter(date=today).exists(),
        "todayPlays": today_results.count(),
        "todayAvgScore": today_results.aggregate(avg=Avg("score"))["avg"],
        "weekPlays": GameResult.objects.filter(puzzle__date__gte=week_ago, puzzle__date__lte=today).count(),
    }
    return Response(resp, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="bulk_import_daily_puzzles",
    operation_summary="Import many daily puzzles",
    operation_description="""
Accepts either a JSON body {"dailyPuzzles": [...]} using the create payload
shape, or a multipart upload with a CSV "file" whose columns are
date, difficulty, clue_number, clue, answer, linking_word.

Each puzzle is validated and saved on its own; failures are reported per puzzle.
""",
    tags=["admin"],
)
@api_view(["POST"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def bulk_import(request):
    """Import daily puzzles from JSON or CSV, reporting per-puzzle failures."""
    upload = request.FILES.get("file")
    if upload is not None:
        try:
            entries = read_puzzles_csv(upload.read().decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    else:
        entries = (request.data or {}).get("dailyPuzzles")

    if not isinstance(entries, list) or not entries:
        return Response({"error": "Daily puzzles array is required"}, status=status.HTTP_400_BAD_REQUEST)

    successful = 0
    errors: List[str] = []
    for index, entry in enumerate(entries, start=1):
        serializer = DailyPuzzleInputSerializer(data=entry)
        if not serializer.is_valid():
            errors.append(f"Daily puzzle {index}: {serializer.errors}")
            continue
        save_daily_puzzle(serializer.validated_data)
        successful += 1

    logger.info("Bulk import finished: %d successful, %d failed", successful, len(errors))
    return Response(
        {
            "success": True,
            "successful": successful,
            "failed": len(errors),
            "errors": errors,
            "message": f"Import complete: {successful} successful, {len(errors)} failed",
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="export_daily_puzzles",
    operation_summary="Export daily puzzles as CSV",
    tags=["admin"],
)
@api_view(["GET"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def export_csv(request):
    """Download every daily puzzle as CSV, one row per clue."""
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = 'attachment; filename="daily-puzzles.csv"'
    write_puzzles_csv(DailyPuzzle.objects.prefetch_related("clues").order_by("date"), response)
    return response


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="puzzle_by_date",
    operation_summary="Get the daily puzzle of a date, with answers",
    tags=["admin"],
)
@api_view(["GET"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def puzzle_by_date(request, date: datetime.date):
    """Admin view of a puzzle by date, including answers."""
    puzzle = DailyPuzzle.objects.filter(date=date).first()
    if puzzle is None:
        return Response({"error": "Daily puzzle not found"}, status=status.HTTP_404_NOT_FOUND)
    return Response(AdminDailyPuzzleSerializer(puzzle).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="test_answers",
    operation_summary="Answers of a puzzle for automated tests",
    tags=["admin"],
)
@api_view(["GET"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def test_answers(request, puzzle_id: int):
    """Return the answers of a puzzle so end-to-end tests can play it."""
    try:
        puzzle = DailyPuzzle.objects.get(pk=puzzle_id)
    except DailyPuzzle.DoesNotExist:
        return Response({"error": "Puzzle not found"}, status=status.HTTP_404_NOT_FOUND)
    answers = [
        {"clueNumber": c.clue_number, "answer": c.answer}
        for c in puzzle.clues.order_by("clue_number")
    ]
    return Response({"puzzleId": puzzle.id, "date": puzzle.date.isoformat(), "answers": answers})
