from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.db.models import Count, Q
from django.http import HttpResponse
from django.utils import timezone
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from .admin_views import save_daily_puzzle
from .authentication import IsAdminToken, StaticTokenAuthentication
from .csv_io import read_library_csv, write_library_csv
from .hints.progress import CLUES_PER_PUZZLE
from .library import average_difficulty, matches_theme, select_clues
from .models import ClueLibraryEntry
from .serializers import (
    AdminDailyPuzzleSerializer,
    DailyPuzzleInputSerializer,
    GeneratePuzzleRequestSerializer,
    LibraryClueInputSerializer,
    LibraryClueSerializer,
)

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 10


def _int_param(request, name: str) -> Optional[int]:
    """Read an optional non-negative integer query parameter; ValueError if malformed."""
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return None
    value = int(raw)
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


def _apply_entry(entry: ClueLibraryEntry, vd: Dict[str, Any]) -> ClueLibraryEntry:
    entry.clue = vd["clue"]
    entry.answer = vd["answer"]
    entry.linking_word = vd["linkingWord"]
    entry.difficulty = vd.get("difficulty", 2)
    entry.category = vd.get("category") or ""
    entry.tags = vd.get("tags") or []
    entry.save()
    return entry


def _active_entry(clue_id: int) -> Optional[ClueLibraryEntry]:
    return ClueLibraryEntry.objects.filter(pk=clue_id, is_active=True).first()


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="list_library_clues",
    operation_summary="Search the clue library",
    operation_description="""
Active library clues, newest first, with how often each was scheduled.

Query parameters (all optional):
- search: text matched against clue, answer and category
- difficulty: 1, 2 or 3
- used: true | false
- category: exact category
- limit, offset: pagination
""",
    manual_parameters=[
        openapi.Parameter("search", openapi.IN_QUERY, type=openapi.TYPE_STRING),
        openapi.Parameter("difficulty", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        openapi.Parameter("used", openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN),
        openapi.Parameter("category", openapi.IN_QUERY, type=openapi.TYPE_STRING),
        openapi.Parameter("limit", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
        openapi.Parameter("offset", openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    ],
    tags=["clue-library"],
)
@swagger_auto_schema(
    method="post",
    operation_id="create_library_clue",
    operation_summary="Add a clue to the library",
    request_body=LibraryClueInputSerializer,
    responses={201: LibraryClueSerializer},
    tags=["clue-library"],
)
@api_view(["GET", "POST"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def library_clues(request):
    """List library clues with filters, or add a new one."""
    if request.method == "POST":
        serializer = LibraryClueInputSerializer(data=request.data or {})
        serializer.is_valid(raise_exception=True)
        entry = _apply_entry(ClueLibraryEntry(), serializer.validated_data)
        logger.info("Added library clue %s (%s)", entry.id, entry.answer)
        return Response(LibraryClueSerializer(entry).data, status=status.HTTP_201_CREATED)

    try:
        difficulty = _int_param(request, "difficulty")
        limit = _int_param(request, "limit")
        offset = _int_param(request, "offset") or 0
    except ValueError as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    qs = ClueLibraryEntry.objects.filter(is_active=True)
    search = (request.query_params.get("search") or "").strip()
    if search:
        qs = qs.filter(Q(clue__icontains=search) | Q(answer__icontains=search) | Q(category__icontains=search))
    if difficulty is not None:
        qs = qs.filter(difficulty=difficulty)
    used = request.query_params.get("used")
    if used == "true":
        qs = qs.filter(used=True)
    elif used == "false":
        qs = qs.filter(used=False)
    category = request.query_params.get("category")
    if category:
        qs = qs.filter(category=category)

    total = qs.count()
    qs = qs.annotate(usage_count=Count("puzzle_clues"))
    page = list(qs[offset:offset + limit] if limit is not None else qs[offset:])
    return Response(
        {
            "clues": LibraryClueSerializer(page, many=True).data,
            "total": total,
            "pagination": {"limit": limit, "offset": offset, "hasMore": total > offset + len(page)},
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="put",
    operation_id="update_library_clue",
    operation_summary="Replace a library clue",
    request_body=LibraryClueInputSerializer,
    responses={200: LibraryClueSerializer},
    tags=["clue-library"],
)
@api_view(["GET", "PUT", "DELETE"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def library_clue_detail(request, clue_id: int):
    """Fetch, replace or deactivate one library clue."""
    entry = _active_entry(clue_id)
    if entry is None:
        return Response({"error": "Clue not found"}, status=status.HTTP_404_NOT_FOUND)

    if request.method == "GET":
        return Response(LibraryClueSerializer(entry).data, status=status.HTTP_200_OK)

    if request.method == "DELETE":
        entry.is_active = False
        entry.save(update_fields=["is_active", "updated_at"])
        logger.info("Deactivated library clue %s", clue_id)
        return Response({"success": True, "message": "Clue deleted successfully"}, status=status.HTTP_200_OK)

    serializer = LibraryClueInputSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    entry = _apply_entry(entry, serializer.validated_data)
    return Response(LibraryClueSerializer(entry).data, status=status.HTTP_200_OK)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="library_stats",
    operation_summary="Clue library counters",
    operation_description="""
Response:
- totalClues, unusedClues
- possiblePuzzles / daysOfContent: unused clues divided by five
- categories: list of {category, count}
- difficultyBreakdown: list of {difficulty, count}
""",
    tags=["clue-library"],
)
@api_view(["GET"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def library_stats(request):
    """How much scheduling material the library still holds."""
    active = ClueLibraryEntry.objects.filter(is_active=True)
    unused = active.filter(used=False).count()
    possible = unused // CLUES_PER_PUZZLE
    categories = active.exclude(category="").values("category").annotate(count=Count("id")).order_by("category")
    difficulties = active.values("difficulty").annotate(count=Count("id")).order_by("difficulty")
    return Response(
        {
            "totalClues": active.count(),
            "unusedClues": unused,
            "possiblePuzzles": possible,
            "daysOfContent": possible,
            "categories": list(categories),
            "difficultyBreakdown": list(difficulties),
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="generate_puzzle",
    operation_summary="Draft a daily puzzle from unused library clues",
    operation_description="""
Picks five unused clues in random order, preferring a mix of difficulties or
the requested one. Nothing is saved: review the draft and send it to
save-generated-puzzle.

Response has the create payload shape:
- date, difficulty (rounded mean of the picked clues)
- clues: list of {clueNumber, clue, answer, linkingWord, sourceClueId}
""",
    request_body=GeneratePuzzleRequestSerializer,
    tags=["clue-library"],
)
@api_view(["POST"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def generate_puzzle(request):
    """Draft a puzzle for a date from the unused part of the library."""
    serializer = GeneratePuzzleRequestSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    vd = serializer.validated_data

    available = list(ClueLibraryEntry.objects.filter(used=False, is_active=True).order_by("?"))
    theme = (vd.get("theme") or "").strip()
    if theme:
        available = [entry for entry in available if matches_theme(entry, theme)]
    if len(available) < CLUES_PER_PUZZLE:
        return Response(
            {"error": f"Only {len(available)} unused clues available. Need at least {CLUES_PER_PUZZLE}."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    selected = select_clues(available, vd.get("targetDifficulty"))
    return Response(
        {
            "date": vd["date"].isoformat(),
            "difficulty": average_difficulty(selected),
            "clues": [
                {
                    "clueNumber": number,
                    "clue": entry.clue,
                    "answer": entry.answer,
                    "linkingWord": entry.linking_word,
                    "sourceClueId": entry.id,
                }
                for number, entry in enumerate(selected, start=1)
            ],
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="save_generated_puzzle",
    operation_summary="Save a drafted puzzle",
    operation_description="""
Saves a draft from generate-puzzle (possibly edited) as a daily puzzle.
Clues carrying sourceClueId are linked to their library entry, which is then
marked used on the puzzle date.
""",
    request_body=DailyPuzzleInputSerializer,
    responses={201: AdminDailyPuzzleSerializer},
    tags=["clue-library"],
)
@api_view(["POST"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def save_generated_puzzle(request):
    """Persist a generated draft and consume its library clues."""
    serializer = DailyPuzzleInputSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    puzzle = save_daily_puzzle(serializer.validated_data)
    logger.info("Saved generated puzzle %s for %s", puzzle.id, puzzle.date)
    return Response(AdminDailyPuzzleSerializer(puzzle).data, status=status.HTTP_201_CREATED)


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="post",
    operation_id="bulk_import_library_clues",
    operation_summary="Import many library clues",
    operation_description="""
Accepts either a JSON body {"clues": [...]} using the add payload shape, or a
multipart upload with a CSV "file" having at least the columns clue, answer,
linking_word (optional: difficulty, category, tags separated by ";").

Each row is validated and saved on its own; the first ten failures are reported.
""",
    tags=["clue-library"],
)
@api_view(["POST"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def bulk_import_clues(request):
    """Add library clues from JSON or CSV, reporting per-row failures."""
    upload = request.FILES.get("file")
    if upload is not None:
        try:
            rows = read_library_csv(upload.read().decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    else:
        rows = (request.data or {}).get("clues")

    if not isinstance(rows, list) or not rows:
        return Response({"error": "Clues array is required"}, status=status.HTTP_400_BAD_REQUEST)

    successful = 0
    errors: List[str] = []
    for index, row in enumerate(rows, start=1):
        serializer = LibraryClueInputSerializer(data=row)
        if not serializer.is_valid():
            errors.append(f"Row {index}: {serializer.errors}")
            continue
        _apply_entry(ClueLibraryEntry(), serializer.validated_data)
        successful += 1

    logger.info("Library import finished: %d successful, %d failed", successful, len(errors))
    return Response(
        {
            "successful": successful,
            "failed": len(errors),
            "errors": errors[:MAX_REPORTED_ERRORS],
            "message": f"Import complete: {successful} successful, {len(errors)} failed",
        },
        status=status.HTTP_200_OK,
    )


# PUBLIC_INTERFACE
@swagger_auto_schema(
    method="get",
    operation_id="export_library_clues",
    operation_summary="Export the clue library",
    operation_description="CSV download by default; ?format=json returns {clues, exportedAt, totalCount}.",
    tags=["clue-library"],
)
@api_view(["GET"])
@authentication_classes([StaticTokenAuthentication])
@permission_classes([IsAdminToken])
def export_clues(request):
    """Download every active library clue as CSV or JSON."""
    entries = ClueLibraryEntry.objects.filter(is_active=True).annotate(usage_count=Count("puzzle_clues"))
    now = timezone.now()
    if request.query_params.get("format") == "json":
        data = LibraryClueSerializer(entries, many=True).data
        return Response(
            {"clues": data, "exportedAt": now.isoformat(), "totalCount": len(data)},
            status=status.HTTP_200_OK,
        )

    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="clue-library-{now.date().isoformat()}.csv"'
    write_library_csv(entries, response)
    return response
