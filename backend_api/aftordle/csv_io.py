from __future__ import annotations

import csv
import io
from typing import Any, Dict, Iterable, List, TextIO

from .models import ClueLibraryEntry, DailyPuzzle

CSV_COLUMNS = ["date", "difficulty", "clue_number", "clue", "answer", "linking_word"]


# PUBLIC_INTERFACE
def write_puzzles_csv(puzzles: Iterable[DailyPuzzle], stream: TextIO) -> int:
    """Write one row per clue, ordered by date then clue number.

    Returns the number of rows written (excluding the header).
    """
    writer = csv.writer(stream)
    writer.writerow(CSV_COLUMNS)
    rows = 0
    for puzzle in puzzles:
        for clue in puzzle.clues.order_by("clue_number"):
            writer.writerow([
                puzzle.date.isoformat(),
                puzzle.difficulty,
                clue.clue_number,
                clue.clue,
                clue.answer,
                clue.linking_word,
            ])
            rows += 1
    return rows


# PUBLIC_INTERFACE
def read_puzzles_csv(text: str) -> List[Dict[str, Any]]:
    """Group CSV rows into daily puzzle payloads.

    Rows sharing a date form one puzzle; clues are ordered by clue_number.
    The result uses the admin API payload shape:
    [{"date", "difficulty", "clues": [{"clue", "answer", "linkingWord"}, ...]}, ...]

    Raises ValueError when a required column is missing.
    """
    reader = csv.DictReader(io.StringIO(text))
    missing = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")

    grouped: Dict[str, Dict[str, Any]] = {}
    for row in reader:
        date = (row["date"] or "").strip()
        entry = grouped.setdefault(date, {"date": date, "difficulty": row["difficulty"] or 1, "rows": []})
        entry["rows"].append(row)

    puzzles = []
    for entry in grouped.values():
        ordered = sorted(entry["rows"], key=lambda r: int(r["clue_number"] or 0))
        puzzles.append({
            "date": entry["date"],
            "difficulty": entry["difficulty"],
            "clues": [
                {"clue": r["clue"], "answer": r["answer"], "linkingWord": r["linking_word"]}
                for r in ordered
            ],
        })
    return puzzles


LIBRARY_CSV_COLUMNS = ["clue", "answer", "linking_word", "difficulty", "category", "tags", "used", "last_used_date"]
LIBRARY_REQUIRED_COLUMNS = ["clue", "answer", "linking_word"]
TAG_SEPARATOR = ";"


# PUBLIC_INTERFACE
def write_library_csv(entries: Iterable[ClueLibraryEntry], stream: TextIO) -> int:
    """Write one row per library clue; tags are joined with ``;``."""
    writer = csv.writer(stream)
    writer.writerow(LIBRARY_CSV_COLUMNS)
    rows = 0
    for entry in entries:
        writer.writerow([
            entry.clue,
            entry.answer,
            entry.linking_word,
            entry.difficulty,
            entry.category,
            TAG_SEPARATOR.join(str(t) for t in entry.tags or []),
            "yes" if entry.used else "no",
            entry.last_used_date.isoformat() if entry.last_used_date else "",
        ])
        rows += 1
    return rows


# PUBLIC_INTERFACE
def read_library_csv(text: str) -> List[Dict[str, Any]]:
    """Read library clues in the clue library payload shape.

    Only clue, answer and linking_word are required; usage columns are ignored
    because imported clues always start unused.

    Raises ValueError when a required column is missing.
    """
    reader = csv.DictReader(io.StringIO(text))
    missing = [c for c in LIBRARY_REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(missing)}")

    clues = []
    for row in reader:
        tags = [t.strip() for t in (row.get("tags") or "").split(TAG_SEPARATOR) if t.strip()]
        clues.append({
            "clue": row["clue"],
            "answer": row["answer"],
            "linkingWord": row["linking_word"],
            "difficulty": row.get("difficulty") or 2,
            "category": row.get("category") or "",
            "tags": tags,
        })
    return clues
