import datetime

from django.urls import path, register_converter

from .views import (
    health,
    today_puzzle,
    validate_clue,
    get_hint,
    get_hint_state,
    validate_all,
    submit_result,
    puzzle_stats,
    get_hint_types,
)
from .admin_views import (
    admin_login,
    daily_puzzles,
    daily_puzzle_detail,
    dashboard,
    bulk_import,
    export_csv,
    puzzle_by_date,
    test_answers,
)
from .library_views import (
    library_clues,
    library_clue_detail,
    library_stats,
    generate_puzzle,
    save_generated_puzzle,
    bulk_import_clues,
    export_clues,
)


class IsoDateConverter:
    regex = r"\d{4}-\d{2}-\d{2}"

    def to_python(self, value):
        try:
            return datetime.date.fromisoformat(value)
        except ValueError:
            raise ValueError(f"Invalid date: {value}")

    def to_url(self, value):
        return value.isoformat() if isinstance(value, datetime.date) else str(value)


register_converter(IsoDateConverter, "isodate")

urlpatterns = [
    path('health', health, name='health'),
    path('puzzles/today', today_puzzle, name='today-puzzle'),
    path('puzzles/validate-clue', validate_clue, name='validate-clue'),
    path('puzzles/get-hint', get_hint, name='get-hint'),
    path('puzzles/get-hint-state', get_hint_state, name='get-hint-state'),
    path('puzzles/validate-all', validate_all, name='validate-all'),
    path('puzzles/submit-result', submit_result, name='submit-result'),
    path('puzzles/stats', puzzle_stats, name='puzzle-stats'),
    path('puzzles/stats/<isodate:date>', puzzle_stats, name='puzzle-stats-date'),
    path('puzzles/hint-types', get_hint_types, name='hint-types'),
    path('puzzles/date/<isodate:date>', puzzle_by_date, name='puzzle-by-date'),
    path('puzzles/<int:puzzle_id>/test-answers', test_answers, name='test-answers'),
    path('admin/login', admin_login, name='admin-login'),
    path('admin/daily-puzzles', daily_puzzles, name='daily-puzzles'),
    path('admin/daily-puzzles/bulk-import', bulk_import, name='bulk-import'),
    path('admin/daily-puzzles/export', export_csv, name='export-csv'),
    path('admin/daily-puzzles/<int:puzzle_id>', daily_puzzle_detail, name='daily-puzzle-detail'),
    path('admin/dashboard', dashboard, name='admin-dashboard'),
    path('admin/clue-library/clues', library_clues, name='library-clues'),
    path('admin/clue-library/clues/<int:clue_id>', library_clue_detail, name='library-clue-detail'),
    path('admin/clue-library/stats', library_stats, name='library-stats'),
    path('admin/clue-library/generate-puzzle', generate_puzzle, name='generate-puzzle'),
    path('admin/clue-library/save-generated-puzzle', save_generated_puzzle, name='save-generated-puzzle'),
    path('admin/clue-library/bulk-import-clues', bulk_import_clues, name='bulk-import-clues'),
    path('admin/clue-library/export-clues', export_clues, name='export-clues'),
]
