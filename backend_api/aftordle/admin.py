from django.contrib import admin

from .models import ClueLibraryEntry, DailyPuzzle, PuzzleClue, GameResult, HintEvent


class PuzzleClueInline(admin.TabularInline):
    model = PuzzleClue
    extra = 0
    fields = ("clue_number", "clue", "answer", "linking_word", "source_clue")
    ordering = ("clue_number",)


@admin.register(DailyPuzzle)
class DailyPuzzleAdmin(admin.ModelAdmin):
    list_display = ("date", "difficulty", "is_active", "plays", "avg_score", "avg_time", "created_at")
    list_filter = ("is_active", "difficulty")
    search_fields = ("clues__answer", "clues__clue")
    ordering = ("-date",)
    inlines = [PuzzleClueInline]
    readonly_fields = ("plays", "avg_score", "avg_time", "created_at", "updated_at")


@admin.register(PuzzleClue)
class PuzzleClueAdmin(admin.ModelAdmin):
    list_display = ("puzzle", "clue_number", "answer", "linking_word")
    search_fields = ("answer", "linking_word", "clue")
    ordering = ("-puzzle__date", "clue_number")


@admin.register(GameResult)
class GameResultAdmin(admin.ModelAdmin):
    list_display = ("puzzle", "score", "completion_time", "hints_used", "wrong_answers", "completed_at")
    list_filter = ("puzzle__date",)
    readonly_fields = ("hint_breakdown", "clue_results")


@admin.register(HintEvent)
class HintEventAdmin(admin.ModelAdmin):
    list_display = ("play_id", "clue", "word_index", "hint_type", "penalty", "created_at")
    search_fields = ("play_id",)


@admin.register(ClueLibraryEntry)
class ClueLibraryEntryAdmin(admin.ModelAdmin):
    list_display = ("answer", "linking_word", "difficulty", "category", "used", "last_used_date", "is_active")
    list_filter = ("used", "is_active", "difficulty", "category")
    search_fields = ("answer", "clue", "category")
    readonly_fields = ("created_at", "updated_at")
