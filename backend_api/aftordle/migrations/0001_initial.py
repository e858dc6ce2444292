import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DailyPuzzle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("date", models.DateField(db_index=True, help_text="Day this puzzle is served.", unique=True)),
                (
                    "difficulty",
                    models.PositiveSmallIntegerField(
                        default=1,
                        help_text="Difficulty level (1 = easiest).",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("is_active", models.BooleanField(default=True, help_text="If false, the puzzle is not served.")),
                ("plays", models.PositiveIntegerField(default=0)),
                ("avg_score", models.FloatField(default=0)),
                ("avg_time", models.FloatField(default=0, help_text="Average completion time in seconds.")),
            ],
            options={
                "verbose_name": "Daily Puzzle",
                "verbose_name_plural": "Daily Puzzles",
                "ordering": ["-date"],
            },
        ),
        migrations.CreateModel(
            name="PuzzleClue",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                (
                    "clue_number",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("clue", models.TextField()),
                ("answer", models.CharField(max_length=200)),
                ("linking_word", models.CharField(max_length=64)),
                (
                    "puzzle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="clues", to="aftordle.dailypuzzle"
                    ),
                ),
            ],
            options={
                "verbose_name": "Puzzle Clue",
                "verbose_name_plural": "Puzzle Clues",
                "ordering": ["puzzle", "clue_number"],
                "unique_together": {("puzzle", "clue_number")},
            },
        ),
        migrations.CreateModel(
            name="GameResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("score", models.IntegerField()),
                ("completion_time", models.PositiveIntegerField(help_text="Completion time in seconds.")),
                ("hints_used", models.PositiveIntegerField(default=0)),
                ("wrong_answers", models.PositiveIntegerField(default=0)),
                ("hint_breakdown", models.JSONField(blank=True, default=dict)),
                ("clue_results", models.JSONField(blank=True, default=list)),
                ("completed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "puzzle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="results", to="aftordle.dailypuzzle"
                    ),
                ),
            ],
            options={
                "verbose_name": "Game Result",
                "verbose_name_plural": "Game Results",
                "ordering": ["-completed_at"],
            },
        ),
        migrations.CreateModel(
            name="HintEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("play_id", models.CharField(db_index=True, max_length=64)),
                ("word_index", models.SmallIntegerField(blank=True, null=True)),
                ("hint_type", models.CharField(max_length=32)),
                ("penalty", models.PositiveSmallIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "clue",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hint_events",
                        to="aftordle.puzzleclue",
                    ),
                ),
            ],
            options={
                "verbose_name": "Hint Event",
                "verbose_name_plural": "Hint Events",
                "ordering": ["created_at"],
            },
        ),
    ]
