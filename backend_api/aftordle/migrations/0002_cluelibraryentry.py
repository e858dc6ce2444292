import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("aftordle", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ClueLibraryEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("clue", models.TextField()),
                ("answer", models.CharField(max_length=200)),
                ("linking_word", models.CharField(max_length=64)),
                (
                    "difficulty",
                    models.PositiveSmallIntegerField(
                        default=2,
                        help_text="1 = easy, 2 = medium, 3 = hard.",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(3),
                        ],
                    ),
                ),
                ("category", models.CharField(blank=True, default="", max_length=64)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("used", models.BooleanField(default=False, help_text="Already scheduled into a daily puzzle.")),
                ("last_used_date", models.DateField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Clue Library Entry",
                "verbose_name_plural": "Clue Library",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.AddField(
            model_name="puzzleclue",
            name="source_clue",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="puzzle_clues",
                to="aftordle.cluelibraryentry",
            ),
        ),
    ]
