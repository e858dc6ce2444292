import datetime
from types import SimpleNamespace

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from aftordle.library import average_difficulty, matches_theme, select_clues
from aftordle.models import ClueLibraryEntry, DailyPuzzle, PuzzleClue
from aftordle.seed_utils import ensure_daily_puzzle

TOKEN = "test-admin-token"

LIBRARY = [
    ("Pop singer's red planet invasion film", "BRUNO MARS ATTACKS", "MARS", 1, "music", []),
    ("Sandwich spread for a clumsy catcher", "PEANUT BUTTER FINGERS", "BUTTER", 1, "food", []),
    ("Galactic saga meets English dynastic conflicts", "STAR WARS OF THE ROSES", "WARS", 3, "movies", ["history"]),
    ("Fast food order that rules a drive-thru chain", "CHEESE BURGER KING", "BURGER", 2, "food", []),
    ("Orchard dessert for presenting data slices", "APPLE PIE CHART", "PIE", 2, "food", ["dessert"]),
    ("Latte furniture that becomes a ping pong game", "COFFEE TABLE TENNIS", "TABLE", 2, "sports", []),
    ("Cookie ingredient that lands near the golf hole", "CHOCOLATE CHIP SHOT", "CHIP", 3, "food", ["dessert", "golf"]),
]


def _entries(*difficulties):
    return [SimpleNamespace(id=i, difficulty=d) for i, d in enumerate(difficulties)]


class ClueSelectionTests(SimpleTestCase):
    def test_mixed_takes_two_easy_two_medium_one_hard(self):
        picked = select_clues(_entries(3, 3, 1, 2, 1, 1, 2, 2))
        self.assertEqual([c.id for c in picked], [2, 4, 3, 6, 0])

    def test_mixed_fills_missing_difficulties(self):
        picked = select_clues(_entries(2, 2, 2, 2, 2, 2), "mixed")
        self.assertEqual([c.id for c in picked], [0, 1, 2, 3, 4])

    def test_target_difficulty_first(self):
        picked = select_clues(_entries(1, 3, 2, 3, 1, 2), "3")
        self.assertEqual([c.id for c in picked], [1, 3, 0, 2, 4])

    def test_average_difficulty_rounds_half_up(self):
        self.assertEqual(average_difficulty(_entries(1, 2)), 2)
        self.assertEqual(average_difficulty(_entries(1, 1, 2)), 1)
        self.assertEqual(average_difficulty(_entries(1, 1, 2, 2, 3)), 2)

    def test_theme_matches_category_or_tags(self):
        entry = SimpleNamespace(category="Food", tags=["Dessert", "golf"])
        self.assertTrue(matches_theme(entry, "food"))
        self.assertTrue(matches_theme(entry, " dessert "))
        self.assertFalse(matches_theme(entry, "music"))


@override_settings(ADMIN_API_TOKEN=TOKEN)
class ClueLibraryApiTests(APITestCase):
    def setUp(self):
        self.tomorrow = timezone.localdate() + datetime.timedelta(days=1)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {TOKEN}")

    def _seed(self):
        for clue, answer, link, difficulty, category, tags in LIBRARY:
            ClueLibraryEntry.objects.create(
                clue=clue, answer=answer, linking_word=link, difficulty=difficulty, category=category, tags=tags
            )

    def _list(self, **params):
        return self.client.get(reverse('library-clues'), params)

    def test_requires_token(self):
        self.client.credentials()
        self.assertEqual(self._list().status_code, 401)
        self.assertEqual(self.client.get(reverse('library-stats')).status_code, 401)

    def test_add_and_list(self):
        payload = {"clue": "Cookie ingredient that lands near the golf hole", "answer": "chocolate chip shot",
                   "linkingWord": "chip", "difficulty": 3, "category": "food", "tags": ["golf"]}
        resp = self.client.post(reverse('library-clues'), payload, format="json")
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["answer"], "CHOCOLATE CHIP SHOT")
        self.assertEqual(data["linkingWord"], "CHIP")
        self.assertFalse(data["used"])
        self.assertEqual(data["usageCount"], 0)

        listing = self._list().json()
        self.assertEqual(listing["total"], 1)
        self.assertEqual(listing["clues"][0]["tags"], ["golf"])

    def test_add_applies_clue_rules(self):
        payload = {"clue": "Bruno sings about Mars", "answer": "BRUNO MARS ATTACKS", "linkingWord": "MARS"}
        self.assertEqual(self.client.post(reverse('library-clues'), payload, format="json").status_code, 400)
        payload = {"clue": "Pop singer's red planet invasion film", "answer": "BRUNO MARS ATTACKS", "linkingWord": "ATTACKS"}
        self.assertEqual(self.client.post(reverse('library-clues'), payload, format="json").status_code, 400)

    def test_filters_and_pagination(self):
        self._seed()
        self.assertEqual(self._list(search="burger").json()["total"], 1)
        self.assertEqual(self._list(difficulty=2).json()["total"], 3)
        self.assertEqual(self._list(category="food").json()["total"], 4)
        self.assertEqual(self._list(used="true").json()["total"], 0)

        page = self._list(limit=2, offset=1).json()
        self.assertEqual(len(page["clues"]), 2)
        self.assertEqual(page["total"], 7)
        self.assertEqual(page["pagination"], {"limit": 2, "offset": 1, "hasMore": True})

        resp = self._list(difficulty="hard")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())

    def test_update_and_soft_delete(self):
        self._seed()
        entry = ClueLibraryEntry.objects.get(answer="COFFEE TABLE TENNIS")
        url = reverse('library-clue-detail', kwargs={"clue_id": entry.id})

        payload = {"clue": "Latte furniture that becomes a ping pong game", "answer": "COFFEE TABLE TENNIS",
                   "linkingWord": "TABLE", "difficulty": 1, "category": "games"}
        resp = self.client.put(url, payload, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["difficulty"], 1)
        self.assertEqual(resp.json()["category"], "games")

        self.assertEqual(self.client.delete(url).status_code, 200)
        entry.refresh_from_db()
        self.assertFalse(entry.is_active)
        self.assertEqual(self.client.get(url).status_code, 404)
        self.assertEqual(self._list().json()["total"], 6)

    def test_stats(self):
        self._seed()
        data = self.client.get(reverse('library-stats')).json()
        self.assertEqual(data["totalClues"], 7)
        self.assertEqual(data["unusedClues"], 7)
        self.assertEqual(data["possiblePuzzles"], 1)
        self.assertIn({"category": "food", "count": 4}, data["categories"])
        self.assertEqual(
            data["difficultyBreakdown"],
            [{"difficulty": 1, "count": 2}, {"difficulty": 2, "count": 3}, {"difficulty": 3, "count": 2}],
        )

    def test_generate_then_save(self):
        self._seed()
        resp = self.client.post(reverse('generate-puzzle'), {"date": self.tomorrow.isoformat()}, format="json")
        self.assertEqual(resp.status_code, 200)
        draft = resp.json()
        self.assertEqual(len(draft["clues"]), 5)
        self.assertEqual([c["clueNumber"] for c in draft["clues"]], [1, 2, 3, 4, 5])
        picked = ClueLibraryEntry.objects.filter(pk__in=[c["sourceClueId"] for c in draft["clues"]])
        self.assertEqual(sorted(e.difficulty for e in picked), [1, 1, 2, 2, 3])
        self.assertEqual(draft["difficulty"], 2)
        self.assertFalse(DailyPuzzle.objects.exists())

        resp = self.client.post(reverse('save-generated-puzzle'), draft, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual([c["sourceClueId"] for c in resp.json()["clues"]], [c["sourceClueId"] for c in draft["clues"]])

        puzzle = DailyPuzzle.objects.get(date=self.tomorrow)
        self.assertEqual(PuzzleClue.objects.filter(puzzle=puzzle, source_clue__isnull=False).count(), 5)
        for entry in ClueLibraryEntry.objects.filter(pk__in=[c["sourceClueId"] for c in draft["clues"]]):
            self.assertTrue(entry.used)
            self.assertEqual(entry.last_used_date, self.tomorrow)

        used = self._list(used="true").json()
        self.assertEqual(used["total"], 5)
        self.assertEqual({c["usageCount"] for c in used["clues"]}, {1})

        later = (self.tomorrow + datetime.timedelta(days=1)).isoformat()
        resp = self.client.post(reverse('generate-puzzle'), {"date": later}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Only 2 unused clues available. Need at least 5.")

    def test_generate_with_target_difficulty(self):
        self._seed()
        payload = {"date": self.tomorrow.isoformat(), "targetDifficulty": "3"}
        draft = self.client.post(reverse('generate-puzzle'), payload, format="json").json()
        picked = ClueLibraryEntry.objects.filter(pk__in=[c["sourceClueId"] for c in draft["clues"]])
        self.assertEqual(sum(1 for e in picked if e.difficulty == 3), 2)

    def test_generate_with_theme_needs_enough_clues(self):
        self._seed()
        payload = {"date": self.tomorrow.isoformat(), "theme": "dessert"}
        resp = self.client.post(reverse('generate-puzzle'), payload, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Only 2 unused clues", resp.json()["error"])

    def test_generate_rejects_taken_date(self):
        self._seed()
        ensure_daily_puzzle(self.tomorrow)
        resp = self.client.post(reverse('generate-puzzle'), {"date": self.tomorrow.isoformat()}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_save_rejects_unknown_source_clue(self):
        self._seed()
        draft = self.client.post(reverse('generate-puzzle'), {"date": self.tomorrow.isoformat()}, format="json").json()
        draft["clues"][0]["sourceClueId"] = 9999
        resp = self.client.post(reverse('save-generated-puzzle'), draft, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(ClueLibraryEntry.objects.filter(used=True).exists())

    def test_bulk_import_json(self):
        rows = [
            {"clue": "Pop singer's red planet invasion film", "answer": "BRUNO MARS ATTACKS", "linkingWord": "MARS"},
            {"clue": "Missing its linking word", "answer": "APPLE PIE CHART"},
        ]
        resp = self.client.post(reverse('bulk-import-clues'), {"clues": rows}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["successful"], 1)
        self.assertEqual(data["failed"], 1)
        self.assertTrue(data["errors"][0].startswith("Row 2"))
        self.assertEqual(ClueLibraryEntry.objects.get().difficulty, 2)

        resp = self.client.post(reverse('bulk-import-clues'), {"clues": []}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_csv_export_and_import(self):
        self._seed()
        resp = self.client.get(reverse('export-clues'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv")
        text = resp.content.decode("utf-8")
        lines = text.strip().splitlines()
        self.assertEqual(lines[0], "clue,answer,linking_word,difficulty,category,tags,used,last_used_date")
        self.assertEqual(len(lines), 8)

        ClueLibraryEntry.objects.update(is_active=False)
        upload = SimpleUploadedFile("clues.csv", text.encode("utf-8"), content_type="text/csv")
        resp = self.client.post(reverse('bulk-import-clues'), {"file": upload}, format="multipart")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["successful"], 7)
        imported = ClueLibraryEntry.objects.get(is_active=True, answer="CHOCOLATE CHIP SHOT")
        self.assertEqual(imported.tags, ["dessert", "golf"])
        self.assertEqual(imported.difficulty, 3)

    def test_csv_import_missing_columns(self):
        upload = SimpleUploadedFile("clues.csv", b"clue,answer\nx,y\n", content_type="text/csv")
        resp = self.client.post(reverse('bulk-import-clues'), {"file": upload}, format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("linking_word", resp.json()["error"])

    def test_json_export(self):
        self._seed()
        data = self.client.get(reverse('export-clues'), {"format": "json"}).json()
        self.assertEqual(data["totalCount"], 7)
        self.assertIn("exportedAt", data)
