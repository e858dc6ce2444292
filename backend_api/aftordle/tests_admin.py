import datetime

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from aftordle.models import DailyPuzzle, PuzzleClue
from aftordle.seed_utils import DEFAULT_CLUES, ensure_daily_puzzle

TOKEN = "test-admin-token"


def _payload(date, clues=None, difficulty=2):
    return {"date": date.isoformat(), "difficulty": difficulty, "clues": clues or DEFAULT_CLUES}


@override_settings(ADMIN_API_TOKEN=TOKEN)
class AdminApiTests(APITestCase):
    def setUp(self):
        self.today = timezone.localdate()
        self.tomorrow = self.today + datetime.timedelta(days=1)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {TOKEN}")

    def test_requires_token(self):
        self.client.credentials()
        self.assertEqual(self.client.get(reverse('daily-puzzles')).status_code, 401)
        self.client.credentials(HTTP_AUTHORIZATION="Bearer nope")
        self.assertEqual(self.client.get(reverse('daily-puzzles')).status_code, 401)

    def test_login(self):
        get_user_model().objects.create_user("editor", "editor@example.com", "s3cret", is_staff=True)
        self.client.credentials()
        resp = self.client.post(reverse('admin-login'), {"username": "editor", "password": "s3cret"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["token"], TOKEN)

        resp = self.client.post(reverse('admin-login'), {"username": "editor", "password": "wrong"}, format="json")
        self.assertEqual(resp.status_code, 401)

    def test_create_puzzle(self):
        resp = self.client.post(reverse('daily-puzzles'), _payload(self.tomorrow), format="json")
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data["date"], self.tomorrow.isoformat())
        self.assertEqual(len(data["clues"]), 5)
        self.assertEqual(data["clues"][0]["linkingWord"], "MARS")
        self.assertEqual(PuzzleClue.objects.filter(puzzle_id=data["id"]).count(), 5)

    def test_create_rejects_duplicate_date(self):
        ensure_daily_puzzle(self.tomorrow)
        resp = self.client.post(reverse('daily-puzzles'), _payload(self.tomorrow), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_create_requires_five_clues(self):
        resp = self.client.post(reverse('daily-puzzles'), _payload(self.tomorrow, DEFAULT_CLUES[:4]), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_create_validates_linking_word(self):
        clues = list(DEFAULT_CLUES)
        clues[0] = {"clue": "Pop singer's red planet invasion film", "answer": "BRUNO MARS ATTACKS", "linkingWord": "ATTACKS"}
        resp = self.client.post(reverse('daily-puzzles'), _payload(self.tomorrow, clues), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_create_rejects_clue_giving_away_answer(self):
        clues = list(DEFAULT_CLUES)
        clues[0] = {"clue": "Bruno sings about Mars", "answer": "BRUNO MARS ATTACKS", "linkingWord": "MARS"}
        resp = self.client.post(reverse('daily-puzzles'), _payload(self.tomorrow, clues), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_detail_update_and_delete(self):
        ensure_daily_puzzle(self.tomorrow)
        puzzle = DailyPuzzle.objects.get(date=self.tomorrow)
        url = reverse('daily-puzzle-detail', kwargs={"puzzle_id": puzzle.id})

        self.assertEqual(self.client.get(url).json()["id"], puzzle.id)

        clues = list(reversed(DEFAULT_CLUES))
        resp = self.client.put(url, _payload(self.tomorrow, clues, difficulty=4), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["difficulty"], 4)
        self.assertEqual(resp.json()["clues"][0]["answer"], "APPLE PIE CHART")

        self.assertEqual(self.client.delete(url).status_code, 200)
        self.assertFalse(DailyPuzzle.objects.filter(pk=puzzle.id).exists())
        self.assertEqual(self.client.get(url).status_code, 404)

    def test_list_and_dashboard(self):
        ensure_daily_puzzle(self.today)
        ensure_daily_puzzle(self.tomorrow)
        data = self.client.get(reverse('daily-puzzles')).json()
        self.assertEqual([p["date"] for p in data], [self.tomorrow.isoformat(), self.today.isoformat()])

        dashboard = self.client.get(reverse('admin-dashboard')).json()
        self.assertEqual(dashboard["totalPuzzles"], 2)
        self.assertEqual(dashboard["futurePuzzles"], 1)
        self.assertTrue(dashboard["todayPuzzle"])
        self.assertEqual(dashboard["todayPlays"], 0)

    def test_bulk_import_reports_failures(self):
        entries = [
            _payload(self.tomorrow),
            _payload(self.tomorrow + datetime.timedelta(days=1), DEFAULT_CLUES[:3]),
        ]
        resp = self.client.post(reverse('bulk-import'), {"dailyPuzzles": entries}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["successful"], 1)
        self.assertEqual(data["failed"], 1)
        self.assertTrue(data["errors"][0].startswith("Daily puzzle 2"))

    def test_bulk_import_requires_entries(self):
        resp = self.client.post(reverse('bulk-import'), {"dailyPuzzles": []}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_csv_export_and_import(self):
        ensure_daily_puzzle(self.today)
        resp = self.client.get(reverse('export-csv'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv")
        text = resp.content.decode("utf-8")
        lines = text.strip().splitlines()
        self.assertEqual(lines[0], "date,difficulty,clue_number,clue,answer,linking_word")
        self.assertEqual(len(lines), 6)

        moved = text.replace(self.today.isoformat(), self.tomorrow.isoformat())
        upload = SimpleUploadedFile("puzzles.csv", moved.encode("utf-8"), content_type="text/csv")
        resp = self.client.post(reverse('bulk-import'), {"file": upload}, format="multipart")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["successful"], 1)
        imported = DailyPuzzle.objects.get(date=self.tomorrow)
        self.assertEqual(imported.clues.get(clue_number=1).answer, "BRUNO MARS ATTACKS")

    def test_csv_import_missing_columns(self):
        upload = SimpleUploadedFile("puzzles.csv", b"date,clue\n2030-01-01,x\n", content_type="text/csv")
        resp = self.client.post(reverse('bulk-import'), {"file": upload}, format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("missing columns", resp.json()["error"])

    def test_puzzle_by_date_and_test_answers(self):
        ensure_daily_puzzle(self.today)
        puzzle = DailyPuzzle.objects.get(date=self.today)
        data = self.client.get(reverse('puzzle-by-date', kwargs={"date": self.today})).json()
        self.assertEqual(data["clues"][0]["answer"], "BRUNO MARS ATTACKS")

        data = self.client.get(reverse('test-answers', kwargs={"puzzle_id": puzzle.id})).json()
        self.assertEqual([a["clueNumber"] for a in data["answers"]], [1, 2, 3, 4, 5])

        self.client.credentials()
        resp = self.client.get(reverse('test-answers', kwargs={"puzzle_id": puzzle.id}))
        self.assertEqual(resp.status_code, 401)
