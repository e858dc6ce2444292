import datetime

from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from aftordle.models import DailyPuzzle, GameResult, HintEvent
from aftordle.seed_utils import DEFAULT_CLUES, ensure_daily_puzzle

ALL_ANSWERS = [c["answer"] for c in DEFAULT_CLUES]


class PuzzleFlowTests(APITestCase):
    def setUp(self):
        # Clue 1 is "BRUNO MARS ATTACKS" with linking word "MARS"
        ensure_daily_puzzle()
        self.puzzle = DailyPuzzle.objects.get(date=timezone.localdate())

    def _hint(self, **payload):
        return self.client.post(reverse('get-hint'), payload, format="json")

    def test_health(self):
        resp = self.client.get(reverse('health'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "OK")

    def test_today_hides_answers(self):
        resp = self.client.get(reverse('today-puzzle'))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["id"], self.puzzle.id)
        self.assertEqual(data["totalClues"], 5)
        self.assertEqual(data["clues"][0], {"clueNumber": 1, "clue": DEFAULT_CLUES[0]["clue"]})
        self.assertNotIn("BRUNO", str(data))

    def test_today_not_found(self):
        self.puzzle.delete()
        resp = self.client.get(reverse('today-puzzle'))
        self.assertEqual(resp.status_code, 404)
        self.assertIn("error", resp.json())

    def test_inactive_puzzle_is_not_served(self):
        self.puzzle.is_active = False
        self.puzzle.save()
        self.assertEqual(self.client.get(reverse('today-puzzle')).status_code, 404)

    def test_structure_hint(self):
        resp = self._hint(clueNumber=1)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["clueNumber"], 1)
        self.assertEqual(data["hintType"], "structure")
        self.assertEqual(data["penalty"], 5)
        self.assertEqual([w["length"] for w in data["wordStructure"]], [5, 4, 7])
        self.assertEqual([w["selectable"] for w in data["wordStructure"]], [True, False, True])
        self.assertNotIn("revealedWord", data)

    def test_word_hints(self):
        data = self._hint(clueNumber=1, wordIndex=0, hintType="firstLetter").json()
        self.assertEqual(data["penalty"], 3)
        self.assertEqual(data["wordStructure"][0]["letters"], ["B", "_", "_", "_", "_"])

        data = self._hint(clueNumber=1, wordIndex=2, hintType="fullWord").json()
        self.assertEqual(data["penalty"], 3)
        self.assertEqual(data["revealedWord"], {"wordIndex": 2, "word": "ATTACKS", "isLinking": False})

        data = self._hint(clueNumber=1, wordIndex=1, hintType="fullWord").json()
        self.assertEqual(data["penalty"], 5)
        self.assertEqual(data["revealedWord"]["word"], "MARS")

    def test_invalid_word_index_is_rejected(self):
        resp = self._hint(clueNumber=1, wordIndex=7, hintType="firstLetter")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())
        self.assertNotIn("penalty", resp.json())

    def test_invalid_hint_type_is_rejected(self):
        resp = self._hint(clueNumber=1, wordIndex=0, hintType="wholeAnswer")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())

    def test_hint_type_required_with_word_index(self):
        for payload in ({"clueNumber": 1, "wordIndex": 0}, {"clueNumber": 1, "wordIndex": 0, "hintType": ""}):
            resp = self._hint(**payload)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json(), {"error": "hintType is required when wordIndex is specified"})

    def test_non_integer_word_index_is_rejected(self):
        resp = self._hint(clueNumber=1, wordIndex="x", hintType="fullWord")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Invalid wordIndex"})

    def test_missing_clue_number_reports_error(self):
        resp = self._hint(wordIndex=0, hintType="fullWord")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())

    def test_check_linking_available(self):
        data = self._hint(clueNumber=1, wordIndex=1, hintType="checkLinkingAvailable").json()
        self.assertEqual(data["hintType"], "linkingAvailableCheck")
        self.assertTrue(data["linkingAvailable"])
        self.assertEqual(data["penalty"], 0)

    def test_hint_state_is_blank_and_free(self):
        resp = self.client.post(reverse('get-hint-state'), {"clueNumber": 1, "playId": "play-1"}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["clueNumber"], 1)
        self.assertFalse(data["structureRevealed"])
        self.assertNotIn("penalty", data)
        self.assertEqual([w["letters"] for w in data["wordStructure"]], [["_"] * 5, ["_"] * 4, ["_"] * 7])
        self.assertEqual([w["isLinking"] for w in data["wordStructure"]], [False, True, False])
        self.assertEqual(HintEvent.objects.count(), 0)

        resp = self.client.post(reverse('get-hint-state'), {}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())

    def test_unknown_clue(self):
        self.puzzle.clues.filter(clue_number=5).delete()
        self.assertEqual(self._hint(clueNumber=5).status_code, 404)

    def test_play_id_enforces_linking_gate(self):
        resp = self._hint(clueNumber=1, wordIndex=1, hintType="fullWord", playId="play-1")
        self.assertEqual(resp.status_code, 403)
        self.assertIn("Complete other words first", resp.json()["error"])

        self._hint(clueNumber=1, wordIndex=0, hintType="fullWord", playId="play-1")
        self._hint(clueNumber=1, wordIndex=2, hintType="fullWord", playId="play-1")
        resp = self._hint(clueNumber=1, wordIndex=1, hintType="fullWord", playId="play-1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(HintEvent.objects.filter(play_id="play-1").count(), 3)

        # Another play has revealed nothing yet.
        resp = self._hint(clueNumber=1, wordIndex=1, hintType="firstLetter", playId="play-2")
        self.assertEqual(resp.status_code, 403)

    def test_validate_clue(self):
        resp = self.client.post(reverse('validate-clue'), {"clueNumber": 1, "answer": " bruno mars attacks! "}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["correct"])
        self.assertEqual(data["fullAnswer"], "BRUNO MARS ATTACKS")
        self.assertEqual(data["linkingWord"], "MARS")

        data = self.client.post(reverse('validate-clue'), {"clueNumber": 1, "answer": "bruno mars"}, format="json").json()
        self.assertFalse(data["correct"])
        self.assertNotIn("fullAnswer", data)

    def test_validate_all(self):
        resp = self.client.post(reverse('validate-all'), {"answers": ALL_ANSWERS}, format="json")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["allCorrect"])
        self.assertEqual(data["correctCount"], 5)

        answers = ALL_ANSWERS[:4] + ["WRONG"]
        data = self.client.post(reverse('validate-all'), {"answers": answers}, format="json").json()
        self.assertFalse(data["allCorrect"])
        self.assertEqual(data["correctCount"], 4)
        self.assertFalse(data["results"][4]["correct"])

    def test_validate_all_requires_five_answers(self):
        resp = self.client.post(reverse('validate-all'), {"answers": ALL_ANSWERS[:4]}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_submit_result_updates_statistics(self):
        payload = {"score": 600, "completionTime": 120, "hintsUsed": 2, "wrongAnswers": 1}
        resp = self.client.post(reverse('submit-result'), payload, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])
        self.client.post(reverse('submit-result'), {"score": 400, "completionTime": 60}, format="json")

        self.puzzle.refresh_from_db()
        self.assertEqual(self.puzzle.plays, 2)
        self.assertEqual(self.puzzle.avg_score, 500)
        self.assertEqual(self.puzzle.avg_time, 90)

        stats = self.client.get(reverse('puzzle-stats')).json()
        self.assertEqual(stats["totalCompletions"], 2)
        self.assertEqual(stats["maxScore"], 600)
        self.assertEqual(stats["minScore"], 400)

    def test_test_results_are_not_saved(self):
        resp = self.client.post(reverse('submit-result'), {"score": 600, "completionTime": 120, "isTest": True}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["isTest"])
        self.assertEqual(GameResult.objects.count(), 0)

    def test_stats_for_unknown_date(self):
        date = timezone.localdate() - datetime.timedelta(days=30)
        resp = self.client.get(reverse('puzzle-stats-date', kwargs={"date": date}))
        self.assertEqual(resp.status_code, 404)
