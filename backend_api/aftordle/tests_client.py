from unittest import mock

import requests
from django.test import SimpleTestCase
from rest_framework.test import APIClient, APITestCase

from aftordle.client import (
    CONNECTION_ERROR_MESSAGE,
    ApiError,
    GameClient,
    HttpTransport,
    TransportError,
    decode_response,
)
from aftordle.models import GameResult
from aftordle.seed_utils import DEFAULT_CLUES, ensure_daily_puzzle


class APIClientTransport:
    """Transport backed by DRF's test client; can be switched offline."""

    def __init__(self):
        self.client = APIClient()
        self.offline = False
        self.calls = []

    def get(self, path):
        self.calls.append(path)
        if self.offline:
            raise TransportError("offline")
        return decode_response(self.client.get(f"/api/{path}"))

    def post(self, path, payload):
        self.calls.append(path)
        if self.offline:
            raise TransportError("offline")
        return decode_response(self.client.post(f"/api/{path}", payload, format="json"))


class GameClientTests(APITestCase):
    def setUp(self):
        ensure_daily_puzzle()
        self.transport = APIClientTransport()
        self.game = GameClient(self.transport, play_id="client-play")
        self.assertTrue(self.game.load_today().ok)

    def test_hint_flow_on_first_clue(self):
        feedback = self.game.reveal_structure()
        self.assertTrue(feedback.ok)
        self.assertEqual(feedback.message, "Word structure revealed (-5 points)")
        self.assertFalse(self.game.reveal_structure().ok)

        calls = len(self.transport.calls)
        feedback = self.game.hint_word(1)
        self.assertFalse(feedback.ok)
        self.assertIn("Complete other words first", feedback.message)
        self.assertEqual(len(self.transport.calls), calls)

        self.assertEqual(self.game.hint_word(0).message, "First letter revealed (-3 points)")
        self.assertEqual(self.game.tracker.words[0].letters, ["B", "_", "_", "_", "_"])
        self.assertEqual(self.game.hint_word(0).message, "Fully revealed (-3 points)")
        self.game.hint_word(2)
        self.game.hint_word(2)
        self.assertTrue(self.game.tracker.words[1].selectable)

        feedback = self.game.hint_word(1)
        self.assertEqual(feedback.message, "Linking word first letter revealed (-5 points)")
        self.assertIn("No more hints", self.game.hint_word(0).message)

        self.assertEqual(self.game.progress.hint_penalties, 5 + 3 * 4 + 5)
        self.assertEqual(self.game.progress.question_hints[0], 6)

    def test_connection_error_leaves_state_untouched(self):
        self.game.reveal_structure()
        progress = self.game.progress
        snapshot = self.game.tracker.snapshot()

        self.transport.offline = True
        feedback = self.game.hint_word(0)
        self.assertFalse(feedback.ok)
        self.assertEqual(feedback.message, CONNECTION_ERROR_MESSAGE)
        self.assertIs(self.game.progress, progress)
        self.assertEqual(self.game.tracker.snapshot(), snapshot)

        self.transport.offline = False
        self.assertTrue(self.game.hint_word(0).ok)

    def test_word_hint_before_structure_is_refused(self):
        feedback = self.game.hint_word(0)
        self.assertFalse(feedback.ok)
        self.assertEqual(self.game.progress.hints_used, 0)

    def test_full_game(self):
        self.game.reveal_structure()
        self.assertFalse(self.game.submit_answer("BRUNO MARS BARS").ok)
        for number, clue in enumerate(DEFAULT_CLUES, start=1):
            self.assertEqual(self.game.clue_number, number)
            feedback = self.game.submit_answer(clue["answer"].lower())
            self.assertTrue(feedback.ok)
        self.assertTrue(self.game.progress.completed)
        self.assertEqual([w.stage for w in self.game.tracker.words], ["complete"] * 3)

        feedback = self.game.finish(total_time_secs=100)
        self.assertTrue(feedback.ok)
        self.assertEqual(feedback.data["score"], 500 + 200 - 5 - 10)
        result = GameResult.objects.get()
        self.assertEqual(result.hints_used, 1)
        self.assertEqual(result.wrong_answers, 1)
        self.assertEqual(result.hint_breakdown["1"], 1)
        self.assertEqual(len(result.clue_results), 5)

    def test_answers_after_completion_are_refused(self):
        for clue in DEFAULT_CLUES:
            self.game.submit_answer(clue["answer"])
        progress = self.game.progress
        calls = len(self.transport.calls)

        feedback = self.game.submit_answer(DEFAULT_CLUES[-1]["answer"])
        self.assertFalse(feedback.ok)
        self.assertIs(self.game.progress, progress)
        self.assertEqual(len(self.game.clue_results), 5)
        self.assertEqual(len(self.transport.calls), calls)

    def test_error_bodies_are_decoded(self):
        with self.assertRaises(ApiError) as ctx:
            self.transport.post("puzzles/get-hint", {"clueNumber": 1, "wordIndex": "x", "hintType": "fullWord"})
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(str(ctx.exception), "Invalid wordIndex")

        # DRF authentication failures only carry "detail".
        with self.assertRaises(ApiError) as ctx:
            self.transport.get("admin/dashboard")
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn("credentials", str(ctx.exception))

    def test_finish_before_completion(self):
        self.assertFalse(self.game.finish(total_time_secs=10).ok)
        self.assertEqual(GameResult.objects.count(), 0)


class HttpTransportTests(SimpleTestCase):
    def _response(self, status_code, data):
        response = mock.Mock(status_code=status_code)
        response.json.return_value = data
        return response

    def test_network_failure_becomes_transport_error(self):
        session = mock.Mock()
        session.post.side_effect = requests.exceptions.ConnectionError("refused")
        transport = HttpTransport("http://localhost:8000/api/", session=session)
        with self.assertRaises(TransportError):
            transport.post("puzzles/get-hint", {"clueNumber": 1})
        session.post.assert_called_once_with(
            "http://localhost:8000/api/puzzles/get-hint", json={"clueNumber": 1}, timeout=10
        )

    def test_error_payload_becomes_api_error(self):
        session = mock.Mock()
        session.post.return_value = self._response(400, {"error": "Invalid wordIndex"})
        transport = HttpTransport("http://localhost:8000/api", session=session)
        with self.assertRaises(ApiError) as ctx:
            transport.post("puzzles/get-hint", {"clueNumber": 1, "wordIndex": 7, "hintType": "fullWord"})
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(str(ctx.exception), "Invalid wordIndex")

    def test_non_dict_error_payload(self):
        session = mock.Mock()
        session.post.return_value = self._response(400, ["answers must be a list"])
        transport = HttpTransport("http://localhost:8000/api", session=session)
        with self.assertRaises(ApiError) as ctx:
            transport.post("puzzles/validate-all", {"answers": "nope"})
        self.assertEqual(str(ctx.exception), "['answers must be a list']")

    def test_server_error_becomes_transport_error(self):
        session = mock.Mock()
        session.get.return_value = self._response(500, {"error": "Database error"})
        transport = HttpTransport("http://localhost:8000/api", session=session)
        with self.assertRaises(TransportError):
            transport.get("puzzles/today")

    def test_success(self):
        session = mock.Mock()
        session.get.return_value = self._response(200, {"status": "OK"})
        transport = HttpTransport("http://localhost:8000/api", session=session)
        self.assertEqual(transport.get("/health"), {"status": "OK"})
