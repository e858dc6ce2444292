from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import requests

from .hints import (
    GameProgress,
    HintError,
    RevealTracker,
    advance,
    final_score,
    record_hint,
    record_wrong_answer,
)
from .hints.policy import HINT_FIRST_LETTER

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Connection error. Please try again."


class TransportError(Exception):
    """The API could not be reached or failed on the server side."""


class ApiError(Exception):
    """The API answered with a client error payload ``{"error": ...}``."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class Transport(Protocol):
    """Minimal interface the game client needs from an HTTP layer."""

    def get(self, path: str) -> Dict[str, Any]: ...

    def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]: ...


# PUBLIC_INTERFACE
def decode_response(response) -> Dict[str, Any]:
    """Turn an API response into its JSON body or the matching client exception.

    5xx and unparsable bodies raise TransportError; 4xx raise ApiError carrying
    the ``error`` message, DRF's ``detail`` or the raw payload text.
    """
    if response.status_code >= 500:
        raise TransportError(f"Server error {response.status_code}")
    try:
        data = response.json()
    except ValueError as e:
        raise TransportError("Malformed response from server") from e
    if response.status_code >= 400:
        if isinstance(data, dict):
            message = data.get("error") or data.get("detail") or str(data)
        else:
            message = str(data)
        raise ApiError(response.status_code, message)
    return data


# PUBLIC_INTERFACE
class HttpTransport:
    """Transport over ``requests`` against a running API, e.g. http://localhost:8000/api."""

    def __init__(self, base_url: str, timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str) -> Dict[str, Any]:
        try:
            response = self.session.get(self._url(path), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        return decode_response(response)

    def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(self._url(path), json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        return decode_response(response)


@dataclass
class Feedback:
    """Outcome of a player action, ready to be shown to the player."""

    ok: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


# PUBLIC_INTERFACE
class GameClient:
    """Plays today's puzzle against the API, one clue at a time.

    Holds the immutable ``progress`` (replaced on every transition) and the
    ``tracker`` of the clue being played. Neither is touched when a request
    fails, so any action can simply be retried.
    """

    def __init__(self, transport: Transport, play_id: Optional[str] = None):
        self.transport = transport
        self.play_id = play_id or uuid.uuid4().hex
        self.puzzle: Optional[Dict[str, Any]] = None
        self.progress: Optional[GameProgress] = None
        self.tracker = RevealTracker()
        self.clue_results: List[Dict[str, Any]] = []

    def _call(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if method == "get":
            return self.transport.get(path)
        return self.transport.post(path, payload or {})

    def _safely(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None):
        """Call the API; return (data, None) or (None, Feedback) on failure."""
        try:
            return self._call(method, path, payload), None
        except TransportError as e:
            logger.warning("Request to %s failed: %s", path, e)
            return None, Feedback(False, CONNECTION_ERROR_MESSAGE)
        except ApiError as e:
            return None, Feedback(False, str(e))

    @property
    def clue_number(self) -> int:
        return self.progress.clue_number if self.progress else 1

    @property
    def current_clue(self) -> Optional[Dict[str, Any]]:
        if not self.puzzle or not self.progress:
            return None
        return self.puzzle["clues"][self.progress.question_index]

    # PUBLIC_INTERFACE
    def load_today(self) -> Feedback:
        """Fetch today's puzzle and start a fresh game."""
        data, failure = self._safely("get", "puzzles/today")
        if failure:
            return failure
        self.puzzle = data
        self.progress = GameProgress.start(len(data["clues"]))
        self.tracker = RevealTracker()
        self.clue_results = []
        return Feedback(True, f"Puzzle for {data['date']} loaded", {"totalClues": len(data["clues"])})

    # PUBLIC_INTERFACE
    def reveal_structure(self) -> Feedback:
        """Buy the word structure of the current clue, at most once per clue."""
        if self.tracker.initialized:
            return Feedback(False, "Word structure already revealed")
        data, failure = self._safely(
            "post", "puzzles/get-hint", {"clueNumber": self.clue_number, "playId": self.play_id}
        )
        if failure:
            return failure
        self.tracker.initialize(data)
        self.progress = record_hint(self.progress, data["penalty"])
        return Feedback(True, f"Word structure revealed (-{data['penalty']} points)", data)

    # PUBLIC_INTERFACE
    def hint_word(self, word_index: int) -> Feedback:
        """Buy the next reveal of one word; refused locally when the word is not selectable."""
        try:
            hint_type = self.tracker.next_hint_kind(word_index)
        except HintError as e:
            return Feedback(False, str(e))

        data, failure = self._safely(
            "post",
            "puzzles/get-hint",
            {"clueNumber": self.clue_number, "wordIndex": word_index, "hintType": hint_type, "playId": self.play_id},
        )
        if failure:
            return failure

        word = self.tracker.apply_word_hint(data)
        self.progress = record_hint(self.progress, data["penalty"])
        prefix = "Linking word " if word.is_linking else ""
        action = "first letter revealed" if hint_type == HINT_FIRST_LETTER else "fully revealed"
        return Feedback(True, f"{prefix}{action} (-{data['penalty']} points)".capitalize(), data)

    # PUBLIC_INTERFACE
    def submit_answer(self, answer: str) -> Feedback:
        """Check an answer to the current clue; a correct one moves to the next clue."""
        if not self.progress:
            return Feedback(False, "Load today's puzzle first")
        if self.progress.completed:
            return Feedback(False, "Puzzle already complete")
        if not answer or not answer.strip():
            return Feedback(False, "Enter an answer first")
        data, failure = self._safely(
            "post", "puzzles/validate-clue", {"clueNumber": self.clue_number, "answer": answer}
        )
        if failure:
            return failure

        if not data["correct"]:
            self.progress = record_wrong_answer(self.progress)
            return Feedback(False, "Incorrect. Try again!", data)

        self.tracker.apply_full_answer(data["fullAnswer"], data.get("linkingWord"))
        self.clue_results.append({
            "clueNumber": self.clue_number,
            "hints": self.progress.question_hints[self.progress.question_index],
            "answer": data["fullAnswer"],
        })
        self.progress = advance(self.progress)
        if not self.progress.completed:
            self.tracker = RevealTracker()
            return Feedback(True, "Correct! Moving to next clue...", data)
        return Feedback(True, "Correct! Puzzle complete.", data)

    # PUBLIC_INTERFACE
    def finish(self, total_time_secs: int, is_test: bool = False) -> Feedback:
        """Score the finished game and submit the result."""
        if not self.progress or not self.progress.completed:
            return Feedback(False, "Solve every clue before finishing")
        score = final_score(self.progress, total_time_secs)
        payload = {
            "score": score,
            "completionTime": total_time_secs,
            "hintsUsed": self.progress.hints_used,
            "wrongAnswers": self.progress.wrong_answers,
            "hintBreakdown": {
                str(n): hints for n, hints in enumerate(self.progress.question_hints, start=1)
            },
            "clueResults": self.clue_results,
            "isTest": is_test,
        }
        data, failure = self._safely("post", "puzzles/submit-result", payload)
        if failure:
            failure.data = {"score": score}
            return failure
        return Feedback(True, f"Final score: {score}", {"score": score, **data})
