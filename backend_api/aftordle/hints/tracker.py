from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from .errors import HintNotAllowed, TrackerStateError
from .policy import (
    HINT_FIRST_LETTER,
    HINT_FULL_WORD,
    PLACEHOLDER,
    REVEAL_KINDS,
    STAGE_EMPTY,
    find_linking_index,
    letter_pattern,
    split_answer,
)

logger = logging.getLogger(__name__)

STAGE_COMPLETE = "complete"

# Stages only move forward along this order.
_STAGE_ORDER = {
    STAGE_EMPTY: 0,
    HINT_FIRST_LETTER: 1,
    HINT_FULL_WORD: 2,
    STAGE_COMPLETE: 3,
}


@dataclass
class WordRevealState:
    """Client-held reveal progress of one word of the current answer."""

    index: int
    length: int
    is_linking: bool
    stage: str = STAGE_EMPTY
    letters: List[str] = field(default_factory=list)
    selectable: bool = True

    @property
    def fully_revealed(self) -> bool:
        return _STAGE_ORDER[self.stage] >= _STAGE_ORDER[HINT_FULL_WORD]

    def merge_letters(self, letters: List[str]) -> None:
        """Overlay revealed characters; a shown character is never hidden again."""
        if len(self.letters) != len(letters):
            self.letters = list(letters)
            return
        self.letters = [
            new if new != PLACEHOLDER else old
            for old, new in zip(self.letters, letters)
        ]

    def advance_to(self, stage: str) -> None:
        if _STAGE_ORDER[stage] > _STAGE_ORDER[self.stage]:
            self.stage = stage


# PUBLIC_INTERFACE
class RevealTracker:
    """Per-question reveal state for every word of the answer.

    One tracker belongs to one player and one question. It is filled from the
    structure hint, then updated from word hint responses and finally from the
    full answer once the player solves the clue. It is only mutated with data
    from successful responses.
    """

    def __init__(self) -> None:
        self.words: List[WordRevealState] = []
        self.initialized = False

    # PUBLIC_INTERFACE
    def initialize(self, structure: Dict[str, Any]) -> None:
        """Populate one entry per word from a structure hint response."""
        if self.initialized:
            raise TrackerStateError("Word structure already revealed for this question.")
        self.words = [
            WordRevealState(
                index=entry["wordIndex"],
                length=entry["length"],
                is_linking=bool(entry["isLinking"]),
                stage=STAGE_EMPTY,
                letters=list(entry.get("letters") or [PLACEHOLDER] * entry["length"]),
                selectable=not entry["isLinking"],
            )
            for entry in structure.get("wordStructure", [])
        ]
        self.initialized = True
        self._refresh_linking()

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise TrackerStateError("Reveal the word structure before asking for word hints.")

    def _word(self, index: int) -> WordRevealState:
        if index < 0 or index >= len(self.words):
            raise TrackerStateError(f"No word at index {index}.")
        return self.words[index]

    @property
    def linking_word(self) -> Optional[WordRevealState]:
        for word in self.words:
            if word.is_linking:
                return word
        return None

    def linking_unlocked(self) -> bool:
        """True once every non-linking word is fully revealed."""
        return all(w.fully_revealed for w in self.words if not w.is_linking)

    def fully_revealed_indices(self) -> List[int]:
        return [w.index for w in self.words if w.fully_revealed]

    def _refresh_linking(self) -> None:
        linking = self.linking_word
        if linking is None:
            return
        was_selectable = linking.selectable
        linking.selectable = self.linking_unlocked() and not linking.fully_revealed
        if linking.selectable and not was_selectable:
            logger.debug("Linking word %d unlocked", linking.index)

    # PUBLIC_INTERFACE
    def next_hint_kind(self, index: int) -> str:
        """Return the hint kind to request for a word, or refuse locally.

        Raises:
            HintNotAllowed: the word is not selectable. ``reason`` tells the
                locked linking word apart from an exhausted word.
        """
        self._require_initialized()
        word = self._word(index)
        if not word.selectable:
            if word.is_linking and not word.fully_revealed:
                raise HintNotAllowed(index, HintNotAllowed.LINKING_LOCKED)
            raise HintNotAllowed(index, HintNotAllowed.EXHAUSTED)
        if word.stage == STAGE_EMPTY:
            return HINT_FIRST_LETTER
        return HINT_FULL_WORD

    # PUBLIC_INTERFACE
    def apply_word_hint(self, result: Dict[str, Any]) -> WordRevealState:
        """Merge a word hint response into the targeted word only.

        Other entries of ``wordStructure`` are blanks from a stateless server
        and are ignored.
        """
        self._require_initialized()
        hint_type = result.get("hintType")
        if hint_type not in REVEAL_KINDS:
            raise TrackerStateError(f"Not a word reveal response: {hint_type!r}")

        index = result["revealedWord"]["wordIndex"]
        word = self._word(index)
        entry = next(
            (e for e in result.get("wordStructure", []) if e.get("wordIndex") == index),
            None,
        )
        letters = entry["letters"] if entry else letter_pattern(result["revealedWord"]["word"], hint_type)

        word.merge_letters(letters)
        word.advance_to(hint_type)
        if word.fully_revealed:
            word.selectable = False
        self._refresh_linking()
        return word

    # PUBLIC_INTERFACE
    def apply_full_answer(self, answer: str, linking_word: Optional[str] = None) -> None:
        """Reveal every letter after a correct submission and lock all words.

        Works whether or not the structure was revealed first.
        """
        words = split_answer(answer)
        if not self.initialized or len(words) != len(self.words):
            link_index = find_linking_index(words, linking_word or "")
            self.words = [
                WordRevealState(index=i, length=len(w), is_linking=i == link_index, letters=letter_pattern(w))
                for i, w in enumerate(words)
            ]
            self.initialized = True
        for state, text in zip(self.words, words):
            state.letters = letter_pattern(text, HINT_FULL_WORD)
            state.stage = STAGE_COMPLETE
            state.selectable = False

    def snapshot(self) -> List[Dict[str, Any]]:
        """Plain copy of the current state for a rendering layer."""
        return [asdict(w) for w in self.words]
