from __future__ import annotations

import logging
import re
from typing import Any, Collection, Dict, List, Optional

from .errors import HintValidationError, LinkingWordLocked

logger = logging.getLogger(__name__)

PLACEHOLDER = "_"
LETTER_RE = re.compile(r"[A-Za-z]")

STRUCTURE_PENALTY = 5
WORD_PENALTY = 3
LINKING_WORD_PENALTY = 5

HINT_STRUCTURE = "structure"
HINT_FIRST_LETTER = "firstLetter"
HINT_FULL_WORD = "fullWord"
HINT_CHECK_LINKING = "checkLinkingAvailable"

REVEAL_KINDS = (HINT_FIRST_LETTER, HINT_FULL_WORD)
WORD_HINT_KINDS = REVEAL_KINDS + (HINT_CHECK_LINKING,)

STAGE_EMPTY = "empty"


def split_answer(answer: str) -> List[str]:
    """Split an answer into its words on runs of whitespace."""
    return (answer or "").split()


def find_linking_index(words: List[str], linking_word: str) -> Optional[int]:
    """Return the index of the linking word, never the first or last word.

    Matching is case-insensitive on the exact word text. Returns None when the
    linking word does not sit strictly inside the phrase.
    """
    target = (linking_word or "").strip().upper()
    for index in range(1, len(words) - 1):
        if words[index].upper() == target:
            return index
    return None


def letter_pattern(word: str, reveal: str = STAGE_EMPTY) -> List[str]:
    """Render one word as a list of display characters.

    Anything but an ASCII letter is always shown, matching what
    ``normalize_answer`` keeps when comparing answers. ``reveal`` selects how many letters
    are shown: none (``empty``), the first real letter (``firstLetter``) or all
    of them (``fullWord``).
    """
    letters: List[str] = []
    first_shown = False
    for ch in word:
        if not LETTER_RE.match(ch):
            letters.append(ch)
        elif reveal == HINT_FULL_WORD:
            letters.append(ch.upper())
        elif reveal == HINT_FIRST_LETTER and not first_shown:
            letters.append(ch.upper())
            first_shown = True
        else:
            letters.append(PLACEHOLDER)
    return letters


def _word_entry(index: int, word: str, is_linking: bool, state: str, selectable: bool) -> Dict[str, Any]:
    return {
        "wordIndex": index,
        "length": len(word),
        "isLinking": is_linking,
        "letters": letter_pattern(word, state),
        "state": state,
        "selectable": selectable,
    }


# PUBLIC_INTERFACE
def structure_reveal(answer: str, linking_word: str) -> Dict[str, Any]:
    """Reveal word boundaries and lengths of an answer without any letters.

    Parameters:
        answer: the stored answer phrase, e.g. "BRUNO MARS ATTACKS".
        linking_word: the seam word shared by both phrases, e.g. "MARS".

    Returns:
        {
            "hintType": "structure",
            "wordStructure": [ {wordIndex, length, isLinking, letters, state, selectable}, ... ],
            "penalty": 5
        }

    Calling this twice returns the same structure; billing the player once per
    question is the caller's job.
    """
    words = split_answer(answer)
    link_index = find_linking_index(words, linking_word)
    structure = [
        _word_entry(i, word, i == link_index, STAGE_EMPTY, i != link_index)
        for i, word in enumerate(words)
    ]
    return {
        "hintType": HINT_STRUCTURE,
        "wordStructure": structure,
        "penalty": STRUCTURE_PENALTY,
    }


def _validate_word_request(words: List[str], word_index: Any, hint_type: str) -> None:
    if isinstance(word_index, bool) or not isinstance(word_index, int):
        raise HintValidationError("Invalid wordIndex")
    if word_index < 0 or word_index >= len(words):
        raise HintValidationError("Invalid wordIndex")
    if hint_type not in WORD_HINT_KINDS:
        raise HintValidationError(
            "Invalid hintType. Must be firstLetter, fullWord, or checkLinkingAvailable"
        )


def hint_penalty(is_linking: bool) -> int:
    """Points charged for a word-level reveal."""
    return LINKING_WORD_PENALTY if is_linking else WORD_PENALTY


# PUBLIC_INTERFACE
def word_hint(
    answer: str,
    linking_word: str,
    word_index: int,
    hint_type: str,
    fully_revealed: Optional[Collection[int]] = None,
) -> Dict[str, Any]:
    """Reveal the first letter or the whole of one word of an answer.

    Parameters:
        answer: stored answer phrase.
        linking_word: stored linking word.
        word_index: 0-based index of the word to reveal.
        hint_type: firstLetter | fullWord | checkLinkingAvailable.
        fully_revealed: optional indices of words the player already fully
            revealed. When given, a linking word reveal is refused until every
            other word is in it. When omitted no such gate is applied.

    Returns:
        For reveal kinds:
        {
            "hintType": str,
            "wordStructure": [...],          # only the target word carries letters
            "penalty": 3 | 5,
            "revealedWord": {"wordIndex": int, "word": str, "isLinking": bool}
        }
        For checkLinkingAvailable:
        {"hintType": "linkingAvailableCheck", "linkingAvailable": True, "penalty": 0}

    Raises:
        HintValidationError: word_index out of range or unknown hint_type.
        LinkingWordLocked: linking word requested while other words are hidden.
    """
    words = split_answer(answer)
    _validate_word_request(words, word_index, hint_type)

    if hint_type == HINT_CHECK_LINKING:
        return {
            "hintType": "linkingAvailableCheck",
            "linkingAvailable": True,
            "penalty": 0,
        }

    link_index = find_linking_index(words, linking_word)
    is_linking = word_index == link_index

    if is_linking and fully_revealed is not None:
        revealed = set(fully_revealed)
        missing = [i for i in range(len(words)) if i != link_index and i not in revealed]
        if missing:
            logger.info("Refusing linking word reveal, words %s still hidden", missing)
            raise LinkingWordLocked("Complete other words first to unlock the linking word")

    structure = []
    for i, word in enumerate(words):
        if i == word_index:
            structure.append(_word_entry(i, word, is_linking, hint_type, hint_type == HINT_FIRST_LETTER))
        else:
            structure.append(_word_entry(i, word, i == link_index, STAGE_EMPTY, i != link_index))

    return {
        "hintType": hint_type,
        "wordStructure": structure,
        "penalty": hint_penalty(is_linking),
        "revealedWord": {
            "wordIndex": word_index,
            "word": words[word_index],
            "isLinking": is_linking,
        },
    }


def normalize_answer(answer: str) -> str:
    """Upper-case an answer, drop everything but letters and spaces, collapse spaces."""
    cleaned = re.sub(r"[^A-Za-z\s]", "", answer or "").upper()
    return re.sub(r"\s+", " ", cleaned).strip()


def answers_match(submitted: str, stored: str) -> bool:
    """Compare two answers ignoring case, punctuation and spacing."""
    submitted_n = normalize_answer(submitted)
    return bool(submitted_n) and submitted_n == normalize_answer(stored)
