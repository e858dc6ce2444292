from __future__ import annotations


class HintError(ValueError):
    """Base class for hint engine failures."""


class HintValidationError(HintError):
    """Malformed hint request: word index out of range or unknown hint type."""


class LinkingWordLocked(HintError):
    """Linking word requested before every other word was fully revealed."""


class TrackerStateError(HintError):
    """Reveal tracker used out of order (e.g. word hint before the structure)."""


# PUBLIC_INTERFACE
class HintNotAllowed(HintError):
    """A hint was requested for a word that is not selectable.

    ``reason`` is ``"linking_locked"`` for the linking word while other words are
    still hidden, or ``"exhausted"`` for a word that is already fully revealed.
    """

    LINKING_LOCKED = "linking_locked"
    EXHAUSTED = "exhausted"

    MESSAGES = {
        LINKING_LOCKED: "Complete other words first to unlock the linking word",
        EXHAUSTED: "No more hints available for this word",
    }

    def __init__(self, word_index: int, reason: str):
        self.word_index = word_index
        self.reason = reason
        super().__init__(self.MESSAGES[reason])
