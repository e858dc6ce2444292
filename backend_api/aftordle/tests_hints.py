from itertools import permutations

from django.test import SimpleTestCase

from aftordle.hints import (
    GameProgress,
    HintNotAllowed,
    HintValidationError,
    LinkingWordLocked,
    RevealTracker,
    TrackerStateError,
    advance,
    answers_match,
    final_score,
    normalize_answer,
    performance_grade,
    record_hint,
    record_wrong_answer,
    structure_reveal,
    word_hint,
)
from aftordle.hints.policy import letter_pattern

ANSWER = "BRUNO MARS ATTACKS"
LINK = "MARS"


class HintPolicyTests(SimpleTestCase):
    def test_structure_reveal_example(self):
        data = structure_reveal(ANSWER, LINK)
        self.assertEqual(data["hintType"], "structure")
        self.assertEqual(data["penalty"], 5)
        words = data["wordStructure"]
        self.assertEqual([w["length"] for w in words], [5, 4, 7])
        self.assertEqual([w["isLinking"] for w in words], [False, True, False])
        self.assertEqual([w["selectable"] for w in words], [True, False, True])
        self.assertTrue(all(w["state"] == "empty" for w in words))
        self.assertEqual(words[0]["letters"], ["_"] * 5)

    def test_structure_word_count_matches_whitespace_split(self):
        for answer in ["PEANUT BUTTER  FINGERS", "STAR WARS OF THE ROSES", " APPLE PIE CHART "]:
            data = structure_reveal(answer, "X")
            self.assertEqual(len(data["wordStructure"]), len(answer.split()))

    def test_structure_is_idempotent(self):
        self.assertEqual(structure_reveal(ANSWER, LINK), structure_reveal(ANSWER, LINK))

    def test_linking_word_matched_case_insensitively(self):
        data = structure_reveal("bruno mars attacks", "Mars")
        self.assertTrue(data["wordStructure"][1]["isLinking"])

    def test_linking_word_never_first_or_last(self):
        data = structure_reveal("ROCK AND ROLL", "ROCK")
        self.assertFalse(any(w["isLinking"] for w in data["wordStructure"]))
        self.assertTrue(all(w["selectable"] for w in data["wordStructure"]))

    def test_first_letter_hint(self):
        data = word_hint(ANSWER, LINK, 0, "firstLetter")
        self.assertEqual(data["penalty"], 3)
        self.assertEqual(data["wordStructure"][0]["letters"], ["B", "_", "_", "_", "_"])
        self.assertEqual(data["wordStructure"][0]["state"], "firstLetter")
        self.assertTrue(data["wordStructure"][0]["selectable"])
        self.assertEqual(data["revealedWord"], {"wordIndex": 0, "word": "BRUNO", "isLinking": False})

    def test_full_word_hint_leaves_other_words_blank(self):
        data = word_hint(ANSWER, LINK, 2, "fullWord")
        self.assertEqual(data["penalty"], 3)
        self.assertEqual(data["wordStructure"][2]["letters"], list("ATTACKS"))
        self.assertFalse(data["wordStructure"][2]["selectable"])
        self.assertEqual(data["wordStructure"][0]["letters"], ["_"] * 5)
        self.assertEqual(data["wordStructure"][0]["state"], "empty")

    def test_linking_word_costs_five_for_either_kind(self):
        for kind in ("firstLetter", "fullWord"):
            data = word_hint(ANSWER, LINK, 1, kind)
            self.assertEqual(data["penalty"], 5)
            self.assertTrue(data["revealedWord"]["isLinking"])
        self.assertEqual(word_hint(ANSWER, LINK, 1, "fullWord")["wordStructure"][1]["letters"], list("MARS"))

    def test_check_linking_available_is_free(self):
        data = word_hint(ANSWER, LINK, 1, "checkLinkingAvailable")
        self.assertEqual(data, {"hintType": "linkingAvailableCheck", "linkingAvailable": True, "penalty": 0})

    def test_invalid_word_index(self):
        for index in (7, 3, -1, True, "1", None):
            with self.assertRaises(HintValidationError):
                word_hint(ANSWER, LINK, index, "firstLetter")

    def test_invalid_hint_type(self):
        for kind in ("structure", "bogus", "", None):
            with self.assertRaises(HintValidationError):
                word_hint(ANSWER, LINK, 0, kind)

    def test_punctuation_pre_revealed_at_every_stage(self):
        word = "'N'"
        self.assertEqual(letter_pattern(word), ["'", "_", "'"])
        self.assertEqual(letter_pattern(word, "firstLetter"), ["'", "N", "'"])
        self.assertEqual(letter_pattern(word, "fullWord"), ["'", "N", "'"])
        data = structure_reveal("DON'T STOP BELIEVING", "STOP")
        self.assertEqual(data["wordStructure"][0]["letters"], ["_", "_", "_", "'", "_"])
        self.assertEqual(data["wordStructure"][0]["length"], 5)

    def test_first_letter_skips_leading_punctuation(self):
        data = word_hint("ROCK 'N' ROLL HALL", "'N'", 1, "firstLetter")
        self.assertEqual(data["wordStructure"][1]["letters"], ["'", "N", "'"])

    def test_linking_gate_when_revealed_words_are_known(self):
        with self.assertRaises(LinkingWordLocked):
            word_hint(ANSWER, LINK, 1, "fullWord", fully_revealed=[0])
        data = word_hint(ANSWER, LINK, 1, "fullWord", fully_revealed=[0, 2])
        self.assertEqual(data["penalty"], 5)
        # Non-linking words are never gated.
        self.assertEqual(word_hint(ANSWER, LINK, 0, "fullWord", fully_revealed=[])["penalty"], 3)

    def test_only_ascii_letters_are_hidden(self):
        self.assertEqual(letter_pattern("CAFÉ"), ["_", "_", "_", "É"])
        self.assertEqual(letter_pattern("ÉCLAIR", "firstLetter"), ["É", "C", "_", "_", "_", "_"])
        self.assertEqual(normalize_answer("Café au lait"), "CAF AU LAIT")
        self.assertFalse(answers_match("CAFE", "CAFÉ"))

    def test_answer_normalization(self):
        self.assertEqual(normalize_answer("  don't   stop believing! "), "DONT STOP BELIEVING")
        self.assertTrue(answers_match("Bruno mars  ATTACKS", ANSWER))
        self.assertTrue(answers_match("DON'T STOP BELIEVING", "DONT STOP BELIEVING"))
        self.assertFalse(answers_match("BRUNO MARS", ANSWER))
        self.assertFalse(answers_match("", ""))


class RevealTrackerTests(SimpleTestCase):
    def _tracker(self, answer=ANSWER, link=LINK):
        tracker = RevealTracker()
        tracker.initialize(structure_reveal(answer, link))
        return tracker

    def test_initialize_from_structure(self):
        tracker = self._tracker()
        self.assertEqual([w.selectable for w in tracker.words], [True, False, True])
        self.assertEqual([w.stage for w in tracker.words], ["empty"] * 3)
        self.assertEqual(tracker.words[2].letters, ["_"] * 7)

    def test_initialize_only_once(self):
        tracker = self._tracker()
        with self.assertRaises(TrackerStateError):
            tracker.initialize(structure_reveal(ANSWER, LINK))

    def test_word_hint_requires_structure(self):
        tracker = RevealTracker()
        with self.assertRaises(TrackerStateError):
            tracker.next_hint_kind(0)
        with self.assertRaises(TrackerStateError):
            tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "firstLetter"))

    def test_hint_progression_for_a_word(self):
        tracker = self._tracker()
        self.assertEqual(tracker.next_hint_kind(0), "firstLetter")
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "firstLetter"))
        self.assertEqual(tracker.words[0].letters, ["B", "_", "_", "_", "_"])
        self.assertTrue(tracker.words[0].selectable)
        self.assertEqual(tracker.next_hint_kind(0), "fullWord")
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "fullWord"))
        self.assertEqual(tracker.words[0].stage, "fullWord")
        self.assertFalse(tracker.words[0].selectable)

    def test_rejections_carry_distinct_reasons(self):
        tracker = self._tracker()
        with self.assertRaises(HintNotAllowed) as locked:
            tracker.next_hint_kind(1)
        self.assertEqual(locked.exception.reason, HintNotAllowed.LINKING_LOCKED)
        self.assertIn("Complete other words first", str(locked.exception))

        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "fullWord"))
        with self.assertRaises(HintNotAllowed) as exhausted:
            tracker.next_hint_kind(0)
        self.assertEqual(exhausted.exception.reason, HintNotAllowed.EXHAUSTED)
        self.assertIn("No more hints", str(exhausted.exception))

    def test_first_then_full_equals_full(self):
        stepwise = self._tracker()
        stepwise.apply_word_hint(word_hint(ANSWER, LINK, 2, "firstLetter"))
        stepwise.apply_word_hint(word_hint(ANSWER, LINK, 2, "fullWord"))
        direct = self._tracker()
        direct.apply_word_hint(word_hint(ANSWER, LINK, 2, "fullWord"))
        self.assertEqual(stepwise.snapshot(), direct.snapshot())

    def test_blank_words_in_response_do_not_overwrite_revealed_words(self):
        tracker = self._tracker()
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "fullWord"))
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 2, "firstLetter"))
        self.assertEqual(tracker.words[0].letters, list("BRUNO"))
        self.assertEqual(tracker.words[0].stage, "fullWord")

    def test_stage_never_regresses(self):
        tracker = self._tracker()
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "fullWord"))
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "firstLetter"))
        self.assertEqual(tracker.words[0].stage, "fullWord")
        self.assertEqual(tracker.words[0].letters, list("BRUNO"))

    def test_linking_unlocks_only_after_all_other_words_for_every_order(self):
        answer, link = "PEANUT BUTTER CUP CAKE", "BUTTER"
        for order in permutations([0, 2, 3]):
            tracker = self._tracker(answer, link)
            for position, index in enumerate(order):
                self.assertFalse(tracker.words[1].selectable)
                tracker.apply_word_hint(word_hint(answer, link, index, "fullWord"))
                expected = position == len(order) - 1
                self.assertEqual(tracker.words[1].selectable, expected, order)
            self.assertEqual(tracker.next_hint_kind(1), "firstLetter")

    def test_first_letters_do_not_unlock_linking_word(self):
        tracker = self._tracker()
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "firstLetter"))
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 2, "firstLetter"))
        self.assertFalse(tracker.linking_unlocked())
        self.assertFalse(tracker.words[1].selectable)

    def test_revealing_linking_word_keeps_other_words(self):
        tracker = self._tracker()
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "fullWord"))
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 2, "fullWord"))
        before = [w.stage for w in tracker.words if not w.is_linking]
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 1, "firstLetter"))
        self.assertEqual(tracker.words[1].letters, ["M", "_", "_", "_"])
        self.assertTrue(tracker.words[1].selectable)
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 1, "fullWord"))
        self.assertEqual([w.stage for w in tracker.words if not w.is_linking], before)
        self.assertFalse(tracker.words[1].selectable)
        self.assertEqual(tracker.fully_revealed_indices(), [0, 1, 2])

    def test_full_answer_completes_every_word(self):
        tracker = self._tracker()
        tracker.apply_word_hint(word_hint(ANSWER, LINK, 0, "firstLetter"))
        tracker.apply_full_answer(ANSWER)
        self.assertEqual([w.stage for w in tracker.words], ["complete"] * 3)
        self.assertEqual([w.selectable for w in tracker.words], [False] * 3)
        self.assertEqual(tracker.words[2].letters, list("ATTACKS"))

    def test_full_answer_without_structure(self):
        tracker = RevealTracker()
        tracker.apply_full_answer("DON'T STOP BELIEVING", "STOP")
        self.assertTrue(tracker.words[1].is_linking)
        self.assertEqual(tracker.words[0].letters, list("DON'T"))
        self.assertEqual(tracker.snapshot()[0]["stage"], "complete")

    def test_check_response_is_not_a_reveal(self):
        tracker = self._tracker()
        with self.assertRaises(TrackerStateError):
            tracker.apply_word_hint(word_hint(ANSWER, LINK, 1, "checkLinkingAvailable"))


class GameProgressTests(SimpleTestCase):
    def test_transitions_return_new_objects(self):
        start = GameProgress.start(5)
        hinted = record_hint(start, 5)
        self.assertIsNot(start, hinted)
        self.assertEqual(start.hint_penalties, 0)
        self.assertEqual(hinted.hint_penalties, 5)
        self.assertEqual(hinted.question_hints, (1, 0, 0, 0, 0))
        self.assertEqual(record_wrong_answer(hinted).wrong_answers, 1)

    def test_advance_through_all_questions(self):
        progress = GameProgress.start(2)
        progress = advance(progress)
        self.assertEqual(progress.clue_number, 2)
        self.assertFalse(progress.completed)
        progress = advance(progress)
        self.assertTrue(progress.completed)
        with self.assertRaises(ValueError):
            record_hint(progress, 3)

    def test_final_score(self):
        progress = GameProgress.start(5)
        progress = record_hint(progress, 5)
        progress = record_hint(progress, 3)
        progress = record_wrong_answer(progress)
        self.assertEqual(final_score(progress, 100), 500 + 200 - 8 - 10)
        self.assertEqual(final_score(progress, 1000), 500 - 8 - 10)

    def test_performance_grade(self):
        self.assertEqual([performance_grade(n) for n in (0, 2, 4, 5)], ["perfect", "good", "struggled", "heavy-struggle"])

    def test_default_progress_accepts_hints(self):
        progress = record_hint(GameProgress(), 5)
        self.assertEqual(progress.question_hints, (1, 0, 0, 0, 0))
        self.assertEqual(GameProgress(total_questions=3, question_hints=(2,)).question_hints, (2, 0, 0))
