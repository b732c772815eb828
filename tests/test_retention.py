import unittest
from datetime import datetime, timedelta, timezone

from vibeyond.policy.cards import CardState, create_card, review_card
from vibeyond.policy.retention import FsrsRetention, as_utc, make_retention_from_config

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FsrsRetentionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.algo = FsrsRetention(enable_fuzzing=False)
        self.card = create_card("treble:C:natural:4", "notes:treble", NOW)

    def test_new_card_good_enters_learning(self) -> None:
        out = review_card(self.card, True, algorithm=self.algo, now=NOW)
        self.assertEqual(out.state, CardState.LEARNING)
        self.assertGreater(out.due, NOW)
        self.assertEqual(out.reps, 1)
        self.assertEqual(out.last_review, NOW)
        self.assertIsNotNone(out.stability)
        self.assertIsNotNone(out.difficulty)

    def test_again_is_due_sooner_than_good(self) -> None:
        good = review_card(self.card, True, algorithm=self.algo, now=NOW)
        again = review_card(self.card, False, algorithm=self.algo, now=NOW)
        self.assertLess(again.due, good.due)
        self.assertEqual(again.lapses, 0)

    def _graduate(self):
        first = review_card(self.card, True, algorithm=self.algo, now=NOW)
        return review_card(first, True, algorithm=self.algo, now=first.due)

    def test_graduates_to_review_within_max_interval(self) -> None:
        card = self._graduate()
        self.assertEqual(card.state, CardState.REVIEW)
        self.assertEqual(card.reps, 2)
        self.assertLessEqual(card.due - card.last_review, timedelta(days=30))

    def test_lapse_from_review(self) -> None:
        card = self._graduate()
        lapsed = review_card(card, False, algorithm=self.algo, now=card.due)
        self.assertEqual(lapsed.state, CardState.RELEARNING)
        self.assertEqual(lapsed.lapses, 1)

    def test_naive_times_treated_as_utc(self) -> None:
        self.assertEqual(as_utc(datetime(2026, 3, 1, 9, 0)), NOW)

    def test_config_factory(self) -> None:
        algo = make_retention_from_config(
            {"retention": {"desired_retention": 0.9, "maximum_interval_days": 7, "enable_fuzzing": False}}
        )
        self.assertAlmostEqual(algo.scheduler.desired_retention, 0.9)
        self.assertEqual(algo.scheduler.maximum_interval, 7)
        self.assertFalse(algo.scheduler.enable_fuzzing)


if __name__ == "__main__":
    unittest.main()
