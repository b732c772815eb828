import random
import unittest
from datetime import datetime, timedelta, timezone

from vibeyond.policy.cards import CardState, RetentionCard, create_card
from vibeyond.policy.selector import select_next

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def card(name: str, state: CardState, due: datetime) -> RetentionCard:
    return create_card(f"treble:{name}:natural:4", "m", due).evolve(state=state)


class LastChoice:
    """rng stub: remembers the candidates and picks the last one."""

    def __init__(self) -> None:
        self.seen = []

    def choice(self, seq):
        self.seen = list(seq)
        return self.seen[-1]


class SelectorTests(unittest.TestCase):
    def test_empty_pool(self) -> None:
        self.assertIsNone(select_next([], 0, now=NOW))

    def test_due_card_beats_new_card(self) -> None:
        due = card("C", CardState.REVIEW, NOW - timedelta(hours=1))
        fresh = card("D", CardState.NEW, NOW - timedelta(days=1))
        self.assertEqual(select_next([fresh, due], 0, now=NOW, rng=LastChoice()), due)

    def test_due_card_beats_two_new_cards_for_any_seed(self) -> None:
        due = card("C", CardState.REVIEW, NOW - timedelta(minutes=1))
        pool = [card("D", CardState.NEW, NOW), card("E", CardState.NEW, NOW), due]
        for seed in range(20):
            self.assertEqual(select_next(pool, 0, 2, now=NOW, rng=random.Random(seed)), due)

    def test_most_overdue_first(self) -> None:
        older = card("C", CardState.REVIEW, NOW - timedelta(hours=2))
        newer = card("D", CardState.LEARNING, NOW - timedelta(minutes=5))
        self.assertEqual(select_next([newer, older], 0, now=NOW, rng=LastChoice()), older)

    def test_tie_window_is_under_a_minute(self) -> None:
        a = card("C", CardState.REVIEW, NOW - timedelta(minutes=10))
        b = card("D", CardState.REVIEW, NOW - timedelta(minutes=10) + timedelta(seconds=59))
        c = card("E", CardState.REVIEW, NOW - timedelta(minutes=10) + timedelta(seconds=60))
        rng = LastChoice()
        self.assertEqual(select_next([c, b, a], 0, now=NOW, rng=rng), b)
        self.assertEqual(rng.seen, [a, b])

    def test_new_cards_until_cap(self) -> None:
        fresh = card("C", CardState.NEW, NOW + timedelta(hours=1))
        learning = card("D", CardState.LEARNING, NOW + timedelta(minutes=5))
        self.assertEqual(select_next([fresh, learning], 1, 2, now=NOW, rng=LastChoice()), fresh)
        self.assertEqual(select_next([fresh, learning], 2, 2, now=NOW, rng=LastChoice()), learning)

    def test_fallback_never_stalls(self) -> None:
        rng = random.Random(3)
        pool = [card(p, CardState.REVIEW, NOW + timedelta(days=i + 1)) for i, p in enumerate("CDEFGAB")]
        for seen in range(5):
            picked = select_next(pool, seen, 0, now=NOW, rng=rng)
            self.assertEqual(picked, pool[0])

    def test_only_new_cards_past_cap_still_returns_one(self) -> None:
        pool = [card(p, CardState.NEW, NOW) for p in "CDE"]
        self.assertIn(select_next(pool, 5, 2, now=NOW, rng=random.Random(1)), pool)


if __name__ == "__main__":
    unittest.main()
