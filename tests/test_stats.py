import unittest
from datetime import datetime, timedelta, timezone

from vibeyond.policy.cards import CardState, create_card
from vibeyond.results.schema import Challenge, new_session
from vibeyond.stats.stats import (
    challenge_frame,
    due_label,
    format_card_table,
    format_summary,
    state_counts,
    success_rates,
)
from vibeyond.theory.notes import Note

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
C4 = Note(pitch="C", accidental="natural", octave=4)
D4 = Note(pitch="D", accidental="natural", octave=4)


class StatsTests(unittest.TestCase):
    def _session(self):
        s = new_session("notes:treble", NOW)
        s.challenges = [
            Challenge(C4, C4, True, 700, NOW),
            Challenge(C4, D4, False, 900, NOW),
            Challenge(D4, D4, True, 500, NOW),
            Challenge(D4, None, None, None, NOW),
        ]
        s.total_correct, s.total_incorrect, s.score = 2, 1, 1
        return s

    def test_summary(self) -> None:
        text = format_summary(self._session())
        self.assertIn("Total: 2/3 correct", text)
        self.assertIn("Not completed", text)

    def test_due_label(self) -> None:
        self.assertEqual(due_label(NOW - timedelta(minutes=1), NOW), "due now")
        self.assertEqual(due_label(NOW + timedelta(seconds=20), NOW), "in 1m")
        self.assertEqual(due_label(NOW + timedelta(minutes=10), NOW), "in 10m")
        self.assertEqual(due_label(NOW + timedelta(hours=5), NOW), "in 5h")
        self.assertEqual(due_label(NOW + timedelta(days=3), NOW), "in 3d")

    def test_state_counts(self) -> None:
        cards = [
            create_card("treble:C:natural:4", "m", NOW),
            create_card("treble:D:natural:4", "m", NOW).evolve(state=CardState.REVIEW),
        ]
        self.assertEqual(state_counts(cards), {"new": 1, "learning": 0, "review": 1, "relearning": 0})

    def test_success_rates_skip_abandoned(self) -> None:
        frame = challenge_frame([self._session()])
        self.assertEqual(len(frame), 3)
        rates = success_rates(frame)
        self.assertAlmostEqual(rates["treble:C:natural:4"], 0.5)
        self.assertAlmostEqual(rates["treble:D:natural:4"], 1.0)
        self.assertEqual(success_rates(frame, "other"), {})
        self.assertEqual(success_rates(challenge_frame([])), {})

    def test_card_table_sorting(self) -> None:
        cards = [
            create_card("treble:D:natural:4", "m", NOW),
            create_card("treble:C:natural:4", "m", NOW),
            create_card("treble:E:natural:4", "m", NOW),
        ]
        rates = {"treble:D:natural:4": 1.0, "treble:C:natural:4": 0.5}
        by_note = format_card_table(cards, "note", rates, NOW).splitlines()[1:]
        self.assertEqual([line.split()[0] for line in by_note], ["C4", "D4", "E4"])
        by_success = format_card_table(cards, "success", rates, NOW).splitlines()[1:]
        self.assertEqual([line.split()[0] for line in by_success], ["C4", "D4", "E4"])
        self.assertIn("50%", by_success[0])
        with self.assertRaises(ValueError):
            format_card_table(cards, "color")


if __name__ == "__main__":
    unittest.main()
