import unittest

from vibeyond.theory.midi import midi_to_name, midi_to_note, note_to_midi
from vibeyond.theory.notes import Note


class MidiTests(unittest.TestCase):
    def test_middle_c(self) -> None:
        self.assertEqual(midi_to_note(60), Note(pitch="C", accidental="natural", octave=4))
        self.assertEqual(midi_to_name(60), "C4")

    def test_black_keys_use_sharps(self) -> None:
        self.assertEqual(midi_to_name(61), "C#4")
        self.assertEqual(midi_to_name(82), "A#5")

    def test_any_spelling_maps_back(self) -> None:
        self.assertEqual(note_to_midi(Note(pitch="D", accidental="flat", octave=4)), 61)
        self.assertEqual(note_to_midi(Note(pitch="C", accidental="sharp", octave=4, clef="bass")), 61)
        for m in range(0, 128):
            self.assertEqual(note_to_midi(midi_to_note(m)), m)

    def test_clef_passed_through(self) -> None:
        self.assertEqual(midi_to_note(40, clef="bass").clef, "bass")

    def test_out_of_range(self) -> None:
        for bad in (-1, 128):
            with self.assertRaises(ValueError):
                midi_to_note(bad)


if __name__ == "__main__":
    unittest.main()
