import unittest

from vibeyond.theory.hints import MNEMONICS, get_hint, staff_position
from vibeyond.theory.notes import Note


class HintTests(unittest.TestCase):
    def test_treble_line_and_space(self) -> None:
        self.assertEqual(staff_position(Note(pitch="E", accidental="natural", octave=4)), "line")
        self.assertEqual(staff_position(Note(pitch="F", accidental="natural", octave=4)), "space")

    def test_bass_uses_its_own_lines(self) -> None:
        g2 = Note(pitch="G", accidental="natural", octave=2, clef="bass")
        self.assertEqual(staff_position(g2), "line")
        hint = get_hint(g2)
        self.assertEqual(hint.label, "Lines")
        self.assertEqual(hint.mnemonic, MNEMONICS["bass"]["line"])
        self.assertIsNone(hint.accidental_note)

    def test_accidental_keeps_natural_position(self) -> None:
        hint = get_hint(Note(pitch="F", accidental="sharp", octave=5))
        self.assertEqual(hint.label, "Lines")
        self.assertEqual(hint.accidental_note, "with a sharp")
        flat = get_hint(Note(pitch="A", accidental="flat", octave=4))
        self.assertEqual(flat.label, "Spaces")
        self.assertEqual(flat.mnemonic, MNEMONICS["treble"]["space"])
        self.assertEqual(flat.accidental_note, "with a flat")


if __name__ == "__main__":
    unittest.main()
