import unittest

from vibeyond.app.missions import (
    ANIMAL_MISSION,
    MissionRegistry,
    animal_for_octave,
    ensure_cards_for_mission,
    list_missions,
    mission_notes,
    notes_mission_id,
    resolve_mission,
)
from vibeyond.storage.store import MemoryCardStore
from vibeyond.theory.notes import Note, is_natural


class MissionRegistryTests(unittest.TestCase):
    def test_static_table(self) -> None:
        ids = [m.id for m in list_missions()]
        self.assertEqual(len(ids), 7)
        self.assertIn("animal-octaves", ids)
        self.assertIn("notes:treble+bass:acc", ids)

    def test_unknown_id(self) -> None:
        with self.assertRaises(KeyError):
            resolve_mission("nope")
        with self.assertRaises(KeyError):
            MissionRegistry().resolve("nope")

    def test_custom_registry(self) -> None:
        reg = MissionRegistry({ANIMAL_MISSION.id: ANIMAL_MISSION})
        self.assertEqual([m.id for m in reg.list()], ["animal-octaves"])

    def test_mission_id_builder(self) -> None:
        self.assertEqual(notes_mission_id(), "notes:treble")
        self.assertEqual(notes_mission_id(False, True, True), "notes:bass:acc")
        with self.assertRaises(ValueError):
            notes_mission_id(False, False)


class MissionNotesTests(unittest.TestCase):
    def test_naturals_only_without_accidentals(self) -> None:
        notes = mission_notes(resolve_mission("notes:treble"))
        self.assertEqual(len(notes), 13)
        self.assertTrue(all(is_natural(x) and x.clef == "treble" for x in notes))

    def test_accidentals_triple_the_pool(self) -> None:
        self.assertEqual(len(mission_notes(resolve_mission("notes:bass:acc"))), 39)

    def test_grand_staff_uses_per_clef_ranges(self) -> None:
        notes = mission_notes(resolve_mission("notes:treble+bass"))
        treble = [x for x in notes if x.clef == "treble"]
        bass = [x for x in notes if x.clef == "bass"]
        self.assertEqual((len(treble), len(bass)), (13, 13))
        self.assertEqual(min(x.octave for x in treble), 4)
        self.assertEqual(max(x.octave for x in bass), 4)

    def test_animal_pool(self) -> None:
        self.assertEqual(len(mission_notes(ANIMAL_MISSION)), 22)

    def test_ensure_cards_for_mission_is_idempotent(self) -> None:
        store = MemoryCardStore()
        mission = resolve_mission("notes:treble+bass")
        first = ensure_cards_for_mission(store, mission)
        second = ensure_cards_for_mission(store, mission)
        self.assertEqual(len(first), 26)
        self.assertEqual(first, second)
        self.assertTrue(all(c.mission_id == mission.id for c in store.get_all()))


class AnswerMatchTests(unittest.TestCase):
    def test_staff_needs_enharmonic_pitch(self) -> None:
        m = resolve_mission("notes:treble:acc")
        prompt = Note(pitch="C", accidental="sharp", octave=4)
        self.assertTrue(m.answers_match(prompt, Note(pitch="D", accidental="flat", octave=4, clef="bass")))
        self.assertFalse(m.answers_match(prompt, Note(pitch="C", accidental="sharp", octave=5)))

    def test_animal_grades_octave_only(self) -> None:
        prompt = Note(pitch="F", accidental="natural", octave=3)
        self.assertTrue(ANIMAL_MISSION.answers_match(prompt, Note(pitch="C", accidental="natural", octave=3)))
        self.assertFalse(ANIMAL_MISSION.answers_match(prompt, Note(pitch="F", accidental="natural", octave=4)))

    def test_animals(self) -> None:
        self.assertEqual(animal_for_octave(2), "Elephant")
        self.assertEqual(animal_for_octave(5), "Mouse")
        self.assertEqual(animal_for_octave(9), "Hedgehog")


if __name__ == "__main__":
    unittest.main()
