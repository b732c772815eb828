from __future__ import annotations

"""Mission registry and metadata.

A mission fixes what is asked (note range, clefs, accidentals), how it is
answered, and how many points finish a session. The table is static; each
mission kind carries its own answer comparison.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..policy.cards import CardStore, RetentionCard, ensure_cards
from ..theory.notes import Note, equals_enharmonic, is_natural, note_range, same_octave, with_clef


class MissionKind(Enum):
    STAFF = "staff"
    ANIMAL_OCTAVES = "animal_octaves"


NoteBounds = Tuple[Note, Note]


@dataclass(frozen=True)
class MissionDefinition:
    id: str
    name: str
    description: str
    kind: MissionKind
    prompt_type: str  # "staff" | "animal"
    input_type: str  # "piano" | "octave-buttons"
    enabled_clefs: Tuple[str, ...]
    include_accidentals: bool
    min_note: Note
    max_note: Note
    default_session_length: int
    per_clef_ranges: Optional[Dict[str, NoteBounds]] = None

    def answers_match(self, prompt: Note, response: Note) -> bool:
        """Grade a response the way this mission's kind defines a match.

        Staff reading needs the exact pitch (any spelling, any clef); the
        animal mission only asks which octave the note lives in.
        """
        if self.kind is MissionKind.STAFF:
            return equals_enharmonic(prompt, response)
        if self.kind is MissionKind.ANIMAL_OCTAVES:
            return same_octave(prompt, response)
        raise ValueError(f"Unhandled mission kind: {self.kind}")

    def clef_bounds(self, clef: str) -> NoteBounds:
        if self.per_clef_ranges and clef in self.per_clef_ranges:
            lo, hi = self.per_clef_ranges[clef]
        else:
            lo, hi = self.min_note, self.max_note
        return with_clef(lo, clef), with_clef(hi, clef)


def _n(pitch: str, octave: int, clef: str = "treble") -> Note:
    return Note(pitch=pitch, accidental="natural", octave=octave, clef=clef)  # type: ignore[arg-type]


TREBLE_RANGE: NoteBounds = (_n("C", 4), _n("A", 5))
BASS_RANGE: NoteBounds = (_n("E", 2, "bass"), _n("C", 4, "bass"))

ANIMAL_MISSION = MissionDefinition(
    id="animal-octaves",
    name="Animal Octaves",
    description="Match the animal to its octave",
    kind=MissionKind.ANIMAL_OCTAVES,
    prompt_type="animal",
    input_type="octave-buttons",
    enabled_clefs=("treble",),
    include_accidentals=False,
    min_note=_n("C", 2),
    max_note=_n("C", 5),
    default_session_length=10,
)

ANIMALS: Dict[int, str] = {2: "Elephant", 3: "Penguin", 4: "Hedgehog", 5: "Mouse"}


def animal_for_octave(octave: int) -> str:
    """Animal standing for an octave; octaves without one use the octave-4 animal."""
    return ANIMALS.get(octave, ANIMALS[4])


NOTES_SESSION_LENGTH = 30


def notes_mission_id(treble: bool = True, bass: bool = False, accidentals: bool = False) -> str:
    """Stable id for a notes mission, e.g. "notes:treble", "notes:treble+bass:acc"."""
    clefs = [c for c, on in (("treble", treble), ("bass", bass)) if on]
    if not clefs:
        raise ValueError("At least one clef must be enabled")
    mid = "notes:" + "+".join(clefs)
    return mid + ":acc" if accidentals else mid


def _notes_mission(treble: bool, bass: bool, accidentals: bool) -> MissionDefinition:
    clefs = tuple(c for c, on in (("treble", treble), ("bass", bass)) if on)
    if treble and bass:
        lo, hi = BASS_RANGE[0], TREBLE_RANGE[1]
        per_clef: Optional[Dict[str, NoteBounds]] = {"treble": TREBLE_RANGE, "bass": BASS_RANGE}
    elif bass:
        lo, hi = BASS_RANGE
        per_clef = None
    else:
        lo, hi = TREBLE_RANGE
        per_clef = None
    label = " + ".join(c.capitalize() for c in clefs)
    return MissionDefinition(
        id=notes_mission_id(treble, bass, accidentals),
        name=f"{label} Pro" if accidentals else label,
        description="Including sharps and flats" if accidentals else "Natural notes only",
        kind=MissionKind.STAFF,
        prompt_type="staff",
        input_type="piano",
        enabled_clefs=clefs,
        include_accidentals=accidentals,
        min_note=lo,
        max_note=hi,
        default_session_length=NOTES_SESSION_LENGTH,
        per_clef_ranges=per_clef,
    )


def _build_table() -> Dict[str, MissionDefinition]:
    table = {ANIMAL_MISSION.id: ANIMAL_MISSION}
    for treble, bass in ((True, False), (False, True), (True, True)):
        for acc in (False, True):
            m = _notes_mission(treble, bass, acc)
            table[m.id] = m
    return table


MISSIONS: Dict[str, MissionDefinition] = _build_table()


def list_missions() -> List[MissionDefinition]:
    return list(MISSIONS.values())


def resolve_mission(mission_id: str) -> MissionDefinition:
    try:
        return MISSIONS[mission_id]
    except KeyError:
        raise KeyError(f"Unknown mission id: {mission_id}") from None


class MissionRegistry:
    """Lookup seam for the session engine; defaults to the static table."""

    def __init__(self, missions: Optional[Dict[str, MissionDefinition]] = None) -> None:
        self._missions = dict(missions) if missions is not None else dict(MISSIONS)

    def resolve(self, mission_id: str) -> MissionDefinition:
        try:
            return self._missions[mission_id]
        except KeyError:
            raise KeyError(f"Unknown mission id: {mission_id}") from None

    def list(self) -> List[MissionDefinition]:
        return list(self._missions.values())


def mission_notes(mission: MissionDefinition) -> List[Note]:
    """Every note a mission can prompt, clef by clef, in range order."""
    notes: List[Note] = []
    for clef in mission.enabled_clefs:
        lo, hi = mission.clef_bounds(clef)
        for note in note_range(lo, hi, clef):
            if mission.include_accidentals or is_natural(note):
                notes.append(note)
    return notes


def ensure_cards_for_mission(store: CardStore, mission: MissionDefinition, now: Optional[datetime] = None) -> List[RetentionCard]:
    """Seed the mission's missing cards and return its schedulable pool."""
    return ensure_cards(store, mission.id, mission_notes(mission), now)
