from __future__ import annotations

"""Note model: pitch spelling, semitone math and range enumeration.

Comparison is by absolute semitone, so enharmonic spellings (C#4, Db4)
match and the clef never matters. A NoteId is the string
"<clef>:<pitch>:<accidental>:<octave>", e.g. "treble:C:natural:4", and is
the key the card store uses.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Literal

PITCHES = ["C", "D", "E", "F", "G", "A", "B"]
ACCIDENTALS = ["natural", "sharp", "flat"]
CLEFS = ["treble", "bass"]

Pitch = Literal["C", "D", "E", "F", "G", "A", "B"]
Accidental = Literal["natural", "sharp", "flat"]
Clef = Literal["treble", "bass"]
NoteId = str

NATURAL_SEMITONES: Dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
ACCIDENTAL_OFFSETS: Dict[str, int] = {"natural": 0, "sharp": 1, "flat": -1}
ACCIDENTAL_SYMBOLS: Dict[str, str] = {"natural": "", "sharp": "#", "flat": "b"}
_SYMBOL_TO_ACCIDENTAL: Dict[str, str] = {"#": "sharp", "b": "flat"}
# natural < sharp < flat when two spellings share a semitone
_ACCIDENTAL_ORDER: Dict[str, int] = {"natural": 0, "sharp": 1, "flat": 2}


@dataclass(frozen=True)
class Note:
    """A written note: letter, accidental, octave (scientific pitch) and staff."""

    pitch: Pitch
    accidental: Accidental
    octave: int
    clef: Clef = "treble"

    def __post_init__(self) -> None:
        if self.pitch not in NATURAL_SEMITONES:
            raise ValueError(f"Unsupported pitch letter: {self.pitch!r}")
        if self.accidental not in ACCIDENTAL_OFFSETS:
            raise ValueError(f"Unsupported accidental: {self.accidental!r}")
        if self.clef not in CLEFS:
            raise ValueError(f"Unsupported clef: {self.clef!r}")
        if isinstance(self.octave, bool) or not isinstance(self.octave, int):
            raise ValueError(f"Octave must be an integer, got {self.octave!r}")

    def __str__(self) -> str:
        return note_to_string(self)


def semitone(note: Note) -> int:
    """Absolute pitch in semitones: octave*12 + letter + accidental. C4 -> 48."""
    return note.octave * 12 + NATURAL_SEMITONES[note.pitch] + ACCIDENTAL_OFFSETS[note.accidental]


def note_to_id(note: Note) -> NoteId:
    return f"{note.clef}:{note.pitch}:{note.accidental}:{note.octave}"


def note_from_id(note_id: NoteId) -> Note:
    """Decode a NoteId produced by note_to_id.

    Raises:
        ValueError: if the id is not a well-formed NoteId.
    """
    parts = str(note_id).split(":")
    if len(parts) != 4:
        raise ValueError(f"Malformed note id: {note_id!r}")
    clef, pitch, accidental, octave_str = parts
    try:
        octave = int(octave_str)
    except ValueError as e:
        raise ValueError(f"Invalid octave in note id: {note_id!r}") from e
    return Note(pitch=pitch, accidental=accidental, octave=octave, clef=clef)  # type: ignore[arg-type]


def note_to_string(note: Note) -> str:
    """Compact display name without clef: "C4", "F#5", "Bb3"."""
    return f"{note.pitch}{ACCIDENTAL_SYMBOLS[note.accidental]}{note.octave}"


def parse_note(text: str, clef: str = "treble") -> Note:
    """Parse a note string like 'C4', 'Db3', 'g#5' into a Note on the given clef."""
    s = (text or "").strip()
    if len(s) < 2:
        raise ValueError(f"Invalid note string: {text!r}")
    pitch = s[0].upper()
    idx = 1
    accidental = "natural"
    if s[idx] in _SYMBOL_TO_ACCIDENTAL:
        accidental = _SYMBOL_TO_ACCIDENTAL[s[idx]]
        idx += 1
    try:
        octave = int(s[idx:])
    except ValueError as e:
        raise ValueError(f"Invalid octave in note string: {text!r}") from e
    return Note(pitch=pitch, accidental=accidental, octave=octave, clef=clef)  # type: ignore[arg-type]


def with_clef(note: Note, clef: str) -> Note:
    return replace(note, clef=clef)


def is_natural(note: Note) -> bool:
    return note.accidental == "natural"


def equals_enharmonic(a: Note, b: Note) -> bool:
    """True when both notes sound the same pitch (C#4 == Db4), whatever the clef."""
    return semitone(a) == semitone(b)


def same_octave(a: Note, b: Note) -> bool:
    return a.octave == b.octave


def compare_notes(a: Note, b: Note) -> int:
    """Negative if a is lower than b, positive if higher, 0 if enharmonic."""
    return semitone(a) - semitone(b)


def _sort_key(note: Note) -> tuple[int, int]:
    return semitone(note), _ACCIDENTAL_ORDER[note.accidental]


def note_range(min_note: Note, max_note: Note, clef: str) -> List[Note]:
    """All notes between two bounds (inclusive) on one clef.

    Inclusion is decided on the natural position of each letter, and the
    bounds are compared without their own accidentals, so a B#3 bound acts
    exactly like B3 and no accidental leaks one semitone past the edge.
    Every included position is emitted as natural, sharp and flat.

    Args:
        min_note: Lowest bound (its accidental is ignored).
        max_note: Highest bound (its accidental is ignored).
        clef: Clef assigned to every generated note.

    Returns:
        Notes sorted by semitone, natural before sharp before flat on ties.
    """
    lo = semitone(replace(min_note, accidental="natural"))
    hi = semitone(replace(max_note, accidental="natural"))
    notes: List[Note] = []
    for octave in range(min_note.octave, max_note.octave + 1):
        for pitch in PITCHES:
            natural_semi = octave * 12 + NATURAL_SEMITONES[pitch]
            if natural_semi < lo or natural_semi > hi:
                continue
            for acc in ACCIDENTALS:
                notes.append(Note(pitch=pitch, accidental=acc, octave=octave, clef=clef))  # type: ignore[arg-type]
    notes.sort(key=_sort_key)
    return notes
