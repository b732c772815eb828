from __future__ import annotations

"""MIDI note number conversion.

MIDI 60 is middle C (C4). Black keys are spelled with sharps, matching the
on-screen keyboard, so a key press always decodes to a single Note.
"""

from typing import List, Tuple

from .notes import Note, note_to_string, semitone

_CHROMATIC: List[Tuple[str, str]] = [
    ("C", "natural"),
    ("C", "sharp"),
    ("D", "natural"),
    ("D", "sharp"),
    ("E", "natural"),
    ("F", "natural"),
    ("F", "sharp"),
    ("G", "natural"),
    ("G", "sharp"),
    ("A", "natural"),
    ("A", "sharp"),
    ("B", "natural"),
]


def _check_range(midi: int) -> int:
    m = int(midi)
    if m < 0 or m > 127:
        raise ValueError(f"MIDI note out of range: {midi}")
    return m


def midi_to_note(midi: int, clef: str = "treble") -> Note:
    """Convert a MIDI note number to a Note (sharps for black keys)."""
    m = _check_range(midi)
    pitch, accidental = _CHROMATIC[m % 12]
    return Note(pitch=pitch, accidental=accidental, octave=m // 12 - 1, clef=clef)  # type: ignore[arg-type]


def note_to_midi(note: Note) -> int:
    """Inverse of midi_to_note for any spelling: Db4 and C#4 both give 61."""
    return _check_range(semitone(note) + 12)


def midi_to_name(midi: int) -> str:
    """Keyboard key name such as 'C4' or 'F#5'."""
    return note_to_string(midi_to_note(midi))
