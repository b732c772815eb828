from .notes import (
    ACCIDENTALS,
    CLEFS,
    PITCHES,
    Note,
    NoteId,
    compare_notes,
    equals_enharmonic,
    is_natural,
    note_from_id,
    note_range,
    note_to_id,
    note_to_string,
    parse_note,
    same_octave,
    semitone,
    with_clef,
)

__all__ = [
    "ACCIDENTALS",
    "CLEFS",
    "PITCHES",
    "Note",
    "NoteId",
    "compare_notes",
    "equals_enharmonic",
    "is_natural",
    "note_from_id",
    "note_range",
    "note_to_id",
    "note_to_string",
    "parse_note",
    "same_octave",
    "semitone",
    "with_clef",
]
