from __future__ import annotations

"""Staff-reading hints: line/space position plus the matching mnemonic."""

from dataclasses import dataclass
from typing import Optional

from .notes import Note

# Natural pitch + octave of the notes sitting on a line (ledger lines included)
TREBLE_LINES = {"C4", "E4", "G4", "B4", "D5", "F5", "A5"}
BASS_LINES = {"E2", "G2", "B2", "D3", "F3", "A3", "C4"}

# Parenthesized words belong to ledger-line notes
MNEMONICS = {
    "treble": {
        "line": "Every Good Bird Deserves Fun (Always)",
        "space": "(Dogs) FACE (Gorillas)",
    },
    "bass": {
        "line": "(Extra) Good Bagels Deserve Fresh Avocado",
        "space": "(Funny!) All Cows Eat Grass (Burp!)",
    },
}


@dataclass(frozen=True)
class Hint:
    label: str  # "Lines" or "Spaces"
    mnemonic: str
    accidental_note: Optional[str] = None  # "with a sharp" / "with a flat"


def staff_position(note: Note) -> str:
    """Return "line" or "space" for the note's natural position on its clef."""
    key = f"{note.pitch}{note.octave}"
    lines = TREBLE_LINES if note.clef == "treble" else BASS_LINES
    return "line" if key in lines else "space"


def get_hint(note: Note) -> Hint:
    position = staff_position(note)
    accidental_note = None
    if note.accidental == "sharp":
        accidental_note = "with a sharp"
    elif note.accidental == "flat":
        accidental_note = "with a flat"
    return Hint(
        label="Lines" if position == "line" else "Spaces",
        mnemonic=MNEMONICS[note.clef][position],
        accidental_note=accidental_note,
    )
