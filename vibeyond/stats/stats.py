from __future__ import annotations

"""Session summaries and card-inspector tables.

Plain-text formatting for the CLI plus a pandas view over recorded
challenges for per-note success rates.
"""

from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..policy.cards import CardState, RetentionCard
from ..results.schema import Session
from ..theory.notes import note_from_id, note_to_id, note_to_string, semitone

SORT_KEYS = ("note", "state", "success")


def format_summary(session: Session) -> str:
    """Return a human-readable summary of one session."""
    answered = session.total_correct + session.total_incorrect
    lines = [
        f"Mission: {session.mission_id}",
        f"Score: {session.score}",
        f"Total: {session.total_correct}/{answered} correct",
    ]
    if session.hints_used:
        lines.append(f"Hints used: {session.hints_used}")
    lines.append("Completed" if session.completed else "Not completed")
    return "\n".join(lines)


def state_counts(cards: Iterable[RetentionCard]) -> Dict[str, int]:
    """Number of cards per state, every state present (zero if empty)."""
    counts = Counter(c.state for c in cards)
    return {s.name.lower(): counts.get(s, 0) for s in CardState}


def due_label(due: datetime, now: datetime) -> str:
    """Relative due time: 'due now', 'in 5m', 'in 3h', 'in 2d'."""
    seconds = (due - now).total_seconds()
    if seconds <= 0:
        return "due now"
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"in {max(1, minutes)}m"
    hours = minutes // 60
    if hours < 24:
        return f"in {hours}h"
    return f"in {hours // 24}d"


def challenge_frame(sessions: Iterable[Session]) -> pd.DataFrame:
    """One row per answered challenge across sessions."""
    rows = []
    for s in sessions:
        for ch in s.challenges:
            if ch.correct is None:
                continue
            rows.append(
                {
                    "session_id": s.id,
                    "mission_id": s.mission_id,
                    "prompt_note_id": note_to_id(ch.prompt_note),
                    "correct": bool(ch.correct),
                    "response_time_ms": ch.response_time_ms,
                    "timestamp": ch.timestamp,
                }
            )
    columns = ["session_id", "mission_id", "prompt_note_id", "correct", "response_time_ms", "timestamp"]
    return pd.DataFrame(rows, columns=columns)


def success_rates(frame: pd.DataFrame, mission_id: Optional[str] = None) -> Dict[str, float]:
    """Share of correct answers per prompt note id."""
    if frame.empty:
        return {}
    if mission_id is not None:
        frame = frame[frame["mission_id"] == mission_id]
        if frame.empty:
            return {}
    rates = frame.groupby("prompt_note_id")["correct"].mean()
    return {str(k): float(v) for k, v in rates.items()}


def _sort_cards(cards: List[RetentionCard], sort: str, rates: Dict[str, float]) -> List[RetentionCard]:
    if sort == "note":
        return sorted(cards, key=lambda c: (note_from_id(c.note_id).clef, semitone(note_from_id(c.note_id))))
    if sort == "state":
        return sorted(cards, key=lambda c: (int(c.state), c.due))
    if sort == "success":
        # unseen notes last
        return sorted(cards, key=lambda c: (c.note_id not in rates, rates.get(c.note_id, 0.0)))
    raise ValueError(f"Unknown sort key: {sort}")


def format_card_table(
    cards: Iterable[RetentionCard],
    sort: str = "note",
    rates: Optional[Dict[str, float]] = None,
    now: Optional[datetime] = None,
) -> str:
    """Card inspector: one line per card with state, due time, reps and success."""
    rates = rates or {}
    ordered = _sort_cards(list(cards), sort, rates)
    lines = [f"{'note':<8}{'clef':<8}{'state':<12}{'due':<10}{'reps':>5}{'lapses':>8}{'success':>9}"]
    for c in ordered:
        note = note_from_id(c.note_id)
        due = due_label(c.due, now) if now is not None else c.due.isoformat(timespec="minutes")
        rate = f"{rates[c.note_id] * 100:.0f}%" if c.note_id in rates else "-"
        lines.append(
            f"{note_to_string(note):<8}{note.clef:<8}{c.state.name.lower():<12}{due:<10}{c.reps:>5}{c.lapses:>8}{rate:>9}"
        )
    return "\n".join(lines)
