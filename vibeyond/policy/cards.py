from __future__ import annotations

"""Retention cards: one spaced-repetition flashcard per (mission, note).

A card's scheduling metrics (stability, difficulty, step) belong to the
retention algorithm. This module only creates cards, maps a binary answer
to a rating, and hands the card to whatever `RetentionAlgorithm` the caller
injects.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import IntEnum
from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol

from ..theory.notes import NoteId, note_to_id

if TYPE_CHECKING:
    from ..theory.notes import Note


class CardState(IntEnum):
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class Rating(IntEnum):
    """Binary recall signal. Values line up with the FSRS Again/Good buttons."""

    AGAIN = 1
    GOOD = 3


@dataclass(frozen=True)
class RetentionCard:
    id: str
    note_id: NoteId
    mission_id: str
    state: CardState
    due: datetime
    stability: Optional[float] = None
    difficulty: Optional[float] = None
    step: Optional[int] = None
    reps: int = 0
    lapses: int = 0
    last_review: Optional[datetime] = None

    @property
    def is_new(self) -> bool:
        return self.state == CardState.NEW

    def evolve(self, **changes) -> "RetentionCard":
        """Copy with scheduling fields replaced; identity fields cannot change."""
        for key in ("id", "note_id", "mission_id"):
            changes.pop(key, None)
        return replace(self, **changes)


class RetentionAlgorithm(Protocol):
    """Anything that turns (card, review time, rating) into the next card."""

    def next_state(self, card: RetentionCard, now: datetime, rating: Rating) -> RetentionCard: ...


class CardStore(Protocol):
    def get_all(self, mission_id: Optional[str] = None) -> List[RetentionCard]: ...

    def get(self, card_id: str) -> Optional[RetentionCard]: ...

    def put(self, card: RetentionCard) -> None: ...

    def put_many(self, cards: List[RetentionCard]) -> None: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


def card_id(mission_id: str, note_id: NoteId) -> str:
    return f"{mission_id}::{note_id}"


def create_card(note_id: NoteId, mission_id: str, now: Optional[datetime] = None) -> RetentionCard:
    """Mint a NEW card, due immediately."""
    return RetentionCard(
        id=card_id(mission_id, note_id),
        note_id=note_id,
        mission_id=mission_id,
        state=CardState.NEW,
        due=now or _now(),
    )


def review_card(
    card: RetentionCard,
    correct: bool,
    *,
    algorithm: RetentionAlgorithm,
    now: Optional[datetime] = None,
) -> RetentionCard:
    """Apply one answer to a card and return the updated copy.

    The learner's signal is binary (right key or not), so only two ratings
    are used: correct -> GOOD, incorrect -> AGAIN. The input card is never
    mutated; identity fields are carried over whatever the algorithm does.
    """
    rating = Rating.GOOD if correct else Rating.AGAIN
    result = algorithm.next_state(card, now or _now(), rating)
    return replace(result, id=card.id, note_id=card.note_id, mission_id=card.mission_id)


def ensure_cards(
    store: CardStore,
    mission_id: str,
    notes: Iterable["Note"],
    now: Optional[datetime] = None,
) -> List[RetentionCard]:
    """Seed missing cards for a mission and return its pool.

    Idempotent: existing cards keep their history. Missing cards are written
    in one `put_many` batch. The returned pool only holds cards whose note
    belongs to `notes`, in the order of `notes`, so stale cards left over
    from an older range never get scheduled.
    """
    created_at = now or _now()
    note_ids = [note_to_id(n) for n in notes]
    existing = {c.note_id: c for c in store.get_all(mission_id)}
    pool: List[RetentionCard] = []
    missing: List[RetentionCard] = []
    for nid in note_ids:
        card = existing.get(nid)
        if card is None:
            card = create_card(nid, mission_id, created_at)
            existing[nid] = card
            missing.append(card)
        pool.append(card)
    if missing:
        store.put_many(missing)
    return pool
