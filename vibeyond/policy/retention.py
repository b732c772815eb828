from __future__ import annotations

"""FSRS-backed retention algorithm.

Implements the `RetentionAlgorithm` capability from `cards` on top of the
py-fsrs scheduler. Our NEW state has no FSRS counterpart: a NEW card is
handed to FSRS as a fresh learning card at step 0.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fsrs import Card as FsrsCard
from fsrs import Rating as FsrsRating
from fsrs import Scheduler
from fsrs import State as FsrsState

from .cards import CardState, Rating, RetentionCard


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class FsrsRetention:
    """FSRS scheduler tuned for a young learner.

    - desired_retention 0.95: frequent reinforcement, low frustration.
    - maximum_interval 30 days: the app may not be opened daily.
    - fuzzing on: reviews do not cluster on the same moment.
    """

    def __init__(
        self,
        desired_retention: float = 0.95,
        maximum_interval: int = 30,
        enable_fuzzing: bool = True,
    ) -> None:
        self.scheduler = Scheduler(
            desired_retention=float(desired_retention),
            maximum_interval=int(maximum_interval),
            enable_fuzzing=bool(enable_fuzzing),
        )

    @staticmethod
    def _to_fsrs(card: RetentionCard) -> FsrsCard:
        if card.state == CardState.NEW:
            return FsrsCard(card_id=0, state=FsrsState.Learning, step=0, due=as_utc(card.due))
        return FsrsCard(
            card_id=0,
            state=FsrsState(int(card.state)),
            step=card.step,
            stability=card.stability,
            difficulty=card.difficulty,
            due=as_utc(card.due),
            last_review=as_utc(card.last_review) if card.last_review is not None else None,
        )

    def next_state(self, card: RetentionCard, now: datetime, rating: Rating) -> RetentionCard:
        review_at = as_utc(now)
        updated, _log = self.scheduler.review_card(
            self._to_fsrs(card), FsrsRating(int(rating)), review_datetime=review_at
        )
        lapses = card.lapses
        if rating == Rating.AGAIN and card.state == CardState.REVIEW:
            lapses += 1
        return card.evolve(
            state=CardState(int(updated.state)),
            due=as_utc(updated.due),
            stability=updated.stability,
            difficulty=updated.difficulty,
            step=updated.step,
            last_review=review_at,
            reps=card.reps + 1,
            lapses=lapses,
        )


def make_retention_from_config(cfg: Dict[str, Any]) -> FsrsRetention:
    r = cfg.get("retention", {}) or {}
    return FsrsRetention(
        desired_retention=float(r.get("desired_retention", 0.95)),
        maximum_interval=int(r.get("maximum_interval_days", 30)),
        enable_fuzzing=bool(r.get("enable_fuzzing", True)),
    )
