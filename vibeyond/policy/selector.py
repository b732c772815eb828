from __future__ import annotations

"""Card selection: which card to show next.

Priority:
1. Due cards (seen before, due now or earlier), most overdue first.
2. NEW cards, at most `max_new_per_session` per session.
3. Fallback: whichever cards are due soonest, even in the future, so a
   session never stalls.

Ties inside a tier are broken at random among cards due within one minute
of the earliest, so a batch of cards falling due together is not replayed
in a fixed, memorisable order.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence

from .cards import CardState, RetentionCard

TIE_WINDOW = timedelta(seconds=60)
DEFAULT_MAX_NEW_PER_SESSION = 2


def _pick_soonest(cards: List[RetentionCard], rng: Any) -> RetentionCard:
    ordered = sorted(cards, key=lambda c: c.due)
    earliest = ordered[0].due
    similar = [c for c in ordered if c.due - earliest < TIE_WINDOW]
    return rng.choice(similar)


def select_next(
    pool: Sequence[RetentionCard],
    new_cards_seen: int,
    max_new_per_session: int = DEFAULT_MAX_NEW_PER_SESSION,
    *,
    now: Optional[datetime] = None,
    rng: Any = None,
) -> Optional[RetentionCard]:
    """Pick the next card from `pool`.

    Args:
        pool: Candidate cards for the active mission.
        new_cards_seen: NEW cards already introduced this session.
        max_new_per_session: Cap on NEW card introductions per session.
        now: Reference time (default: current UTC time).
        rng: Object with a `choice` method (default: the `random` module).

    Returns:
        The chosen card, or None only when the pool is empty.
    """
    if not pool:
        return None
    rng = rng if rng is not None else random
    now = now or datetime.now(timezone.utc)

    due = [c for c in pool if c.state != CardState.NEW and c.due <= now]
    if due:
        return _pick_soonest(due, rng)

    fresh = [c for c in pool if c.state == CardState.NEW]
    if fresh and new_cards_seen < max_new_per_session:
        return rng.choice(fresh)

    return _pick_soonest(list(pool), rng)
