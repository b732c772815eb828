from __future__ import annotations

"""Session Engine: the practice loop's phase machine.

    idle -> playing -> feedback -> playing -> ... -> complete
                 \\________________/
                   end() -> idle

The engine owns no storage and no globals: card store, session store,
mission registry, retention algorithm, random source and clock are all
injected. Every store write happens before the state change it belongs to,
so the next selection always sees the updated card.

A failing write propagates to the caller and the answer is rejected:
phase, score and challenges stay as they were. Only a card write that
already succeeded is kept, as the current card, so retrying the answer
reviews the stored card instead of replaying the old one.
"""

import random
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..policy.cards import CardStore, RetentionAlgorithm, RetentionCard, review_card
from ..policy.retention import FsrsRetention, make_retention_from_config
from ..policy.selector import DEFAULT_MAX_NEW_PER_SESSION, select_next
from ..results.progression import apply_answer, apply_hint_penalty, calculate_progression, is_session_complete
from ..results.schema import Challenge, Session, SessionStore, new_session
from ..theory.hints import Hint, get_hint
from ..theory.notes import Note, note_from_id, note_to_string
from .events import EventBus
from .explain import trace as xtrace
from .missions import MissionDefinition, MissionRegistry, ensure_cards_for_mission


class Phase(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    FEEDBACK = "feedback"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SessionContext:
    mission: MissionDefinition
    goal_length: int
    started_at: datetime


@dataclass
class RuntimeState:
    phase: Phase = Phase.IDLE
    session: Optional[Session] = None
    current_card: Optional[RetentionCard] = None
    presented_at: Optional[datetime] = None
    progression: float = 0.0
    last_answer_correct: Optional[bool] = None
    new_cards_seen: int = 0
    hint_used: bool = False


@dataclass(frozen=True)
class EngineSnapshot:
    """What the presentation layer needs after each engine call."""

    phase: Phase
    mission_id: Optional[str]
    prompt_note: Optional[Note]
    progression: float
    last_answer_correct: Optional[bool]
    score: int
    total_correct: int
    total_incorrect: int
    goal_length: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionEngine:
    def __init__(
        self,
        cards: CardStore,
        sessions: SessionStore,
        *,
        missions: Optional[MissionRegistry] = None,
        retention: Optional[RetentionAlgorithm] = None,
        rng: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
        session_length: int = 0,
        max_new_per_session: int = DEFAULT_MAX_NEW_PER_SESSION,
        events: Optional[EventBus] = None,
    ) -> None:
        self.cards = cards
        self.sessions = sessions
        self.missions = missions or MissionRegistry()
        self.retention = retention if retention is not None else FsrsRetention()
        self.rng = rng if rng is not None else random
        self.clock = clock or _utcnow
        self.session_length = max(0, int(session_length))
        self.max_new_per_session = int(max_new_per_session)
        self.events = events or EventBus()
        self.ctx: Optional[SessionContext] = None
        self.state = RuntimeState()
        self._pool: List[RetentionCard] = []

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], cards: CardStore, sessions: SessionStore, **kwargs: Any) -> "SessionEngine":
        sess = cfg.get("session", {}) or {}
        kwargs.setdefault("retention", make_retention_from_config(cfg))
        kwargs.setdefault("session_length", int(sess.get("length", 0)))
        kwargs.setdefault("max_new_per_session", int(sess.get("max_new_per_session", DEFAULT_MAX_NEW_PER_SESSION)))
        return cls(cards, sessions, **kwargs)

    # --- read-only views ---

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def session(self) -> Optional[Session]:
        return self.state.session

    @property
    def current_card(self) -> Optional[RetentionCard]:
        return self.state.current_card

    @property
    def progression(self) -> float:
        return self.state.progression

    @property
    def pool(self) -> List[RetentionCard]:
        return list(self._pool)

    @property
    def current_note(self) -> Optional[Note]:
        card = self.state.current_card
        return note_from_id(card.note_id) if card is not None else None

    def effective_goal_length(self, mission: MissionDefinition) -> int:
        """Configured session length if set, else the mission's default."""
        return self.session_length or int(mission.default_session_length)

    def snapshot(self) -> EngineSnapshot:
        st = self.state
        s = st.session
        return EngineSnapshot(
            phase=st.phase,
            mission_id=self.ctx.mission.id if self.ctx else None,
            prompt_note=self.current_note,
            progression=st.progression,
            last_answer_correct=st.last_answer_correct,
            score=s.score if s else 0,
            total_correct=s.total_correct if s else 0,
            total_incorrect=s.total_incorrect if s else 0,
            goal_length=self.ctx.goal_length if self.ctx else 0,
        )

    def _publish(self) -> EngineSnapshot:
        snap = self.snapshot()
        self.events.emit("snapshot", snap)
        return snap

    def _replace_in_pool(self, card: RetentionCard) -> None:
        self._pool = [card if c.id == card.id else c for c in self._pool]

    # --- transitions ---

    def start(self, mission_id: str) -> EngineSnapshot:
        """Begin a session on `mission_id` and present the first card.

        An active session is ended (and persisted as abandoned) first. If
        the mission has no cards the engine stays idle.
        """
        mission = self.missions.resolve(mission_id)
        if self.state.session is not None:
            self.end()

        now = self.clock()
        pool = ensure_cards_for_mission(self.cards, mission, now)
        first = select_next(pool, 0, self.max_new_per_session, now=now, rng=self.rng)
        if first is None:
            xtrace("no_card_available", {"mission": mission.id, "where": "start"})
            self.ctx = None
            self.state = RuntimeState()
            self._pool = []
            return self._publish()

        self._pool = pool
        self.ctx = SessionContext(mission=mission, goal_length=self.effective_goal_length(mission), started_at=now)
        self.state = RuntimeState(
            phase=Phase.PLAYING,
            session=new_session(mission.id, now),
            current_card=first,
            presented_at=now,
            new_cards_seen=1 if first.is_new else 0,
        )
        xtrace("session_started", {"mission": mission.id, "goal": self.ctx.goal_length, "pool": len(pool)})
        xtrace("card_selected", {"card": first.id, "state": first.state.name})
        return self._publish()

    def submit_answer(self, response: Note) -> EngineSnapshot:
        """Grade `response` against the current prompt. No-op outside `playing`."""
        st = self.state
        if st.phase is not Phase.PLAYING or st.session is None or st.current_card is None or self.ctx is None:
            return self.snapshot()

        now = self.clock()
        card = st.current_card
        session = st.session
        prompt = note_from_id(card.note_id)
        correct = self.ctx.mission.answers_match(prompt, response)
        presented_at = st.presented_at or now
        challenge = Challenge(
            prompt_note=prompt,
            response_note=response,
            correct=correct,
            response_time_ms=max(0, int((now - presented_at).total_seconds() * 1000)),
            timestamp=presented_at,
        )
        score = apply_answer(session.score, correct)
        updated = replace(
            session,
            challenges=[*session.challenges, challenge],
            total_correct=session.total_correct + (1 if correct else 0),
            total_incorrect=session.total_incorrect + (0 if correct else 1),
            score=score,
        )

        reviewed = review_card(card, correct, algorithm=self.retention, now=now)
        self.cards.put(reviewed)
        # the stored card is the one a retry must review
        st.current_card = reviewed
        self._replace_in_pool(reviewed)

        goal = self.ctx.goal_length
        complete = is_session_complete(score, goal)
        if complete:
            updated = replace(updated, completed=True, completed_at=now)
            self.sessions.put(updated)

        st.session = updated
        st.progression = calculate_progression(score, goal)
        st.last_answer_correct = correct
        st.phase = Phase.COMPLETE if complete else Phase.FEEDBACK
        xtrace(
            "answer_graded",
            {
                "prompt": note_to_string(prompt),
                "answer": note_to_string(response),
                "correct": correct,
                "score": score,
                "due": reviewed.due.isoformat(),
            },
        )
        if complete:
            xtrace("session_completed", {"session": updated.id, "score": score, "goal": goal})
        return self._publish()

    def advance_to_next(self) -> EngineSnapshot:
        """Leave `feedback` for the next prompt. No-op outside `feedback`."""
        st = self.state
        if st.phase is not Phase.FEEDBACK:
            return self.snapshot()
        now = self.clock()
        nxt = select_next(self._pool, st.new_cards_seen, self.max_new_per_session, now=now, rng=self.rng)
        if nxt is None:
            xtrace("no_card_available", {"where": "advance"})
            return self.snapshot()
        if nxt.is_new:
            st.new_cards_seen += 1
        st.current_card = nxt
        st.presented_at = now
        st.last_answer_correct = None
        st.hint_used = False
        st.phase = Phase.PLAYING
        xtrace("card_selected", {"card": nxt.id, "state": nxt.state.name, "new_seen": st.new_cards_seen})
        return self._publish()

    def use_hint(self) -> Optional[Hint]:
        """Hint for the displayed prompt.

        The first hint on a card costs one point (never below zero); asking
        again for the same card is free. Returns None outside `playing`.
        """
        st = self.state
        if st.phase is not Phase.PLAYING or st.session is None or st.current_card is None or self.ctx is None:
            return None
        prompt = note_from_id(st.current_card.note_id)
        hint = get_hint(prompt)
        if not st.hint_used:
            st.hint_used = True
            score = apply_hint_penalty(st.session.score)
            st.session = replace(st.session, score=score, hints_used=st.session.hints_used + 1)
            st.progression = calculate_progression(score, self.ctx.goal_length)
            xtrace("hint_used", {"card": st.current_card.id, "score": score})
        self._publish()
        return hint

    def end(self) -> EngineSnapshot:
        """Persist the current session (finished or not) and return to idle."""
        st = self.state
        if st.session is not None:
            now = self.clock()
            challenges = list(st.session.challenges)
            if st.phase is Phase.PLAYING and st.current_card is not None:
                challenges.append(
                    Challenge(
                        prompt_note=note_from_id(st.current_card.note_id),
                        response_note=None,
                        correct=None,
                        response_time_ms=None,
                        timestamp=st.presented_at or now,
                    )
                )
            final = replace(st.session, challenges=challenges, completed_at=now)
            self.sessions.put(final)
            xtrace(
                "session_ended",
                {"session": final.id, "completed": final.completed, "score": final.score, "challenges": len(challenges)},
            )
        self.ctx = None
        self.state = RuntimeState()
        self._pool = []
        return self._publish()
