from __future__ import annotations

"""Session and challenge records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol
from uuid import uuid4

from ..theory.notes import Note


@dataclass(frozen=True)
class Challenge:
    """One prompt: what was shown, what was answered (None if abandoned)."""

    prompt_note: Note
    response_note: Optional[Note]
    correct: Optional[bool]
    response_time_ms: Optional[int]
    timestamp: datetime  # when the prompt was presented


@dataclass
class Session:
    id: str
    mission_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    challenges: List[Challenge] = field(default_factory=list)
    total_correct: int = 0
    total_incorrect: int = 0
    score: int = 0
    completed: bool = False
    hints_used: int = 0


def new_session(mission_id: str, started_at: datetime) -> Session:
    return Session(id=str(uuid4()), mission_id=mission_id, started_at=started_at)


class SessionStore(Protocol):
    def put(self, session: Session) -> None: ...
