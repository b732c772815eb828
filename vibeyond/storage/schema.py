from __future__ import annotations

"""Schema constants and Pydantic models for the Parquet-backed stores."""

from datetime import datetime, timezone
from typing import Optional

import pandas as pd
from pydantic import BaseModel, Field, field_validator, model_validator

from ..theory.notes import note_from_id

# --- Constants ---

CARD_STATES = {0, 1, 2, 3}
UTC_TS = pd.DatetimeTZDtype(tz="UTC")

CARD_DTYPES = {
    "id": "string",
    "note_id": "string",
    "mission_id": "string",
    "state": "UInt8",
    "due": UTC_TS,
    "stability": "Float64",
    "difficulty": "Float64",
    "step": "Int16",
    "reps": "UInt32",
    "lapses": "UInt32",
    "last_review": UTC_TS,
}

SESSION_DTYPES = {
    "id": "string",
    "mission_id": "string",
    "started_at": UTC_TS,
    "completed_at": UTC_TS,
    "total_correct": "UInt32",
    "total_incorrect": "UInt32",
    "score": "UInt32",
    "completed": "boolean",
    "hints_used": "UInt32",
}

CHALLENGE_DTYPES = {
    "session_id": "string",
    "position": "UInt32",
    "prompt_note_id": "string",
    "response_note_id": "string",
    "correct": "boolean",
    "response_time_ms": "UInt32",
    "timestamp": UTC_TS,
}

DATETIME_COLUMNS = {"due", "last_review", "started_at", "completed_at", "timestamp"}


def _to_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


def _check_note_id(v: Optional[str]) -> Optional[str]:
    if v is not None:
        note_from_id(v)  # raises ValueError on malformed ids
    return v


# --- Pydantic models ---

class CardRow(BaseModel):
    id: str
    note_id: str
    mission_id: str
    state: int = Field(ge=0, le=3)
    due: datetime
    stability: Optional[float] = Field(default=None, ge=0)
    difficulty: Optional[float] = None
    step: Optional[int] = Field(default=None, ge=0)
    reps: int = Field(default=0, ge=0)
    lapses: int = Field(default=0, ge=0)
    last_review: Optional[datetime] = None

    @field_validator("due", "last_review")
    @classmethod
    def _ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_utc(v)

    @field_validator("note_id")
    @classmethod
    def _valid_note_id(cls, v: str) -> str:
        return _check_note_id(v)  # type: ignore[return-value]

    @model_validator(mode="after")
    def _id_matches_key(self) -> "CardRow":
        if self.id != f"{self.mission_id}::{self.note_id}":
            raise ValueError("card id must be '<mission_id>::<note_id>'")
        return self


class SessionRow(BaseModel):
    id: str
    mission_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_correct: int = Field(default=0, ge=0)
    total_incorrect: int = Field(default=0, ge=0)
    score: int = Field(default=0, ge=0)
    completed: bool = False
    hints_used: int = Field(default=0, ge=0)

    @field_validator("started_at", "completed_at")
    @classmethod
    def _ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_utc(v)


class ChallengeRow(BaseModel):
    session_id: str
    position: int = Field(ge=0)
    prompt_note_id: str
    response_note_id: Optional[str] = None
    correct: Optional[bool] = None
    response_time_ms: Optional[int] = Field(default=None, ge=0)
    timestamp: datetime

    @field_validator("prompt_note_id", "response_note_id")
    @classmethod
    def _valid_note_id(cls, v: Optional[str]) -> Optional[str]:
        return _check_note_id(v)

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return _to_utc(v)  # type: ignore[return-value]
