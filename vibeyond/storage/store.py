from __future__ import annotations

"""Card and session stores.

Two flavours share one interface:

- Memory stores: dictionaries, for tests and embedding the engine.
- Parquet stores: pandas + pyarrow files under a data directory. Rows are
  validated through the Pydantic models in `schema` before they are written.

Unit of data: one row per card (keyed by card id), one row per session
(keyed by session id) and one row per challenge (session id + position).
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..policy.cards import CardState, RetentionCard
from ..results.schema import Challenge, Session
from ..theory.notes import note_from_id, note_to_id
from .schema import (
    CARD_DTYPES,
    CHALLENGE_DTYPES,
    DATETIME_COLUMNS,
    SESSION_DTYPES,
    CardRow,
    ChallengeRow,
    SessionRow,
)

CARDS_FILE = "cards.parquet"
SESSIONS_FILE = "sessions.parquet"
CHALLENGES_FILE = "challenges.parquet"


# --- In-memory stores ---

class MemoryCardStore:
    def __init__(self, cards: Iterable[RetentionCard] = ()) -> None:
        self._cards: Dict[str, RetentionCard] = {c.id: c for c in cards}

    def get_all(self, mission_id: Optional[str] = None) -> List[RetentionCard]:
        return [c for c in self._cards.values() if mission_id is None or c.mission_id == mission_id]

    def get(self, card_id: str) -> Optional[RetentionCard]:
        return self._cards.get(card_id)

    def put(self, card: RetentionCard) -> None:
        self._cards[card.id] = card

    def put_many(self, cards: List[RetentionCard]) -> None:
        for card in cards:
            self._cards[card.id] = card

    def clear(self) -> None:
        self._cards.clear()


class MemorySessionStore:
    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def put(self, session: Session) -> None:
        self._sessions[session.id] = session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def load_all(self) -> List[Session]:
        return sorted(self._sessions.values(), key=lambda s: s.started_at)

    def clear(self) -> None:
        self._sessions.clear()


# --- DataFrame helpers ---

def _empty_df(dtypes: Dict[str, Any]) -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in dtypes.items()})


def _fix_dtypes(df: pd.DataFrame, dtypes: Dict[str, Any]) -> pd.DataFrame:
    df = df.copy()
    for col, dt in dtypes.items():
        if col not in df.columns:
            df[col] = pd.Series(pd.NA, index=df.index, dtype=object)
        if col in DATETIME_COLUMNS:
            df[col] = pd.to_datetime(df[col], utc=True).astype(dt)
        else:
            df[col] = df[col].astype(dt)
    return df[list(dtypes.keys())]


def _read(path: Path, dtypes: Dict[str, Any]) -> pd.DataFrame:
    if not path.exists():
        return _empty_df(dtypes)
    return _fix_dtypes(pd.read_parquet(path, engine="pyarrow"), dtypes)


def _write(df: pd.DataFrame, path: Path) -> None:
    df.to_parquet(path, engine="pyarrow", compression="zstd", index=False)


def _concat(old: pd.DataFrame, new: pd.DataFrame) -> pd.DataFrame:
    if old.empty:
        return new.reset_index(drop=True)
    return pd.concat([old, new], ignore_index=True)


def _py(value: Any) -> Any:
    """Plain Python value from a DataFrame cell (NA/NaT -> None)."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _opt_int(value: Any) -> Optional[int]:
    v = _py(value)
    return None if v is None else int(v)


def _opt_float(value: Any) -> Optional[float]:
    v = _py(value)
    return None if v is None else float(v)


def init_store(data_dir: Path) -> None:
    """Ensure the data directory and empty Parquet files with the right schema exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    for name, dtypes in ((CARDS_FILE, CARD_DTYPES), (SESSIONS_FILE, SESSION_DTYPES), (CHALLENGES_FILE, CHALLENGE_DTYPES)):
        path = data_dir / name
        if not path.exists():
            _write(_empty_df(dtypes), path)


def reset_store(data_dir: Path) -> None:
    """Full data reset: remove every card, session and challenge file."""
    data_dir = Path(data_dir)
    for name in (CARDS_FILE, SESSIONS_FILE, CHALLENGES_FILE):
        (data_dir / name).unlink(missing_ok=True)


# --- Cards ---

def card_to_row(card: RetentionCard) -> CardRow:
    return CardRow(
        id=card.id,
        note_id=card.note_id,
        mission_id=card.mission_id,
        state=int(card.state),
        due=card.due,
        stability=card.stability,
        difficulty=card.difficulty,
        step=card.step,
        reps=card.reps,
        lapses=card.lapses,
        last_review=card.last_review,
    )


def row_to_card(row: Dict[str, Any]) -> RetentionCard:
    return RetentionCard(
        id=str(row["id"]),
        note_id=str(row["note_id"]),
        mission_id=str(row["mission_id"]),
        state=CardState(int(row["state"])),
        due=_py(row["due"]),
        stability=_opt_float(row.get("stability")),
        difficulty=_opt_float(row.get("difficulty")),
        step=_opt_int(row.get("step")),
        reps=int(_py(row.get("reps")) or 0),
        lapses=int(_py(row.get("lapses")) or 0),
        last_review=_py(row.get("last_review")),
    )


def validate_cards(cards: List[RetentionCard]) -> pd.DataFrame:
    """Validate cards through CardRow and return a DataFrame with store dtypes."""
    rows = [card_to_row(c).model_dump() for c in cards]
    if not rows:
        return _empty_df(CARD_DTYPES)
    return _fix_dtypes(pd.DataFrame(rows), CARD_DTYPES)


def upsert_cards(df_new: pd.DataFrame, data_dir: Path) -> None:
    """Insert or replace card rows keyed by card id."""
    path = Path(data_dir) / CARDS_FILE
    df_old = _read(path, CARD_DTYPES)
    if not df_old.empty:
        df_old = df_old[~df_old["id"].isin(df_new["id"])]
    _write(_concat(df_old, _fix_dtypes(df_new, CARD_DTYPES)), path)


def load_cards(data_dir: Path) -> pd.DataFrame:
    return _read(Path(data_dir) / CARDS_FILE, CARD_DTYPES)


class ParquetCardStore:
    """Card store on `<data_dir>/cards.parquet`. Due timestamps keep microsecond precision."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        init_store(self.data_dir)

    def get_all(self, mission_id: Optional[str] = None) -> List[RetentionCard]:
        df = load_cards(self.data_dir)
        if mission_id is not None:
            df = df[df["mission_id"] == mission_id]
        return [row_to_card(r) for r in df.to_dict("records")]

    def get(self, card_id: str) -> Optional[RetentionCard]:
        df = load_cards(self.data_dir)
        hit = df[df["id"] == card_id]
        if hit.empty:
            return None
        return row_to_card(hit.to_dict("records")[0])

    def put(self, card: RetentionCard) -> None:
        upsert_cards(validate_cards([card]), self.data_dir)

    def put_many(self, cards: List[RetentionCard]) -> None:
        if cards:
            upsert_cards(validate_cards(cards), self.data_dir)

    def clear(self) -> None:
        _write(_empty_df(CARD_DTYPES), self.data_dir / CARDS_FILE)


# --- Sessions ---

def session_to_rows(session: Session) -> tuple[SessionRow, List[ChallengeRow]]:
    srow = SessionRow(
        id=session.id,
        mission_id=session.mission_id,
        started_at=session.started_at,
        completed_at=session.completed_at,
        total_correct=session.total_correct,
        total_incorrect=session.total_incorrect,
        score=session.score,
        completed=session.completed,
        hints_used=session.hints_used,
    )
    crows = [
        ChallengeRow(
            session_id=session.id,
            position=i,
            prompt_note_id=note_to_id(ch.prompt_note),
            response_note_id=note_to_id(ch.response_note) if ch.response_note is not None else None,
            correct=ch.correct,
            response_time_ms=ch.response_time_ms,
            timestamp=ch.timestamp,
        )
        for i, ch in enumerate(session.challenges)
    ]
    return srow, crows


def _row_to_challenge(row: Dict[str, Any]) -> Challenge:
    response_id = _py(row.get("response_note_id"))
    correct = _py(row.get("correct"))
    return Challenge(
        prompt_note=note_from_id(str(row["prompt_note_id"])),
        response_note=note_from_id(str(response_id)) if response_id is not None else None,
        correct=None if correct is None else bool(correct),
        response_time_ms=_opt_int(row.get("response_time_ms")),
        timestamp=_py(row["timestamp"]),
    )


def upsert_session(session: Session, data_dir: Path) -> None:
    """Insert or overwrite one session and replace its challenge rows."""
    data_dir = Path(data_dir)
    srow, crows = session_to_rows(session)

    s_path = data_dir / SESSIONS_FILE
    df_s = _read(s_path, SESSION_DTYPES)
    df_s = df_s[df_s["id"] != session.id]
    df_s_new = _fix_dtypes(pd.DataFrame([srow.model_dump()]), SESSION_DTYPES)
    _write(_concat(df_s, df_s_new), s_path)

    c_path = data_dir / CHALLENGES_FILE
    df_c = _read(c_path, CHALLENGE_DTYPES)
    df_c = df_c[df_c["session_id"] != session.id]
    if crows:
        df_c_new = _fix_dtypes(pd.DataFrame([r.model_dump() for r in crows]), CHALLENGE_DTYPES)
        df_c = _concat(df_c, df_c_new)
    _write(df_c, c_path)


def load_sessions(data_dir: Path) -> pd.DataFrame:
    return _read(Path(data_dir) / SESSIONS_FILE, SESSION_DTYPES)


def load_challenges(data_dir: Path) -> pd.DataFrame:
    return _read(Path(data_dir) / CHALLENGES_FILE, CHALLENGE_DTYPES)


def _build_session(row: Dict[str, Any], challenges: pd.DataFrame) -> Session:
    mine = challenges[challenges["session_id"] == row["id"]].sort_values("position")
    return Session(
        id=str(row["id"]),
        mission_id=str(row["mission_id"]),
        started_at=_py(row["started_at"]),
        completed_at=_py(row.get("completed_at")),
        challenges=[_row_to_challenge(r) for r in mine.to_dict("records")],
        total_correct=int(_py(row.get("total_correct")) or 0),
        total_incorrect=int(_py(row.get("total_incorrect")) or 0),
        score=int(_py(row.get("score")) or 0),
        completed=bool(_py(row.get("completed")) or False),
        hints_used=int(_py(row.get("hints_used")) or 0),
    )


class ParquetSessionStore:
    """Session store on `<data_dir>/sessions.parquet` + `challenges.parquet`."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        init_store(self.data_dir)

    def put(self, session: Session) -> None:
        upsert_session(session, self.data_dir)

    def get(self, session_id: str) -> Optional[Session]:
        df = load_sessions(self.data_dir)
        hit = df[df["id"] == session_id]
        if hit.empty:
            return None
        return _build_session(hit.to_dict("records")[0], load_challenges(self.data_dir))

    def load_all(self) -> List[Session]:
        df = load_sessions(self.data_dir).sort_values("started_at")
        challenges = load_challenges(self.data_dir)
        return [_build_session(r, challenges) for r in df.to_dict("records")]

    def clear(self) -> None:
        _write(_empty_df(SESSION_DTYPES), self.data_dir / SESSIONS_FILE)
        _write(_empty_df(CHALLENGE_DTYPES), self.data_dir / CHALLENGES_FILE)


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")
