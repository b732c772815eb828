from .schema import Challenge, Session, SessionStore, new_session
from .progression import apply_answer, apply_hint_penalty, calculate_progression, is_session_complete

__all__ = [
    "Challenge",
    "Session",
    "SessionStore",
    "new_session",
    "apply_answer",
    "apply_hint_penalty",
    "calculate_progression",
    "is_session_complete",
]
