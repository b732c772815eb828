from __future__ import annotations

"""Score and progression arithmetic.

The score never drops below zero, so one correct answer after any losing
streak always moves the learner forward. Progression is the score as a
fraction of the goal, clamped to [0, 1].
"""


def apply_answer(score: int, correct: bool) -> int:
    return score + 1 if correct else max(0, score - 1)


def apply_hint_penalty(score: int) -> int:
    return max(0, score - 1)


def calculate_progression(score: int, goal_length: int) -> float:
    if goal_length <= 0:
        return 0.0
    return max(0.0, min(1.0, score / goal_length))


def is_session_complete(score: int, goal_length: int) -> bool:
    """A goal of zero never completes; the session then runs until ended."""
    return goal_length >= 1 and score >= goal_length
