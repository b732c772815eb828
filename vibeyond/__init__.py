"""Vibeyond package initialization.

Practice-session engine for a note-reading trainer: note model, spaced
repetition scheduling and the session state machine.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
