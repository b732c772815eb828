from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Enable with the CLI `--explain` flag; the engine then prints one terse JSON
line per milestone (session started, card selected, answer graded, ...).
"""

import json
from typing import Any, Dict

_ENABLED = False


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def enabled() -> bool:
    return _ENABLED


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    data = payload or {}
    # default=str keeps datetimes and enums printable
    print(f"[EXPLAIN] {event} :: {json.dumps(data, separators=(',', ':'), default=str)}")
