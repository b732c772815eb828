from __future__ import annotations

"""Configuration loading and validation for Vibeyond.

This module loads YAML configuration, applies defaults, and validates that
numbers are in range and note names parse before the engine sees them.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import sys

import yaml

from ..theory.notes import parse_note


DEFAULT_MIN_NOTE = "C2"
DEFAULT_MAX_NOTE = "B5"


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        cfg = _load_yaml(Path(__file__).with_name("defaults.yml"))
    return cfg


def _warn(msg: str) -> None:
    print(f"WARNING: {msg}", file=sys.stderr)


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Invalid values are reported on stderr and replaced by their default.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    cfg.setdefault("session", {})
    cfg.setdefault("retention", {})
    cfg.setdefault("keyboard", {})
    cfg.setdefault("storage", {})

    session = cfg["session"]
    retention = cfg["retention"]
    keyboard = cfg["keyboard"]
    storage = cfg["storage"]

    session.setdefault("length", 0)
    session.setdefault("max_new_per_session", 2)

    retention.setdefault("desired_retention", 0.95)
    retention.setdefault("maximum_interval_days", 30)
    retention.setdefault("enable_fuzzing", True)

    keyboard.setdefault("min_note", DEFAULT_MIN_NOTE)
    keyboard.setdefault("max_note", DEFAULT_MAX_NOTE)

    storage.setdefault("data_dir", "./data")

    length = session.get("length")
    if not isinstance(length, int) or isinstance(length, bool) or length < 0:
        _warn(f"Invalid session.length '{length}', using mission default (0).")
        session["length"] = 0

    max_new = session.get("max_new_per_session")
    if not isinstance(max_new, int) or isinstance(max_new, bool) or max_new < 0:
        _warn(f"Invalid session.max_new_per_session '{max_new}', using 2.")
        session["max_new_per_session"] = 2

    desired = retention.get("desired_retention")
    if not isinstance(desired, (int, float)) or isinstance(desired, bool) or not 0 < desired < 1:
        _warn(f"Invalid retention.desired_retention '{desired}', using 0.95.")
        retention["desired_retention"] = 0.95

    max_days = retention.get("maximum_interval_days")
    if not isinstance(max_days, int) or isinstance(max_days, bool) or max_days < 1:
        _warn(f"Invalid retention.maximum_interval_days '{max_days}', using 30.")
        retention["maximum_interval_days"] = 30

    retention["enable_fuzzing"] = bool(retention.get("enable_fuzzing"))

    for key, default in (("min_note", DEFAULT_MIN_NOTE), ("max_note", DEFAULT_MAX_NOTE)):
        try:
            parse_note(str(keyboard[key]))
        except ValueError:
            _warn(f"Invalid keyboard.{key} '{keyboard[key]}', using {default}.")
            keyboard[key] = default
    if parse_note(str(keyboard["min_note"])).octave > parse_note(str(keyboard["max_note"])).octave:
        _warn("keyboard.min_note is above keyboard.max_note, using C2..B5.")
        keyboard["min_note"], keyboard["max_note"] = DEFAULT_MIN_NOTE, DEFAULT_MAX_NOTE

    storage["data_dir"] = str(storage.get("data_dir") or "./data")
    return cfg


def keyboard_octaves(cfg: Dict[str, Any]) -> List[int]:
    """Octaves covered by the configured keyboard, lowest first."""
    kb = cfg.get("keyboard", {}) or {}
    lo = parse_note(str(kb.get("min_note", DEFAULT_MIN_NOTE))).octave
    hi = parse_note(str(kb.get("max_note", DEFAULT_MAX_NOTE))).octave
    return list(range(lo, hi + 1))
