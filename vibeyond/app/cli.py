from __future__ import annotations

"""CLI for Vibeyond using SessionEngine and the mission registry."""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config.config import keyboard_octaves, load_config, validate_config
from ..stats.stats import SORT_KEYS, challenge_frame, format_card_table, format_summary, state_counts, success_rates
from ..storage.store import ParquetCardStore, ParquetSessionStore, reset_store
from ..theory.notes import Note, note_to_string, parse_note
from ..util.randomness import make_rng, seed_if_needed

from .missions import MissionDefinition, MissionKind, animal_for_octave, list_missions, resolve_mission
from .session_engine import Phase, SessionEngine


def _data_dir(cfg: Dict[str, Any]) -> Path:
    return Path(cfg.get("storage", {}).get("data_dir", "./data"))


def _parse_response(text: str, mission: MissionDefinition, octaves: list[int]) -> Optional[Note]:
    """Typed answer -> Note. The animal mission also takes an octave number or animal name."""
    if mission.kind is MissionKind.ANIMAL_OCTAVES:
        by_name = {animal_for_octave(o).lower(): o for o in octaves}
        octave = int(text) if text.isdigit() else by_name.get(text.lower())
        if octave is not None:
            if octave not in octaves:
                return None
            return Note(pitch="C", accidental="natural", octave=octave)
    try:
        return parse_note(text)
    except ValueError:
        return None


def _prompt_text(engine: SessionEngine, mission: MissionDefinition) -> str:
    note = engine.current_note
    if note is None:
        return ""
    if mission.kind is MissionKind.ANIMAL_OCTAVES:
        return f"{note_to_string(note)}: which animal?"
    return f"[{note.clef}] {note_to_string(note)}"


def _run(args: argparse.Namespace) -> int:
    seed_if_needed()
    if args.explain:
        from .explain import enable as explain_enable
        explain_enable(True)
    cfg = validate_config(load_config(args.config))
    if args.length is not None:
        cfg["session"]["length"] = max(0, args.length)

    try:
        mission = resolve_mission(args.mission)
    except KeyError as e:
        print(f"ERROR: {e.args[0]}", file=sys.stderr)
        return 2

    data_dir = _data_dir(cfg)
    engine = SessionEngine.from_config(
        cfg,
        ParquetCardStore(data_dir),
        ParquetSessionStore(data_dir),
        rng=make_rng(),
    )
    octaves = keyboard_octaves(cfg)

    snap = engine.start(mission.id)
    if snap.phase is Phase.IDLE:
        print("No cards available for this mission.")
        return 1
    print(f"{mission.name}: {mission.description}. Goal: {snap.goal_length} points.")
    if mission.kind is MissionKind.ANIMAL_OCTAVES:
        choices = ", ".join(f"{o}={animal_for_octave(o)}" for o in octaves)
        print(f"Answer with an animal or its octave number: {choices}.")
    print("Type a note like C#4, 'h' for a hint, 'q' to quit.")

    try:
        while engine.phase is Phase.PLAYING:
            raw = input(f"{_prompt_text(engine, mission)} > ").strip()
            if raw.lower() == "q":
                break
            if raw.lower() == "h":
                hint = engine.use_hint()
                if hint is not None:
                    extra = f" ({hint.accidental_note})" if hint.accidental_note else ""
                    print(f"Hint: {hint.label}{extra}. {hint.mnemonic}")
                continue
            response = _parse_response(raw, mission, octaves)
            if response is None:
                print("Could not read that answer, try again.")
                continue
            snap = engine.submit_answer(response)
            verdict = "Correct" if snap.last_answer_correct else "Wrong"
            print(f"{verdict}. Score {snap.score}/{snap.goal_length} ({snap.progression * 100:.0f}%)")
            if snap.phase is Phase.FEEDBACK:
                snap = engine.advance_to_next()
                if snap.phase is Phase.FEEDBACK:
                    print("No more cards to show.")
                    break
    except (EOFError, KeyboardInterrupt):
        print()

    session = engine.session
    engine.end()
    if session is not None:
        print(format_summary(session))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="vibeyond")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list-missions")

    rp = sub.add_parser("run")
    rp.add_argument("--mission", required=True)
    rp.add_argument("--config", default=None)
    rp.add_argument("--length", type=int, default=None, help="Session goal in points (0 = mission default)")
    rp.add_argument("--explain", action="store_true")

    cp = sub.add_parser("cards")
    cp.add_argument("--mission", required=True)
    cp.add_argument("--sort", choices=SORT_KEYS, default="note")
    cp.add_argument("--config", default=None)

    hp = sub.add_parser("history")
    hp.add_argument("--config", default=None)

    xp = sub.add_parser("reset")
    xp.add_argument("--yes", action="store_true", help="Confirm deleting all cards and sessions")
    xp.add_argument("--config", default=None)

    args = p.parse_args(argv)

    if args.cmd == "list-missions":
        for m in list_missions():
            print(f"{m.id}: {m.name} - {m.description} | goal: {m.default_session_length}")
        return 0

    if args.cmd == "run":
        return _run(args)

    cfg = validate_config(load_config(args.config))
    data_dir = _data_dir(cfg)

    if args.cmd == "cards":
        cards = ParquetCardStore(data_dir).get_all(args.mission)
        if not cards:
            print(f"No cards yet for mission '{args.mission}'.")
            return 0
        frame = challenge_frame(ParquetSessionStore(data_dir).load_all())
        rates = success_rates(frame, args.mission)
        print(format_card_table(cards, args.sort, rates, datetime.now(timezone.utc)))
        counts = state_counts(cards)
        print(" | ".join(f"{k}: {v}" for k, v in counts.items()))
        return 0

    if args.cmd == "history":
        sessions = ParquetSessionStore(data_dir).load_all()
        if not sessions:
            print("No sessions recorded.")
            return 0
        for s in sessions:
            status = "completed" if s.completed else "abandoned"
            print(
                f"{s.started_at:%Y-%m-%d %H:%M} {s.mission_id:<22} score {s.score:>3} "
                f"({s.total_correct}/{s.total_correct + s.total_incorrect}) {status}"
            )
        return 0

    if args.cmd == "reset":
        if not args.yes:
            print("Refusing to reset without --yes.", file=sys.stderr)
            return 1
        reset_store(data_dir)
        print(f"Removed all practice data under {data_dir}.")
        return 0

    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
