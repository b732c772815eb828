from __future__ import annotations

"""Randomness helpers for card tie-breaking and seeding."""

import os
import random
from typing import Optional


def _env_seed() -> Optional[int]:
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        return int(seed)
    except ValueError:
        return None


def seed_if_needed() -> None:
    """Seed the global RNG if SEED env var is set."""
    s = _env_seed()
    if s is not None:
        random.seed(s)


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Dedicated random source for one engine; falls back to SEED, then OS entropy."""
    if seed is None:
        seed = _env_seed()
    return random.Random(seed)
