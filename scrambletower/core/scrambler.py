"""Difficulty-dependent letter scrambling."""

from __future__ import annotations

import random
from typing import List, Optional

from scrambletower.core.config import SCRAMBLE_MAX_ATTEMPTS


def _shuffle_once(letters: List[str], tier: int, rng: random.Random) -> None:
    n = len(letters)
    if tier <= 0:
        # Two adjacent swaps
        for _ in range(2):
            pos = rng.randrange(n - 1)
            letters[pos], letters[pos + 1] = letters[pos + 1], letters[pos]
    elif tier == 1:
        # 3-5 swaps between arbitrary positions (may be no-ops)
        for _ in range(3 + rng.randint(0, 2)):
            a = rng.randrange(n)
            b = rng.randrange(n)
            letters[a], letters[b] = letters[b], letters[a]
    else:
        for i in range(n - 1, 0, -1):
            j = rng.randint(0, i)
            letters[i], letters[j] = letters[j], letters[i]


def scramble(word: str, tier: int = 0, rng: Optional[random.Random] = None) -> str:
    """Return a permutation of ``word`` that differs from it.

    Retries up to SCRAMBLE_MAX_ATTEMPTS times, then falls back to the first
    left rotation that differs. Raises ValueError when no differing
    permutation exists (fewer than two distinct letters).
    """
    if len(set(word)) < 2:
        raise ValueError(f"Cannot scramble {word!r}: needs at least two distinct letters")
    rng = rng or random.Random()

    for _ in range(SCRAMBLE_MAX_ATTEMPTS):
        letters = list(word)
        _shuffle_once(letters, tier, rng)
        arrangement = "".join(letters)
        if arrangement != word:
            return arrangement

    for shift in range(1, len(word)):
        rotated = word[shift:] + word[:shift]
        if rotated != word:
            return rotated
    # Unreachable: two distinct letters always give a differing rotation
    raise ValueError(f"Cannot scramble {word!r}")
