from __future__ import annotations

import logging
import random
import re
import threading
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Dict, List, Optional, Protocol, Tuple

import requests
import yaml

from scrambletower.core.config import MAX_TIER, MIN_TIER, PREFETCH_DEPTH, UNCOMMON_LETTERS, WORD_LENGTH

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"^[a-z]{%d}$" % WORD_LENGTH)

# Runs a zero-argument job off the caller's thread
Executor = Callable[[Callable[[], None]], None]

# (max results, topic hint) per tier: rarer vocabulary as the tier climbs
TIER_QUERIES: Tuple[Tuple[int, str], ...] = (
    (1000, "common"),
    (5000, "general"),
    (10000, "obscure"),
    (100000, "challenging"),
)


class WordLookup(Protocol):
    def lookup_words(self, max_results: int, topic: Optional[str] = None, pattern: str = "?????") -> List[dict]:
        ...


def clamp_tier(tier: int) -> int:
    return max(MIN_TIER, min(int(tier), MAX_TIER))


def is_playable(word: str) -> bool:
    """True for five lowercase letters with at least two distinct letters."""
    return bool(_WORD_RE.match(word)) and len(set(word)) > 1


class FallbackWordRepository:
    """Local per-tier word table loaded from ``data/fallback_words.yaml``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or Path(__file__).resolve().parent.parent / "data" / "fallback_words.yaml"
        self._tiers = self._load_tiers()

    def words(self, tier: int) -> List[str]:
        return list(self._tiers[clamp_tier(tier)])

    def _load_tiers(self) -> Dict[int, List[str]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Fallback word table not found: {self._path}")
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("tiers"), dict):
            raise ValueError(f"{self._path.name}: expected YAML with a 'tiers' mapping")

        tiers: Dict[int, List[str]] = {}
        for key, entry in raw["tiers"].items():
            tier = int(key)
            if not isinstance(entry, dict) or not isinstance(entry.get("words"), list):
                raise ValueError(f"{self._path.name}: tier {tier} is missing a 'words' list")
            words = [str(w).strip() for w in entry["words"]]
            bad = [w for w in words if not is_playable(w)]
            if bad:
                raise ValueError(f"{self._path.name}: tier {tier} has unplayable words: {', '.join(bad)}")
            if not words:
                raise ValueError(f"{self._path.name}: tier {tier} has no words")
            tiers[tier] = words

        missing = [t for t in range(MIN_TIER, MAX_TIER + 1) if t not in tiers]
        if missing:
            raise ValueError(f"{self._path.name}: missing tiers {missing}")
        return tiers


class WordSource:
    """Supplies a five-letter word for a difficulty tier.

    ``fetch_word`` tries the remote lookup and degrades to the local table on
    any failure; it may block for the lookup's timeout. ``next_word`` never
    blocks: it hands out a word prefetched in the background by ``executor``
    when one is ready, a local word otherwise, and queues a refill.
    """

    def __init__(
        self,
        lookup: Optional[WordLookup] = None,
        fallback: Optional[FallbackWordRepository] = None,
        rng: Optional[random.Random] = None,
        executor: Optional[Executor] = None,
        prefetch_depth: int = PREFETCH_DEPTH,
    ) -> None:
        self._lookup = lookup
        self._fallback = fallback or FallbackWordRepository()
        self._rng = rng or random.Random()
        self._executor = executor
        self._prefetch_depth = prefetch_depth
        self._ready: Dict[int, Deque[str]] = {t: deque() for t in range(MIN_TIER, MAX_TIER + 1)}
        self._in_flight: Dict[int, int] = {t: 0 for t in range(MIN_TIER, MAX_TIER + 1)}
        self._lock = threading.Lock()

    def fetch_word(self, tier: int) -> str:
        tier = clamp_tier(tier)
        if self._lookup is not None:
            try:
                candidates = self._remote_candidates(tier)
            except (requests.RequestException, ValueError) as e:
                logger.warning("Word lookup failed for tier %d, using fallback: %s", tier, e)
            else:
                if candidates:
                    return self._rng.choice(candidates)
                logger.warning("No valid remote words for tier %d, using fallback", tier)
        return self.fallback_word(tier)

    def next_word(self, tier: int) -> str:
        tier = clamp_tier(tier)
        with self._lock:
            word = self._ready[tier].popleft() if self._ready[tier] else None
        if word is None:
            word = self.fallback_word(tier)
        self.prefetch(tier)
        return word

    def prefetch(self, tier: int) -> None:
        """Top up the ready queue for ``tier`` in the background."""
        if self._lookup is None or self._executor is None:
            return
        tier = clamp_tier(tier)
        with self._lock:
            missing = self._prefetch_depth - len(self._ready[tier]) - self._in_flight[tier]
            if missing <= 0:
                return
            self._in_flight[tier] += missing
        for _ in range(missing):
            self._executor(lambda: self._prefetch_one(tier))

    def ready_count(self, tier: int) -> int:
        return len(self._ready[clamp_tier(tier)])

    def fallback_word(self, tier: int) -> str:
        return self._rng.choice(self._fallback.words(tier))

    def _prefetch_one(self, tier: int) -> None:
        word = None
        try:
            word = self.fetch_word(tier)
        finally:
            with self._lock:
                if word is not None:
                    self._ready[tier].append(word)
                self._in_flight[tier] -= 1

    def _remote_candidates(self, tier: int) -> List[str]:
        max_results, topic = TIER_QUERIES[tier]
        results = self._lookup.lookup_words(max_results, topic)
        if not results:
            results = self._lookup.lookup_words(max_results)

        valid = [str(item.get("word", "")) for item in results if isinstance(item, dict)]
        valid = [w for w in valid if is_playable(w)]
        if tier >= 2:
            uncommon = [w for w in valid if UNCOMMON_LETTERS.intersection(w)]
            if uncommon:
                return uncommon
        return valid
