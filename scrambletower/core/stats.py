from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from scrambletower.core.config import (
    DEFINITION_NOT_AVAILABLE,
    SESSION_HISTORY_LIMIT,
    TOWER_CHAMPION_SCORE,
)
from scrambletower.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

STATS_KEY = "stats"
TOWER_CHAMPION = "Tower Champion"


@dataclass(frozen=True)
class Milestone:
    name: str
    description: str
    icon: str
    threshold: int
    reward: str


PROGRESSION_MILESTONES: Tuple[Milestone, ...] = (
    Milestone("Word Novice", "Unscramble 10 words", "📖", 10, "Bronze badge"),
    Milestone("Vocabulary Builder", "Unscramble 50 words", "📚", 50, "New word set"),
    Milestone("Lexicon Master", "Unscramble 200 words", "🏆", 200, "Gold badge"),
)


def _default_high_scores() -> Dict[str, int]:
    return {"tower": 0, "rush": 0, "zen": 0}


@dataclass
class PersistedStats:
    """Cross-session progress stored under the ``stats`` key."""

    total_words: int = 0
    high_scores: Dict[str, int] = field(default_factory=_default_high_scores)
    new_words: List[str] = field(default_factory=list)
    word_dictionary: Dict[str, str] = field(default_factory=dict)
    achievements: List[str] = field(default_factory=list)
    session_history: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalWords": self.total_words,
            "highScores": dict(self.high_scores),
            "newWords": list(self.new_words),
            "wordDictionary": dict(self.word_dictionary),
            "achievements": list(self.achievements),
            "sessionHistory": [dict(s) for s in self.session_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PersistedStats":
        """Build stats from stored JSON, substituting defaults for bad fields."""
        stats = cls()
        try:
            stats.total_words = max(0, int(data.get("totalWords", 0)))
        except (TypeError, ValueError):
            stats.total_words = 0

        scores = data.get("highScores")
        if isinstance(scores, dict):
            for mode, value in scores.items():
                try:
                    stats.high_scores[str(mode).lower()] = max(0, int(value))
                except (TypeError, ValueError):
                    continue

        words = data.get("newWords")
        if isinstance(words, list):
            stats.new_words = list(dict.fromkeys(str(w) for w in words))

        dictionary = data.get("wordDictionary")
        if isinstance(dictionary, dict):
            stats.word_dictionary = {str(k): str(v) for k, v in dictionary.items()}

        achievements = data.get("achievements")
        if isinstance(achievements, list):
            stats.achievements = list(dict.fromkeys(str(a) for a in achievements))

        history = data.get("sessionHistory")
        if isinstance(history, list):
            stats.session_history = [s for s in history if isinstance(s, dict)][:SESSION_HISTORY_LIMIT]
        return stats

    def high_score(self, mode: str) -> int:
        return self.high_scores.get(mode.lower(), 0)


class DefinitionLookup(Protocol):
    def lookup_definition(self, word: str) -> str:
        ...


def check_achievements(stats: PersistedStats) -> List[str]:
    """Names that ``stats`` qualifies for but has not unlocked yet."""
    unlocked = []
    for milestone in PROGRESSION_MILESTONES:
        if stats.total_words >= milestone.threshold and milestone.name not in stats.achievements:
            unlocked.append(milestone.name)
    if stats.high_score("tower") >= TOWER_CHAMPION_SCORE and TOWER_CHAMPION not in stats.achievements:
        unlocked.append(TOWER_CHAMPION)
    return unlocked


class StatsEngine:
    """Single writer for persisted statistics.

    Every load-modify-store cycle runs under one lock so that two round-end
    updates can never interleave and lose data. Clear the stats only through
    :meth:`reset`.
    """

    def __init__(
        self,
        store: KeyValueStore,
        definitions: Optional[DefinitionLookup] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._definitions = definitions
        self._clock = clock
        self._lock = threading.RLock()

    def init_stats(self) -> None:
        """Write default stats if none exist yet (called at app start)."""
        with self._lock:
            if self._store.load(STATS_KEY) is None:
                self._store.save(STATS_KEY, PersistedStats().to_dict())

    def load(self) -> PersistedStats:
        payload = self._store.load(STATS_KEY)
        if not isinstance(payload, dict):
            return PersistedStats()
        return PersistedStats.from_dict(payload)

    def update_stats(self, mode: str, score: int, words_found: List[str]) -> List[str]:
        """Fold a finished round into the stats; return achievements unlocked now."""
        with self._lock:
            payload = self._store.load(STATS_KEY)
            if not isinstance(payload, dict):
                logger.info("No stats to update; skipping round summary for %s", mode)
                return []
            stats = PersistedStats.from_dict(payload)
            words = [w.lower() for w in words_found]

            for word in words:
                if word not in stats.word_dictionary:
                    stats.word_dictionary[word] = self._define(word)

            stats.total_words += len(words)

            key = mode.lower()
            if score > stats.high_scores.get(key, 0):
                stats.high_scores[key] = score

            stats.new_words = list(dict.fromkeys(stats.new_words + words))

            stats.session_history.insert(0, {
                "mode": mode,
                "score": score,
                "timestamp": int(self._clock() * 1000),
                "wordsFound": words,
            })
            del stats.session_history[SESSION_HISTORY_LIMIT:]

            unlocked = check_achievements(stats)
            stats.achievements.extend(unlocked)

            if not self._store.save(STATS_KEY, stats.to_dict()):
                return []
            if unlocked:
                logger.info("Achievements unlocked: %s", ", ".join(unlocked))
            return unlocked

    def reset(self) -> PersistedStats:
        """Replace all persisted stats with defaults. Cannot be undone."""
        with self._lock:
            stats = PersistedStats()
            self._store.save(STATS_KEY, stats.to_dict())
            logger.info("Statistics reset")
            return stats

    def milestone_progress(self) -> List[Tuple[Milestone, int, bool]]:
        """``(milestone, progress capped at threshold, unlocked)`` per milestone."""
        stats = self.load()
        return [
            (m, min(stats.total_words, m.threshold), m.name in stats.achievements)
            for m in PROGRESSION_MILESTONES
        ]

    def _define(self, word: str) -> str:
        if self._definitions is None:
            return DEFINITION_NOT_AVAILABLE
        try:
            return self._definitions.lookup_definition(word)
        except Exception as e:
            logger.warning("Definition lookup raised for %r: %s", word, e)
            return DEFINITION_NOT_AVAILABLE
