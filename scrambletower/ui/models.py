"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

from scrambletower.core.stats import Milestone, PersistedStats

RECENT_SESSIONS_SHOWN = 3


@dataclass
class MilestoneState:
    """UI state for one milestone card: progress toward it and unlock status."""

    milestone: Milestone
    progress: int
    unlocked: bool

    @property
    def label(self) -> str:
        if self.unlocked:
            return f"{self.milestone.icon} {self.milestone.name} – Reward: {self.milestone.reward}"
        return f"{self.milestone.icon} {self.milestone.name} {self.progress}/{self.milestone.threshold}"


def dictionary_entries(stats: PersistedStats) -> List[Tuple[str, str]]:
    """``(WORD, definition)`` pairs in discovery order for the dictionary card."""
    return [
        (word.upper(), meaning or "No definition available")
        for word, meaning in stats.word_dictionary.items()
    ]


def session_label(session: dict) -> str:
    """One line per session: mode, score and local date/time."""
    mode = session.get("mode", "?")
    score = session.get("score", 0)
    try:
        when = datetime.fromtimestamp(int(session["timestamp"]) / 1000).strftime("%Y-%m-%d %H:%M:%S")
    except (KeyError, TypeError, ValueError, OverflowError, OSError):
        when = "unknown time"
    return f"{mode} – Score: {score} – {when}"


def recent_sessions(stats: PersistedStats, limit: int = RECENT_SESSIONS_SHOWN) -> List[str]:
    return [session_label(s) for s in stats.session_history[:limit]]
