from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from scrambletower.core.config import (
    GAME_OVER_DELAY_MS,
    GAME_OVER_VIBRATION_MS,
    MAX_TIER,
    RUSH_INITIAL_ROWS,
    RUSH_SPAWN_INTERVAL,
    RUSH_TIME_LIMIT,
    SOLVE_VIBRATION_MS,
    TOWER_INITIAL_ROWS,
    TOWER_SPAWN_INTERVAL,
    TOWER_WORDS_PER_TIER,
    ZEN_INITIAL_ROWS,
)
from scrambletower.core.rows import Row, RowEngine
from scrambletower.core.scrambler import scramble
from scrambletower.core.settings import Settings
from scrambletower.core.stats import StatsEngine
from scrambletower.core.words import Executor, WordSource

logger = logging.getLogger(__name__)


class GameMode(Enum):
    RUSH = "Rush"
    ZEN = "Zen"
    TOWER = "Tower"


class RoundStatus(Enum):
    ACTIVE = "active"
    OVER = "over"


@dataclass(frozen=True)
class ModeConfig:
    """Rules that distinguish one game mode from another."""

    initial_rows: int
    time_limit: Optional[int] = None
    spawn_interval: Optional[int] = None
    overflow_ends_round: bool = False
    solve_spawns_row: bool = False
    progressive: bool = False
    words_per_tier: int = TOWER_WORDS_PER_TIER


MODE_CONFIGS: Dict[GameMode, ModeConfig] = {
    GameMode.RUSH: ModeConfig(
        initial_rows=RUSH_INITIAL_ROWS,
        time_limit=RUSH_TIME_LIMIT,
        spawn_interval=RUSH_SPAWN_INTERVAL,
        overflow_ends_round=True,
    ),
    GameMode.ZEN: ModeConfig(
        initial_rows=ZEN_INITIAL_ROWS,
        solve_spawns_row=True,
    ),
    GameMode.TOWER: ModeConfig(
        initial_rows=TOWER_INITIAL_ROWS,
        spawn_interval=TOWER_SPAWN_INTERVAL,
        overflow_ends_round=True,
        progressive=True,
    ),
}


@dataclass(frozen=True)
class RoundSummary:
    mode: GameMode
    score: int
    words_found: List[str]
    unlocked_achievements: List[str]


class RoundController:
    """Runs one round of a game mode on top of a :class:`RowEngine`.

    Time advances only through :meth:`tick`, one call per time unit, so the
    owner decides the clock (a QTimer in the app, direct calls in tests).
    Once the round is over nothing mutates rows or score again.

    Rows are spawned from words the :class:`WordSource` already has on hand,
    so no event waits on the network. With an ``executor`` the stats update
    at round end (definition lookups included) runs off the caller's thread
    and round-over listeners fire when it completes.
    """

    def __init__(
        self,
        mode: GameMode,
        word_source: WordSource,
        stats: Optional[StatsEngine] = None,
        settings: Optional[Settings] = None,
        config: Optional[ModeConfig] = None,
        vibrate: Optional[Callable[[int], None]] = None,
        rng: Optional[random.Random] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.mode = mode
        self.config = config or MODE_CONFIGS[mode]
        self.settings = settings or Settings()
        self._words = word_source
        self._stats = stats
        self._vibrate = vibrate
        self._rng = rng or random.Random()
        self._executor = executor

        self._engine = RowEngine()
        self._status = RoundStatus.ACTIVE
        self._started = False
        self._paused = False
        self._elapsed = 0
        self._remaining = self.config.time_limit
        self._score = 0
        self._words_found: List[str] = []
        self._unlocked: List[str] = []
        self._row_listeners: List[Callable[[], None]] = []
        self._over_listeners: List[Callable[[RoundSummary], None]] = []

        self._engine.add_solved_listener(self._on_row_solved)

    # --- state -------------------------------------------------------------

    @property
    def status(self) -> RoundStatus:
        return self._status

    @property
    def is_over(self) -> bool:
        return self._status is RoundStatus.OVER

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def score(self) -> int:
        return self._score

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def remaining_time(self) -> Optional[int]:
        return self._remaining

    @property
    def active_rows(self) -> List[Row]:
        return self._engine.rows

    @property
    def selection(self):
        return self._engine.selection

    @property
    def words_found(self) -> List[str]:
        return list(self._words_found)

    @property
    def unlocked_achievements(self) -> List[str]:
        return list(self._unlocked)

    @property
    def tier(self) -> int:
        if not self.config.progressive:
            return 0
        return min(self._score // max(1, self.config.words_per_tier), MAX_TIER)

    @property
    def game_over_delay_ms(self) -> int:
        """How long the UI should let the board settle before the summary."""
        return GAME_OVER_DELAY_MS if self.settings.animations_enabled else 0

    def add_rows_changed_listener(self, callback: Callable[[], None]) -> None:
        self._row_listeners.append(callback)

    def add_round_over_listener(self, callback: Callable[[RoundSummary], None]) -> None:
        self._over_listeners.append(callback)

    # --- events ------------------------------------------------------------

    def start(self) -> None:
        if self._started or self.is_over:
            return
        self._started = True
        logger.info("Starting %s round", self.mode.value)
        for _ in range(self.config.initial_rows):
            self._spawn()
        self._notify_rows()

    def tick(self) -> None:
        """Advance the round by one time unit."""
        if self.is_over or self._paused or not self._started:
            return
        self._elapsed += 1
        if self._remaining is not None:
            self._remaining -= 1
            if self._remaining <= 0:
                self._remaining = 0
                self._end("time up")
                return
        interval = self.config.spawn_interval
        if interval and self._elapsed % interval == 0:
            self._spawn()
            self._notify_rows()

    def select_or_swap(self, row_index: int, position: int) -> Optional[str]:
        if self.is_over or self._paused or not self._started:
            return None
        solved = self._engine.select_or_swap(row_index, position)
        self._notify_rows()
        return solved

    def report_overflow(self) -> None:
        """A row reached the top boundary unsolved."""
        if self.is_over or not self.config.overflow_ends_round:
            return
        self._end("overflow")

    def pause(self) -> None:
        if not self.is_over:
            self._paused = True

    def resume(self) -> None:
        if not self.is_over:
            self._paused = False

    def finish(self) -> None:
        """User-triggered end of the round."""
        if not self.is_over:
            self._end("finished by player")

    # --- internals ---------------------------------------------------------

    def _spawn(self) -> Row:
        tier = self.tier
        word = self._words.next_word(tier)
        return self._engine.spawn_row(word, scramble(word, tier, self._rng))

    def _on_row_solved(self, row: Row) -> None:
        self._score += 1
        self._words_found.append(row.target_word.lower())
        self._feedback(SOLVE_VIBRATION_MS)
        if self.config.solve_spawns_row:
            self._spawn()

    def _end(self, reason: str) -> None:
        self._status = RoundStatus.OVER
        self._paused = False
        self._engine.remove_all()
        logger.info("%s round over (%s), score %d", self.mode.value, reason, self._score)
        self._feedback(GAME_OVER_VIBRATION_MS)
        self._notify_rows()

        if self._stats is None:
            self._publish_summary()
        elif self._executor is not None:
            self._executor(self._record_stats)
        else:
            self._record_stats()

    def _record_stats(self) -> None:
        """Fold the round into persisted stats, then announce the summary.

        Runs on the executor's thread when one is set; round-over listeners
        are called from that thread.
        """
        try:
            self._unlocked = self._stats.update_stats(self.mode.value, self._score, self.words_found)
        finally:
            self._publish_summary()

    def _publish_summary(self) -> None:
        summary = RoundSummary(
            mode=self.mode,
            score=self._score,
            words_found=self.words_found,
            unlocked_achievements=self.unlocked_achievements,
        )
        for callback in list(self._over_listeners):
            callback(summary)

    def _feedback(self, duration_ms: int) -> None:
        if self._vibrate is not None and self.settings.vibration_enabled:
            self._vibrate(duration_ms)

    def _notify_rows(self) -> None:
        for callback in list(self._row_listeners):
            callback()
