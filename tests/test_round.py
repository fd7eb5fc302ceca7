"""Tests for scrambletower.core.round – per-mode round state machine."""

from __future__ import annotations

import random
import threading
import time
from typing import List

import pytest

from scrambletower.core.config import (
    GAME_OVER_DELAY_MS,
    GAME_OVER_VIBRATION_MS,
    RUSH_INITIAL_ROWS,
    RUSH_TIME_LIMIT,
    SOLVE_VIBRATION_MS,
    ZEN_INITIAL_ROWS,
)
from scrambletower.core.round import (
    MODE_CONFIGS,
    GameMode,
    ModeConfig,
    RoundController,
    RoundStatus,
    RoundSummary,
)
from scrambletower.core.settings import Settings
from scrambletower.core.words import WordSource


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeStats:
    def __init__(self, unlocked: List[str] | None = None) -> None:
        self.calls = []
        self._unlocked = unlocked or []

    def update_stats(self, mode, score, words_found):
        self.calls.append((mode, score, list(words_found)))
        return list(self._unlocked)


def make_round(mode: GameMode, **kwargs) -> RoundController:
    kwargs.setdefault("rng", random.Random(42))
    source = WordSource(rng=random.Random(42))
    return RoundController(mode, source, **kwargs)


def solve_row(ctrl: RoundController, row_index: int) -> None:
    """Swap letters into place until the row leaves the board."""
    while True:
        row = next((r for r in ctrl.active_rows if r.index == row_index), None)
        if row is None:
            return
        current = row.current_arrangement
        i = next(k for k in range(len(current)) if current[k] != row.target_word[k])
        j = next(k for k in range(i + 1, len(current)) if current[k] == row.target_word[i])
        ctrl.select_or_swap(row_index, i)
        ctrl.select_or_swap(row_index, j)


# ---------------------------------------------------------------------------
# Mode configuration
# ---------------------------------------------------------------------------

class TestModeConfigs:
    def test_rush(self):
        cfg = MODE_CONFIGS[GameMode.RUSH]
        assert cfg.initial_rows == 4
        assert cfg.time_limit == 60
        assert cfg.spawn_interval == 5
        assert cfg.overflow_ends_round
        assert not cfg.solve_spawns_row

    def test_zen(self):
        cfg = MODE_CONFIGS[GameMode.ZEN]
        assert cfg.initial_rows == 11
        assert cfg.time_limit is None
        assert cfg.spawn_interval is None
        assert not cfg.overflow_ends_round
        assert cfg.solve_spawns_row

    def test_tower_is_progressive(self):
        cfg = MODE_CONFIGS[GameMode.TOWER]
        assert cfg.progressive
        assert cfg.overflow_ends_round


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------

class TestStart:
    def test_rush_initial_rows(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        assert len(ctrl.active_rows) == RUSH_INITIAL_ROWS
        assert ctrl.status is RoundStatus.ACTIVE
        assert ctrl.remaining_time == RUSH_TIME_LIMIT

    def test_zen_initial_rows(self):
        ctrl = make_round(GameMode.ZEN)
        ctrl.start()
        assert len(ctrl.active_rows) == ZEN_INITIAL_ROWS
        assert ctrl.remaining_time is None

    def test_rows_start_scrambled(self):
        ctrl = make_round(GameMode.ZEN)
        ctrl.start()
        assert all(r.current_arrangement != r.target_word for r in ctrl.active_rows)

    def test_start_twice_is_noop(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        ctrl.start()
        assert len(ctrl.active_rows) == RUSH_INITIAL_ROWS

    def test_tick_before_start_ignored(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.tick()
        assert ctrl.elapsed == 0


# ---------------------------------------------------------------------------
# Rush timer and spawning
# ---------------------------------------------------------------------------

class TestRushClock:
    def test_over_after_time_limit(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        for _ in range(RUSH_TIME_LIMIT - 1):
            ctrl.tick()
        assert ctrl.status is RoundStatus.ACTIVE
        ctrl.tick()
        assert ctrl.status is RoundStatus.OVER
        assert ctrl.remaining_time == 0

    def test_spawns_every_five_ticks(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        for _ in range(4):
            ctrl.tick()
        assert len(ctrl.active_rows) == 4
        ctrl.tick()
        assert len(ctrl.active_rows) == 5
        for _ in range(5):
            ctrl.tick()
        assert len(ctrl.active_rows) == 6

    def test_new_rows_append_on_top(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        before = [r.index for r in ctrl.active_rows]
        for _ in range(5):
            ctrl.tick()
        after = [r.index for r in ctrl.active_rows]
        assert after[:-1] == before
        assert after[-1] > max(before)

    def test_overflow_ends_round(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        ctrl.report_overflow()
        assert ctrl.is_over
        assert ctrl.active_rows == []

    def test_no_ticks_after_over(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        ctrl.report_overflow()
        remaining = ctrl.remaining_time
        ctrl.tick()
        assert ctrl.remaining_time == remaining
        assert ctrl.active_rows == []


# ---------------------------------------------------------------------------
# Pause / resume
# ---------------------------------------------------------------------------

class TestPause:
    def test_pause_freezes_time(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        for _ in range(7):
            ctrl.tick()
        ctrl.pause()
        for _ in range(20):
            ctrl.tick()
        assert ctrl.remaining_time == RUSH_TIME_LIMIT - 7
        assert ctrl.elapsed == 7
        ctrl.resume()
        ctrl.tick()
        assert ctrl.remaining_time == RUSH_TIME_LIMIT - 8

    def test_pause_keeps_spawn_progress(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        for _ in range(3):
            ctrl.tick()
        ctrl.pause()
        ctrl.resume()
        ctrl.tick()
        ctrl.tick()
        assert len(ctrl.active_rows) == RUSH_INITIAL_ROWS + 1

    def test_pause_keeps_rows_and_selection(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        row = ctrl.active_rows[0]
        ctrl.select_or_swap(row.index, 1)
        arrangements = [r.current_arrangement for r in ctrl.active_rows]
        ctrl.pause()
        ctrl.resume()
        assert [r.current_arrangement for r in ctrl.active_rows] == arrangements
        assert ctrl.selection == (row.index, 1)

    def test_swaps_ignored_while_paused(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        row = ctrl.active_rows[0]
        ctrl.pause()
        ctrl.select_or_swap(row.index, 0)
        assert ctrl.selection is None

    def test_full_round_with_pause_still_ends_after_limit(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        for i in range(RUSH_TIME_LIMIT):
            if i == 30:
                ctrl.pause()
                ctrl.tick()
                ctrl.resume()
            ctrl.tick()
        assert ctrl.is_over


# ---------------------------------------------------------------------------
# Solving
# ---------------------------------------------------------------------------

class TestSolving:
    def test_rush_solve_scores(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        row = ctrl.active_rows[0]
        solve_row(ctrl, row.index)
        assert ctrl.score == 1
        assert ctrl.words_found == [row.target_word]
        assert len(ctrl.active_rows) == RUSH_INITIAL_ROWS - 1

    def test_zen_solve_keeps_row_count(self):
        ctrl = make_round(GameMode.ZEN)
        ctrl.start()
        for _ in range(3):
            solve_row(ctrl, ctrl.active_rows[0].index)
            assert len(ctrl.active_rows) == ZEN_INITIAL_ROWS
        assert ctrl.score == 3

    def test_zen_ignores_overflow_and_time(self):
        ctrl = make_round(GameMode.ZEN)
        ctrl.start()
        ctrl.report_overflow()
        for _ in range(500):
            ctrl.tick()
        assert ctrl.status is RoundStatus.ACTIVE
        assert len(ctrl.active_rows) == ZEN_INITIAL_ROWS

    def test_zen_finish(self):
        ctrl = make_round(GameMode.ZEN)
        ctrl.start()
        ctrl.finish()
        assert ctrl.is_over
        assert ctrl.active_rows == []

    def test_no_score_after_over(self):
        ctrl = make_round(GameMode.ZEN)
        ctrl.start()
        row = ctrl.active_rows[0]
        ctrl.finish()
        ctrl.select_or_swap(row.index, 0)
        ctrl.select_or_swap(row.index, 1)
        assert ctrl.score == 0

    def test_tower_tier_climbs(self):
        cfg = ModeConfig(initial_rows=3, spawn_interval=5, overflow_ends_round=True,
                         solve_spawns_row=True, progressive=True, words_per_tier=2)
        ctrl = make_round(GameMode.TOWER, config=cfg)
        ctrl.start()
        assert ctrl.tier == 0
        for _ in range(2):
            solve_row(ctrl, ctrl.active_rows[0].index)
        assert ctrl.tier == 1
        for _ in range(20):
            solve_row(ctrl, ctrl.active_rows[0].index)
        assert ctrl.tier == 3

    def test_rush_tier_is_fixed(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        solve_row(ctrl, ctrl.active_rows[0].index)
        assert ctrl.tier == 0


# ---------------------------------------------------------------------------
# Round end and stats pipeline
# ---------------------------------------------------------------------------

class TestRoundEnd:
    def test_stats_updated_once(self):
        stats = FakeStats(unlocked=["Word Novice"])
        ctrl = make_round(GameMode.RUSH, stats=stats)
        ctrl.start()
        solve_row(ctrl, ctrl.active_rows[0].index)
        ctrl.report_overflow()
        ctrl.finish()
        ctrl.report_overflow()
        assert len(stats.calls) == 1
        mode, score, words = stats.calls[0]
        assert mode == "Rush"
        assert score == 1
        assert words == ctrl.words_found
        assert ctrl.unlocked_achievements == ["Word Novice"]

    def test_round_over_listener(self):
        summaries: List[RoundSummary] = []
        ctrl = make_round(GameMode.ZEN, stats=FakeStats(["Lexicon Master"]))
        ctrl.add_round_over_listener(summaries.append)
        ctrl.start()
        ctrl.finish()
        assert len(summaries) == 1
        assert summaries[0].mode is GameMode.ZEN
        assert summaries[0].unlocked_achievements == ["Lexicon Master"]

    def test_rows_changed_listener(self):
        calls = []
        ctrl = make_round(GameMode.RUSH)
        ctrl.add_rows_changed_listener(lambda: calls.append(len(ctrl.active_rows)))
        ctrl.start()
        assert calls[-1] == RUSH_INITIAL_ROWS

    def test_without_stats_engine(self):
        ctrl = make_round(GameMode.RUSH)
        ctrl.start()
        ctrl.finish()
        assert ctrl.unlocked_achievements == []


# ---------------------------------------------------------------------------
# Feedback settings
# ---------------------------------------------------------------------------

class TestFeedback:
    def test_vibrates_on_solve_and_game_over(self):
        pulses = []
        ctrl = make_round(GameMode.RUSH, vibrate=pulses.append)
        ctrl.start()
        solve_row(ctrl, ctrl.active_rows[0].index)
        ctrl.finish()
        assert pulses == [SOLVE_VIBRATION_MS, GAME_OVER_VIBRATION_MS]

    def test_vibration_disabled(self):
        pulses = []
        ctrl = make_round(GameMode.RUSH, vibrate=pulses.append,
                          settings=Settings(vibration_enabled=False))
        ctrl.start()
        solve_row(ctrl, ctrl.active_rows[0].index)
        ctrl.finish()
        assert pulses == []

    @pytest.mark.parametrize("animations, expected", [(True, GAME_OVER_DELAY_MS), (False, 0)])
    def test_game_over_delay(self, animations: bool, expected: int):
        ctrl = make_round(GameMode.RUSH, settings=Settings(animations_enabled=animations))
        assert ctrl.game_over_delay_ms == expected


# ---------------------------------------------------------------------------
# Slow lookups stay off the caller's thread
# ---------------------------------------------------------------------------

class SlowLookup:
    def __init__(self, delay: float = 0.3) -> None:
        self.delay = delay

    def lookup_words(self, max_results, topic=None, pattern="?????"):
        time.sleep(self.delay)
        return [{"word": "mango"}]


class SlowStats(FakeStats):
    """update_stats stands in for one with definition lookups on a slow network."""

    def update_stats(self, mode, score, words_found):
        time.sleep(0.3)
        return super().update_stats(mode, score, words_found)


class ThreadExecutor:
    def __init__(self) -> None:
        self.threads: List[threading.Thread] = []

    def __call__(self, job) -> None:
        thread = threading.Thread(target=job, daemon=True)
        self.threads.append(thread)
        thread.start()

    def join(self) -> None:
        for thread in self.threads:
            thread.join(timeout=5)


class TestBackgroundWork:
    def _timed(self, action) -> float:
        started = time.monotonic()
        action()
        return time.monotonic() - started

    def test_events_return_promptly_with_slow_lookup(self):
        executor = ThreadExecutor()
        source = WordSource(lookup=SlowLookup(), rng=random.Random(1), executor=executor)
        ctrl = RoundController(GameMode.RUSH, source, rng=random.Random(1), executor=executor)

        assert self._timed(ctrl.start) < 0.1
        assert len(ctrl.active_rows) == RUSH_INITIAL_ROWS
        for _ in range(5):
            assert self._timed(ctrl.tick) < 0.1
        assert len(ctrl.active_rows) == RUSH_INITIAL_ROWS + 1
        assert self._timed(ctrl.finish) < 0.1
        executor.join()

    def test_finish_returns_before_slow_stats_update(self):
        executor = ThreadExecutor()
        stats = SlowStats(unlocked=["First Word"])
        ctrl = make_round(GameMode.ZEN, stats=stats, executor=executor)
        done = threading.Event()
        summaries: List[RoundSummary] = []

        def on_over(summary: RoundSummary) -> None:
            summaries.append(summary)
            done.set()

        ctrl.add_round_over_listener(on_over)
        ctrl.start()
        solve_row(ctrl, ctrl.active_rows[0].index)

        assert self._timed(ctrl.finish) < 0.1
        assert ctrl.is_over
        assert summaries == []

        assert done.wait(timeout=5)
        assert stats.calls == [("Zen", 1, ctrl.words_found)]
        assert summaries[0].unlocked_achievements == ["First Word"]
        assert ctrl.unlocked_achievements == ["First Word"]

    def test_listener_runs_on_worker_thread(self):
        executor = ThreadExecutor()
        ctrl = make_round(GameMode.ZEN, stats=FakeStats(), executor=executor)
        seen = []
        ctrl.add_round_over_listener(lambda _summary: seen.append(threading.current_thread()))
        ctrl.start()
        ctrl.finish()
        executor.join()
        assert seen and seen[0] is not threading.current_thread()

    def test_failed_stats_update_still_announces_round(self):
        class BrokenStats:
            def update_stats(self, mode, score, words_found):
                raise RuntimeError("disk gone")

        ctrl = make_round(GameMode.ZEN, stats=BrokenStats(), executor=lambda job: _swallow(job))
        summaries = []
        ctrl.add_round_over_listener(summaries.append)
        ctrl.start()
        ctrl.finish()
        assert len(summaries) == 1
        assert summaries[0].unlocked_achievements == []


def _swallow(job) -> None:
    # Mirrors the pool runner, which logs job errors instead of raising them
    try:
        job()
    except RuntimeError:
        pass
