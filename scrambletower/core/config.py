"""Configuration constants for Scramble Tower."""

from __future__ import annotations

import os
from pathlib import Path

WORD_LENGTH = 5
MIN_TIER = 0
MAX_TIER = 3

# Rush mode
RUSH_INITIAL_ROWS = 4
RUSH_TIME_LIMIT = 60       # time units (seconds in the UI)
RUSH_SPAWN_INTERVAL = 5    # one new row every N time units

# Zen mode
ZEN_INITIAL_ROWS = 11

# Tower mode
TOWER_INITIAL_ROWS = 4
TOWER_SPAWN_INTERVAL = 5
TOWER_WORDS_PER_TIER = 10  # solved words needed to climb one tier

# The board can show this many rows below the header before a row overflows
MAX_VISIBLE_ROWS = 12

# Scrambler
SCRAMBLE_MAX_ATTEMPTS = 100

# Remote words kept ready per tier so a spawn never waits on the network
PREFETCH_DEPTH = 3
UNCOMMON_LETTERS = frozenset("zqxjkvwy")

# Statistics
SESSION_HISTORY_LIMIT = 10
TOWER_CHAMPION_SCORE = 50

# Feedback timing (milliseconds)
SOLVE_VIBRATION_MS = 100
GAME_OVER_VIBRATION_MS = 300
GAME_OVER_DELAY_MS = 3000

# Remote lookups
DATAMUSE_URL = "https://api.datamuse.com/words"
REQUEST_TIMEOUT_SECONDS = 3.0
DEFINITION_NOT_AVAILABLE = "Definition not available"
DEFINITION_NOT_FOUND = "Definition not found"


def data_dir() -> Path:
    """Directory holding persisted settings and stats."""
    override = os.environ.get("SCRAMBLETOWER_HOME")
    if override:
        return Path(override)
    return Path.home() / ".scrambletower"
