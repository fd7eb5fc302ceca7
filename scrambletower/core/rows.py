from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class Row:
    """One falling word row."""

    index: int
    target_word: str
    current_arrangement: str
    selection: Optional[int] = None

    @property
    def solved(self) -> bool:
        return self.current_arrangement == self.target_word

    @property
    def letters(self) -> List[str]:
        return list(self.current_arrangement)


class RowEngine:
    """Owns the active rows of a round and the single pending letter selection.

    A tap either records a selection or, when a letter in the same row is
    already selected, swaps the two letters. Solved rows leave the active set
    immediately; later taps on their index are ignored.
    """

    def __init__(self) -> None:
        self._rows: List[Row] = []
        self._next_index = 0
        self._selection: Optional[Tuple[int, int]] = None
        self._solved_count = 0
        self._solved_listeners: List[Callable[[Row], None]] = []

    @property
    def rows(self) -> List[Row]:
        """Active rows in spawn order."""
        return list(self._rows)

    @property
    def selection(self) -> Optional[Tuple[int, int]]:
        """Pending ``(row_index, position)`` or None."""
        return self._selection

    @property
    def solved_count(self) -> int:
        return self._solved_count

    def __len__(self) -> int:
        return len(self._rows)

    def add_solved_listener(self, callback: Callable[[Row], None]) -> None:
        self._solved_listeners.append(callback)

    def get(self, row_index: int) -> Optional[Row]:
        for row in self._rows:
            if row.index == row_index:
                return row
        return None

    def spawn_row(self, word: str, arrangement: str) -> Row:
        if Counter(word) != Counter(arrangement):
            raise ValueError(f"{arrangement!r} is not a permutation of {word!r}")
        row = Row(index=self._next_index, target_word=word, current_arrangement=arrangement)
        self._next_index += 1
        self._rows.append(row)
        return row

    def select_or_swap(self, row_index: int, position: int) -> Optional[str]:
        """Handle a tap on a letter. Returns the solved word if the tap solved a row."""
        row = self.get(row_index)
        if row is None or not 0 <= position < len(row.current_arrangement):
            return None

        if self._selection is None or self._selection[0] != row_index:
            self._set_selection(row, position)
            return None

        first = self._selection[1]
        self._clear_selection()
        if first == position:
            return None

        letters = row.letters
        letters[first], letters[position] = letters[position], letters[first]
        row.current_arrangement = "".join(letters)

        if row.solved:
            self._complete(row)
            return row.target_word
        return None

    def remove_all(self) -> None:
        self._rows.clear()
        self._selection = None

    def _set_selection(self, row: Row, position: int) -> None:
        self._clear_selection()
        row.selection = position
        self._selection = (row.index, position)

    def _clear_selection(self) -> None:
        if self._selection is not None:
            previous = self.get(self._selection[0])
            if previous is not None:
                previous.selection = None
        self._selection = None

    def _complete(self, row: Row) -> None:
        self._rows.remove(row)
        self._solved_count += 1
        logger.debug("Row %d solved: %s", row.index, row.target_word)
        for callback in list(self._solved_listeners):
            callback(row)
