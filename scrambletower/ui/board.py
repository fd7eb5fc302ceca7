"""Board widget: one row of letter tiles per active word."""

from __future__ import annotations

from typing import List, Optional, Tuple

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QGridLayout, QPushButton, QSizePolicy, QVBoxLayout, QWidget

from scrambletower.core.rows import Row
from scrambletower.ui.colors import LIGHT, Palette, blend_hex


class BoardWidget(QWidget):
    """Stacks rows bottom-up: the oldest row sits at the bottom, new rows land on top."""

    letter_clicked = Signal(int, int)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._palette: Palette = LIGHT
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(8, 8, 8, 8)
        self._layout.addStretch(1)
        self._grid_host = QWidget(self)
        self._grid = QGridLayout(self._grid_host)
        self._grid.setSpacing(2)
        self._layout.addWidget(self._grid_host, 0, Qt.AlignHCenter)
        self._buttons: List[QPushButton] = []
        self._rows: List[Row] = []
        self._selection: Optional[Tuple[int, int]] = None

    @property
    def tiles(self) -> List[QPushButton]:
        return list(self._buttons)

    def set_palette(self, palette: Palette) -> None:
        """Switch theme and repaint the tiles already on the board."""
        self._palette = palette
        self.set_rows(self._rows, self._selection)

    def set_rows(self, rows: List[Row], selection: Optional[Tuple[int, int]] = None) -> None:
        self._rows = list(rows)
        self._selection = selection
        for button in self._buttons:
            self._grid.removeWidget(button)
            button.deleteLater()
        self._buttons = []

        # Spawn order is oldest first; draw newest at the top
        for line, row in enumerate(reversed(rows)):
            for position, letter in enumerate(row.current_arrangement):
                selected = selection == (row.index, position)
                button = QPushButton(letter.upper(), self._grid_host)
                button.setFixedSize(56, 56)
                button.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
                button.setStyleSheet(self._tile_style(selected))
                button.clicked.connect(
                    lambda _checked=False, r=row.index, p=position: self.letter_clicked.emit(r, p)
                )
                self._grid.addWidget(button, line, position)
                self._buttons.append(button)

    def _tile_style(self, selected: bool) -> str:
        p = self._palette
        border = p.SELECTED if selected else p.TILE_BORDER_DARK
        hover = blend_hex(p.TILE, "#FFFFFF", 0.15)
        return (
            f"QPushButton {{ background: {p.TILE}; color: {p.TILE_TEXT};"
            f" border: 4px solid {border}; border-top-color: {p.SELECTED if selected else p.TILE_BORDER_LIGHT};"
            f" border-radius: 5px; font-size: 22px; font-weight: bold; }}"
            f" QPushButton:hover {{ background: {hover}; }}"
        )
