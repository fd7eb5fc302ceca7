from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from scrambletower.core.config import MAX_VISIBLE_ROWS
from scrambletower.core.round import GameMode, RoundController, RoundSummary
from scrambletower.core.settings import Settings, SettingsStore
from scrambletower.core.stats import PROGRESSION_MILESTONES, StatsEngine
from scrambletower.core.words import WordSource
from scrambletower.ui.board import BoardWidget
from scrambletower.ui.colors import palette_for
from scrambletower.ui.models import MilestoneState, dictionary_entries, recent_sessions
from scrambletower.ui.timers import RoundClock
from scrambletower.ui.workers import BackgroundRunner

logger = logging.getLogger(__name__)

HELP_TEXT = {
    GameMode.RUSH: "Tap two letters in the same row to swap them. A new row drops every 5 seconds; "
                   "unscramble as many words as you can in 60 seconds before the stack reaches the top.",
    GameMode.ZEN: "No timer and no pressure. Every word you solve brings a new one. Press Finish when you are done.",
    GameMode.TOWER: "Rows keep dropping and the words get harder as you climb. Don't let the tower reach the top.",
}

MODE_ICONS = {GameMode.TOWER: "🏆", GameMode.RUSH: "⏱️", GameMode.ZEN: "🧘"}


class MainWindow(QMainWindow):
    """Home, game and statistics screens stacked in one window.

    Word lookups and the round-end stats update run on ``runner``'s thread
    pool; the round summary comes back to the GUI thread through the queued
    ``round_finished`` signal.
    """

    round_finished = Signal(object)

    def __init__(
        self,
        stats: StatsEngine,
        settings_store: SettingsStore,
        word_source: WordSource,
        runner: Optional[BackgroundRunner] = None,
    ) -> None:
        super().__init__()
        self._stats = stats
        self._settings_store = settings_store
        self._word_source = word_source
        self._runner = runner
        self._settings: Settings = settings_store.load()

        self._round: Optional[RoundController] = None
        self._clock: Optional[RoundClock] = None

        self._high_score_labels: Dict[GameMode, QLabel] = {}
        self._milestone_labels: List[QLabel] = []
        self._session_labels: List[QLabel] = []
        self._muted_labels: List[QLabel] = []
        self._danger_buttons: List[QPushButton] = []

        self.round_finished.connect(self._on_round_over)

        self.setWindowTitle("Scramble Tower")
        self._stack = QStackedWidget(self)
        self.setCentralWidget(self._stack)
        self._home_screen = self._build_home_screen()
        self._game_screen = self._build_game_screen()
        self._stats_screen = self._build_stats_screen()
        for screen in (self._home_screen, self._game_screen, self._stats_screen):
            self._stack.addWidget(screen)

        self._apply_theme()
        self._refresh_home()

    # --- screens -----------------------------------------------------------

    def _build_home_screen(self) -> QWidget:
        screen = QWidget(self)
        layout = QVBoxLayout(screen)
        layout.setAlignment(Qt.AlignTop | Qt.AlignHCenter)

        title = QLabel("SCRAMBLE TOWER", screen)
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-size: 32px; font-weight: 900;")
        layout.addWidget(title)

        for mode in GameMode:
            button = QPushButton(mode.value.upper(), screen)
            button.setMinimumHeight(48)
            button.clicked.connect(lambda _checked=False, m=mode: self._start_round(m))
            layout.addWidget(button)

        stats_button = QPushButton("STATISTICS", screen)
        stats_button.clicked.connect(self._show_stats)
        layout.addWidget(stats_button)

        self._total_words_label = self._muted_label(screen)
        layout.addWidget(self._total_words_label)
        scores_row = QHBoxLayout()
        for mode in GameMode:
            label = self._muted_label(screen)
            self._high_score_labels[mode] = label
            scores_row.addWidget(label)
        layout.addLayout(scores_row)

        self._dark_mode_box = QCheckBox("Dark mode", screen)
        self._animations_box = QCheckBox("Animations", screen)
        self._vibration_box = QCheckBox("Vibration", screen)
        for box, name in (
            (self._dark_mode_box, "dark_mode"),
            (self._animations_box, "animations_enabled"),
            (self._vibration_box, "vibration_enabled"),
        ):
            box.toggled.connect(lambda _checked, n=name: self._toggle_setting(n))
            layout.addWidget(box)

        reset_settings = QPushButton("Reset All Settings", screen)
        reset_settings.clicked.connect(self._reset_settings)
        reset_stats = QPushButton("Reset Game Statistics", screen)
        reset_stats.clicked.connect(self._confirm_reset_stats)
        for button in (reset_settings, reset_stats):
            self._danger_buttons.append(button)
            layout.addWidget(button)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = QWidget(self)
        layout = QVBoxLayout(screen)

        self._game_header = QWidget(screen)
        header = QHBoxLayout(self._game_header)
        self._mode_label = QLabel(self._game_header)
        self._score_label = QLabel(self._game_header)
        self._timer_label = QLabel(self._game_header)
        self._pause_button = QPushButton("Pause", self._game_header)
        self._pause_button.clicked.connect(self._toggle_pause)
        help_button = QPushButton("?", self._game_header)
        help_button.clicked.connect(self._show_help)
        self._finish_button = QPushButton("Finish", self._game_header)
        self._finish_button.clicked.connect(self._finish_round)
        for widget in (self._mode_label, self._score_label, self._timer_label):
            header.addWidget(widget)
        header.addStretch(1)
        for widget in (help_button, self._pause_button, self._finish_button):
            header.addWidget(widget)
        layout.addWidget(self._game_header)

        self._board = BoardWidget(screen)
        self._board.letter_clicked.connect(self._on_letter_clicked)
        layout.addWidget(self._board, 1)
        return screen

    def _build_stats_screen(self) -> QWidget:
        screen = QWidget(self)
        outer = QVBoxLayout(screen)

        top = QHBoxLayout()
        back = QPushButton("Back", screen)
        back.clicked.connect(lambda: self._stack.setCurrentWidget(self._home_screen))
        heading = QLabel("STATISTICS", screen)
        heading.setStyleSheet("font-size: 24px; font-weight: 900;")
        top.addWidget(back)
        top.addWidget(heading, 1, Qt.AlignCenter)
        outer.addLayout(top)

        scroll = QScrollArea(screen)
        scroll.setWidgetResizable(True)
        body = QWidget(scroll)
        layout = QVBoxLayout(body)
        layout.setAlignment(Qt.AlignTop)

        layout.addWidget(self._section_title("Your Progress", body))
        self._stats_total_label = QLabel(body)
        self._stats_scores_label = QLabel(body)
        layout.addWidget(self._stats_total_label)
        layout.addWidget(self._stats_scores_label)

        layout.addWidget(self._section_title("Learning", body))
        self._new_words_label = QLabel(body)
        layout.addWidget(self._new_words_label)
        self._dictionary_tree = QTreeWidget(body)
        self._dictionary_tree.setColumnCount(2)
        self._dictionary_tree.setHeaderLabels(["Word", "Definition"])
        self._dictionary_tree.setMinimumHeight(200)
        layout.addWidget(self._dictionary_tree)

        layout.addWidget(self._section_title("Milestones", body))
        for _ in PROGRESSION_MILESTONES:
            label = QLabel(body)
            self._milestone_labels.append(label)
            layout.addWidget(label)

        layout.addWidget(self._section_title("Achievements", body))
        self._achievements_label = QLabel(body)
        self._achievements_label.setWordWrap(True)
        layout.addWidget(self._achievements_label)

        layout.addWidget(self._section_title("Recent Sessions", body))
        self._no_sessions_label = self._muted_label(body)
        self._no_sessions_label.setText("No sessions played yet")
        layout.addWidget(self._no_sessions_label)
        self._sessions_box = QVBoxLayout()
        layout.addLayout(self._sessions_box)

        scroll.setWidget(body)
        outer.addWidget(scroll, 1)
        return screen

    def _section_title(self, text: str, parent: QWidget) -> QLabel:
        label = QLabel(text, parent)
        label.setStyleSheet("font-size: 18px; font-weight: bold; margin-top: 12px;")
        return label

    def _muted_label(self, parent: QWidget) -> QLabel:
        label = QLabel(parent)
        self._muted_labels.append(label)
        return label

    # --- round lifecycle ---------------------------------------------------

    def _start_round(self, mode: GameMode) -> None:
        self._round = RoundController(
            mode,
            self._word_source,
            stats=self._stats,
            settings=self._settings,
            vibrate=self._vibrate,
            executor=self._runner,
        )
        self._round.add_rows_changed_listener(self._on_rows_changed)
        # Emitted from a pool thread; the queued connection lands on the GUI thread
        self._round.add_round_over_listener(self.round_finished.emit)

        self._mode_label.setText(mode.value.upper())
        self._pause_button.setText("Pause")
        self._pause_button.setEnabled(True)
        self._timer_label.setVisible(self._round.remaining_time is not None)
        self._stack.setCurrentWidget(self._game_screen)

        self._round.start()
        if self._round.config.time_limit is not None or self._round.config.spawn_interval:
            self._clock = RoundClock(self._on_tick, parent=self)
            self._clock.start()
        self._update_header()

    def _on_tick(self) -> None:
        if self._round is not None:
            self._round.tick()
            self._update_header()

    def _on_letter_clicked(self, row_index: int, position: int) -> None:
        if self._round is not None:
            self._round.select_or_swap(row_index, position)
            self._update_header()

    def _on_rows_changed(self) -> None:
        current = self._round
        if current is None:
            return
        self._board.set_rows(current.active_rows, current.selection)
        if len(current.active_rows) > MAX_VISIBLE_ROWS:
            current.report_overflow()

    def _toggle_pause(self) -> None:
        if self._round is None or self._round.is_over:
            return
        if self._round.paused:
            self._round.resume()
            if self._clock is not None:
                self._clock.resume()
            self._pause_button.setText("Pause")
        else:
            self._round.pause()
            if self._clock is not None:
                self._clock.pause()
            self._pause_button.setText("Resume")

    def _finish_round(self) -> None:
        if self._round is not None:
            if self._clock is not None:
                self._clock.stop()
            self._round.finish()

    def _on_round_over(self, summary: RoundSummary) -> None:
        if self._clock is not None:
            self._clock.stop()
            self._clock = None
        self._pause_button.setEnabled(False)
        delay = self._round.game_over_delay_ms if self._round is not None else 0
        QTimer.singleShot(delay, lambda: self._show_summary(summary))

    def _show_summary(self, summary: RoundSummary) -> None:
        lines = [f"Score: {summary.score}", f"Words: {', '.join(summary.words_found) or 'none'}"]
        if summary.unlocked_achievements:
            lines.append("")
            lines.append("Achievements unlocked:")
            lines.extend(f"  {name}" for name in summary.unlocked_achievements)
        QMessageBox.information(self, "Game Over", "\n".join(lines))
        self._round = None
        self._refresh_home()
        self._stack.setCurrentWidget(self._home_screen)

    def _update_header(self) -> None:
        if self._round is None:
            return
        self._score_label.setText(f"Score: {self._round.score}")
        if self._round.remaining_time is not None:
            self._timer_label.setText(f"Time: {self._round.remaining_time}")

    def _show_help(self) -> None:
        if self._round is None:
            return
        was_paused = self._round.paused
        if not was_paused:
            self._toggle_pause()
        QMessageBox.information(self, "How to play", HELP_TEXT[self._round.mode])
        if not was_paused:
            self._toggle_pause()

    def _vibrate(self, duration_ms: int) -> None:
        # Desktops have no haptics; an audible cue stands in
        logger.debug("Feedback pulse %d ms", duration_ms)
        QApplication.beep()

    # --- home / statistics / settings -------------------------------------

    def _refresh_home(self) -> None:
        stats = self._stats.load()
        self._total_words_label.setText(f"✨ {stats.total_words} words unscrambled")
        for mode, label in self._high_score_labels.items():
            label.setText(f"{MODE_ICONS[mode]} {mode.value}: {stats.high_score(mode.value)}")

        for box, value in (
            (self._dark_mode_box, self._settings.dark_mode),
            (self._animations_box, self._settings.animations_enabled),
            (self._vibration_box, self._settings.vibration_enabled),
        ):
            box.blockSignals(True)
            box.setChecked(value)
            box.blockSignals(False)

    def _show_stats(self) -> None:
        self._refresh_stats()
        self._stack.setCurrentWidget(self._stats_screen)

    def _refresh_stats(self) -> None:
        stats = self._stats.load()
        self._stats_total_label.setText(f"✨ {stats.total_words} Total Words Unscrambled")
        self._stats_scores_label.setText("   ".join(
            f"{MODE_ICONS[mode]} {mode.value}: {stats.high_score(mode.value)}" for mode in GameMode
        ))
        self._new_words_label.setText(f"📚 {len(stats.new_words)} New Words Discovered")

        self._dictionary_tree.clear()
        entries = dictionary_entries(stats)
        root = QTreeWidgetItem([f"📖 Words Discovered Dictionary ({len(entries)})", ""])
        if entries:
            for word, meaning in entries:
                child = QTreeWidgetItem([word, meaning])
                child.setToolTip(1, meaning)
                root.addChild(child)
        else:
            root.addChild(QTreeWidgetItem(["No words discovered yet", ""]))
        self._dictionary_tree.addTopLevelItem(root)
        root.setExpanded(False)

        for label, (milestone, progress, unlocked) in zip(self._milestone_labels, self._stats.milestone_progress()):
            label.setText(MilestoneState(milestone, progress, unlocked).label)

        if stats.achievements:
            self._achievements_label.setText("\n".join(f"🏅 {name}" for name in stats.achievements))
        else:
            self._achievements_label.setText("No achievements yet")

        for label in self._session_labels:
            self._sessions_box.removeWidget(label)
            label.deleteLater()
        self._session_labels = []
        sessions = recent_sessions(stats)
        self._no_sessions_label.setVisible(not sessions)
        for text in sessions:
            label = QLabel(text, self._stats_screen)
            self._sessions_box.addWidget(label)
            self._session_labels.append(label)

    def _toggle_setting(self, name: str) -> None:
        self._settings = self._settings_store.toggle(name)
        self._apply_theme()

    def _reset_settings(self) -> None:
        self._settings = self._settings_store.reset()
        self._apply_theme()
        self._refresh_home()

    def _confirm_reset_stats(self) -> None:
        answer = QMessageBox.question(
            self,
            "Reset Statistics",
            "Are you sure you want to reset all your game statistics? This cannot be undone.",
        )
        if answer == QMessageBox.Yes:
            self._stats.reset()
            self._refresh_home()

    def _apply_theme(self) -> None:
        palette = palette_for(self._settings.dark_mode)
        self.setStyleSheet(
            f"QMainWindow, QWidget {{ background: {palette.BG}; color: {palette.TEXT_PRIMARY}; }}"
            f" QPushButton {{ background: {palette.ACCENT}; color: white; border-radius: 6px; padding: 6px 12px; }}"
        )
        self._game_header.setStyleSheet(f"QWidget {{ background: {palette.HEADER_BG}; }}")
        for label in self._muted_labels:
            label.setStyleSheet(f"color: {palette.TEXT_MUTED};")
        for button in self._danger_buttons:
            button.setStyleSheet(f"QPushButton {{ background: {palette.DANGER}; color: white; }}")
        self._board.set_palette(palette)
