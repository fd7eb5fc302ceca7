"""Qt timer that drives a round one time unit at a time."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class RoundClock(QObject):
    """Calls ``on_tick`` every ``interval_ms`` while running.

    Pausing records how much of the current interval was left. Resuming
    waits out only that remainder before the next tick, then falls back into
    the regular interval, so pause/resume cycles neither skip nor stretch
    time units.
    """

    def __init__(self, on_tick: Callable[[], None], interval_ms: int = 1000, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._on_tick = on_tick
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(on_tick)
        self._resume_timer = QTimer(self)
        self._resume_timer.setSingleShot(True)
        self._resume_timer.timeout.connect(self._on_remainder_elapsed)
        self._pending_ms = 0

    @property
    def running(self) -> bool:
        return self._timer.isActive() or self._resume_timer.isActive()

    @property
    def pending_ms(self) -> int:
        """Milliseconds of the current interval left at the last pause."""
        return self._pending_ms

    def start(self) -> None:
        if not self.running:
            self._pending_ms = 0
            self._timer.start()

    def pause(self) -> None:
        if self._resume_timer.isActive():
            self._pending_ms = max(0, self._resume_timer.remainingTime())
        elif self._timer.isActive():
            self._pending_ms = max(0, self._timer.remainingTime())
        self._resume_timer.stop()
        self._timer.stop()

    def resume(self) -> None:
        if self.running:
            return
        if self._pending_ms > 0:
            self._resume_timer.start(self._pending_ms)
        else:
            self._timer.start()
        self._pending_ms = 0

    def stop(self) -> None:
        self._resume_timer.stop()
        self._timer.stop()
        self._pending_ms = 0

    def _on_remainder_elapsed(self) -> None:
        self._timer.start()
        self._on_tick()
