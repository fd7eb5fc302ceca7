"""Background jobs on Qt's thread pool."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import QRunnable, QThreadPool

logger = logging.getLogger(__name__)


class _Job(QRunnable):
    def __init__(self, job: Callable[[], None]) -> None:
        super().__init__()
        self._job = job
        self.setAutoDelete(True)

    def run(self) -> None:
        try:
            self._job()
        except Exception:
            # Nothing above a pool thread would see the error
            logger.exception("Background job failed")


class BackgroundRunner:
    """Callable executor that runs each job on a QThreadPool.

    Passed to WordSource and RoundController so network lookups and the
    round-end stats update never run on the GUI thread. Jobs must hand results
    back through queued signals or thread-safe structures.
    """

    def __init__(self, pool: Optional[QThreadPool] = None) -> None:
        self._pool = pool or QThreadPool.globalInstance()

    def __call__(self, job: Callable[[], None]) -> None:
        self._pool.start(_Job(job))

    def wait(self, msecs: int = -1) -> bool:
        """Block until queued jobs finish (shutdown and tests)."""
        return self._pool.waitForDone(msecs)
