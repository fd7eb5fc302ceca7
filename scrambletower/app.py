"""Application entry point and setup for Scramble Tower."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from scrambletower.core.datamuse import DatamuseClient
from scrambletower.core.settings import SettingsStore
from scrambletower.core.stats import StatsEngine
from scrambletower.core.storage import KeyValueStore
from scrambletower.core.words import WordSource
from scrambletower.ui.main_window import MainWindow
from scrambletower.ui.workers import BackgroundRunner


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Initialize storage and lookups, then start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Scramble Tower")
    app.setApplicationDisplayName("Scramble Tower")

    store = KeyValueStore()
    datamuse = DatamuseClient()
    stats = StatsEngine(store, definitions=datamuse)
    stats.init_stats()
    logging.info("Using data directory %s", store.directory)

    runner = BackgroundRunner()
    word_source = WordSource(lookup=datamuse, executor=runner)
    word_source.prefetch(0)

    window = MainWindow(
        stats=stats,
        settings_store=SettingsStore(store),
        word_source=word_source,
        runner=runner,
    )
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(520, geometry.width()), geometry.height())
    window.show()

    status = app.exec()
    # Let an in-flight stats write land before the interpreter goes away
    runner.wait(5000)
    sys.exit(status)


if __name__ == "__main__":
    run()
