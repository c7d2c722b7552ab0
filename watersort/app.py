"""Application entry point and setup for the Water Sort puzzle."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from watersort.core.config import log_level, pour_delay_ms
from watersort.core.engine import LevelEngine
from watersort.core.levels import LevelRepository
from watersort.ui.main_window import MainWindow


def configure_logging(level: int) -> None:
    """Send engine and UI records to stderr as `time [LEVEL] logger: message`."""
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logging.getLogger(__name__).debug("Logging at %s", logging.getLevelName(level))


def run() -> None:
    """Load the level set, start the engine on the first level and show the board."""
    configure_logging(log_level())
    app = QApplication(sys.argv)
    app.setApplicationName("Water Sort")
    app.setApplicationDisplayName("Water Sort")

    levels = LevelRepository()
    engine = LevelEngine()
    engine.load_level(levels.first())

    window = MainWindow(engine=engine, levels=levels, pour_delay_ms=pour_delay_ms())
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        window.resize(min(900, screen.availableGeometry().width()), 700)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
