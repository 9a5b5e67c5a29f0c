"""Application entry point and setup for Milim."""

import logging
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from milim.core.config import data_dir
from milim.core.controller import GameController
from milim.core.progress import GameDataStore
from milim.core.settings import Settings, SettingsStore
from milim.core.words import ChallengeBank, WordBank
from milim.ui.feedback import SoundFeedback
from milim.ui.main_window import MainWindow
from milim.ui.scheduler import QtScheduler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure application-wide logging; DEBUG and a log file are opt-in settings."""
    handlers = [logging.StreamHandler()]
    if settings.log_to_file:
        log_path = data_dir() / "milim.log"
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
        except OSError as e:
            print(f"Could not open log file {log_path}: {e}", file=sys.stderr)
    logging.basicConfig(
        level=logging.DEBUG if settings.logging_enabled else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
    )


def run() -> None:
    """Initialize the application, load word data, and start the main window."""
    settings = SettingsStore()
    configure_logging(settings.settings)
    app = QApplication(sys.argv)
    app.setApplicationName("Milim")
    app.setApplicationDisplayName("Milim")

    try:
        word_bank = WordBank()
        challenge_bank = ChallengeBank()
    except (FileNotFoundError, ValueError) as e:
        logging.critical("Could not load game data: %s", e)
        sys.exit(1)

    store = GameDataStore()
    scheduler = QtScheduler(app)
    controller = GameController(
        word_bank,
        challenge_bank,
        scheduler,
        store=store,
        feedback=[SoundFeedback(settings)],
    )

    window = MainWindow(controller=controller, store=store, settings=settings)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1100, geometry.width()), min(800, geometry.height()))
    window.show()

    sys.exit(app.exec())
