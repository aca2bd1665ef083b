"""
OmniTask — task dashboard with reminders and brain-break mini-games.
Entry point for the application.
"""

import faulthandler
import logging
import sys
from pathlib import Path

faulthandler.enable()

# Ensure omnitask is importable
sys.path.insert(0, str(Path(__file__).resolve().parent))

from PySide6.QtWidgets import QApplication

from omnitask.config import load_config
from omnitask.ui.main_window import MainWindow


def setup_logging(log_file: str) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def main() -> None:
    config = load_config()
    setup_logging(config["log_file"])
    logger = logging.getLogger(__name__)
    logger.info("Starting OmniTask...")

    app = QApplication(sys.argv)
    app.setApplicationName("OmniTask")
    app.setOrganizationName("OmniTask")
    # Closing the window minimizes to the tray; Quit is in the tray menu
    app.setQuitOnLastWindowClosed(False)

    window = MainWindow(config)

    logger.info("Application started.")
    exit_code = app.exec()
    del window
    sys.exit(exit_code)


if __name__ == "__main__":
    main()


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   The entry point. Loads config/omnitask.json, sets up logging, creates
#   the Qt application and the MainWindow (which asks the user to sign in).
#
# Key points:
#   - load_config() runs before logging so the log file location can come
#     from the config file; its own warnings are printed by the logging
#     last-resort handler.
#   - setQuitOnLastWindowClosed(False): the window hides to the tray and
#     the timers keep running.
#   - app.exec(): starts the Qt event loop. Every QTimer (reminders, game
#     ticks, the popup's 200 ms tick) is dispatched from here.
