"""GUI entry point for the cropview desktop application."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from cropview.gui.ui.main_window import MainWindow
from cropview.gui.utils.console_logger import ensure_console_logger
from cropview.settings.manager import SettingsManager


def main(argv: list[str] | None = None, *, settings_path: Path | None = None) -> int:
    """Launch the Qt application and return the exit code."""

    arguments = list(sys.argv if argv is None else argv)
    ensure_console_logger(logging.getLogger("cropview"), "cropview-console")

    app = QApplication.instance() or QApplication(arguments)
    settings = SettingsManager(settings_path)
    settings.load()

    window = MainWindow(settings)
    window.show()
    # Allow opening an image directly via argv[1].
    if len(arguments) > 1:
        window.open_path(Path(arguments[1]))
    return app.exec()


if __name__ == "__main__":  # pragma: no cover - manual launch
    raise SystemExit(main())
