from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for GUI tests", exc_type=ImportError)

from PySide6.QtGui import QCloseEvent, QColor, QImage

from cropview.gui.ui import main_window as main_window_module
from cropview.gui.ui.main_window import MainWindow
from cropview.gui.ui.widgets.crop_viewport import Rect
from cropview.settings import SettingsManager


@pytest.fixture
def window(tmp_path: Path, qapp, monkeypatch):
    monkeypatch.setattr(main_window_module, "QMessageBox", MagicMock())
    settings = SettingsManager(tmp_path / "settings.json")
    settings.load()
    win = MainWindow(settings)
    yield win
    win.deleteLater()


@pytest.fixture
def image_path(tmp_path: Path) -> Path:
    image = QImage(120, 80, QImage.Format.Format_RGB32)
    image.fill(QColor(10, 200, 30))
    path = tmp_path / "photo.png"
    assert image.save(str(path))
    return path


def test_open_path_loads_image_and_remembers_it(window: MainWindow, image_path: Path) -> None:
    assert window.open_path(image_path)
    image = window.viewport.image()
    assert (image.width(), image.height()) == (120, 80)
    assert window._settings.get("last_open_path") == str(image_path)
    assert "photo.png" in window.windowTitle()


def test_open_path_reports_failure(window: MainWindow, tmp_path: Path) -> None:
    assert not window.open_path(tmp_path / "missing.png")
    assert window.viewport.image() is None
    main_window_module.QMessageBox.warning.assert_called_once()


def test_save_visible_writes_crop(window: MainWindow, image_path: Path, tmp_path: Path) -> None:
    window.open_path(image_path)
    window.viewport.set_crop(Rect(10, 10, 40, 30))
    destination = tmp_path / "crop.png"
    assert window.save_visible(destination)
    saved = QImage(str(destination))
    assert (saved.width(), saved.height()) == (40, 30)


def test_close_persists_grid_option(window: MainWindow) -> None:
    window.grid_action.trigger()
    assert window.viewport.is_grid_visible()
    window.closeEvent(QCloseEvent())
    assert window._settings.get("viewer.show_grid") is True
