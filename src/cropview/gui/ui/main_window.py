"""Main window hosting a single crop viewport."""

from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtGui import QAction, QCloseEvent, QKeySequence
from PySide6.QtWidgets import QFileDialog, QMainWindow, QMessageBox, QToolBar

from cropview.errors import CropViewError
from cropview.settings.manager import SettingsManager
from cropview.utils.image_loader import open_image, save_qimage
from .widgets.crop_viewport import CropViewport, Rect

_LOGGER = logging.getLogger(__name__)

_IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.tif *.tiff *.webp);;All files (*)"


class MainWindow(QMainWindow):
    """Primary window: toolbar actions around a :class:`CropViewport`."""

    def __init__(self, settings: SettingsManager) -> None:
        super().__init__()
        self._settings = settings
        self._current_path: Path | None = None

        self.viewport = CropViewport(self, settings=settings)
        self.setCentralWidget(self.viewport)
        self.viewport.cropChanged.connect(self._handle_crop_changed)
        self.viewport.imageChanged.connect(self._update_title)

        self._build_actions()
        self.resize(1024, 720)
        self._update_title()

    # ------------------------------------------------------------------
    # File handling
    # ------------------------------------------------------------------
    def open_path(self, path: Path) -> bool:
        """Load *path* into the viewport; return False and report on failure."""

        try:
            image = open_image(path)
        except CropViewError as exc:
            _LOGGER.warning("Failed to open %s: %s", path, exc)
            QMessageBox.warning(self, "Open image", str(exc))
            return False
        self.viewport.set_image(image)
        self._current_path = path
        self._settings.set("last_open_path", str(path))
        self._update_title()
        return True

    def save_visible(self, path: Path) -> bool:
        """Write the visible region (crop or whole image) to *path*."""

        try:
            save_qimage(self.viewport.visible_region(), path)
        except CropViewError as exc:
            _LOGGER.warning("Failed to save %s: %s", path, exc)
            QMessageBox.warning(self, "Save image", str(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # QWidget overrides
    # ------------------------------------------------------------------
    def closeEvent(self, event: QCloseEvent) -> None:  # type: ignore[override]
        self._settings.set("viewer.show_grid", self.viewport.is_grid_visible())
        super().closeEvent(event)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_actions(self) -> None:
        toolbar = QToolBar("Image", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        def add(text: str, slot, shortcut: QKeySequence | str | None = None) -> QAction:
            action = QAction(text, self)
            if shortcut is not None:
                action.setShortcut(QKeySequence(shortcut))
            action.triggered.connect(slot)
            toolbar.addAction(action)
            return action

        self.open_action = add("Open…", self._prompt_open, QKeySequence.StandardKey.Open)
        self.save_action = add("Save Visible…", self._prompt_save, QKeySequence.StandardKey.Save)
        toolbar.addSeparator()
        self.rotate_left_action = add("Rotate Left", self.viewport.rotate_270, "Ctrl+L")
        self.rotate_right_action = add("Rotate Right", self.viewport.rotate_90, "Ctrl+R")
        self.mirror_action = add("Mirror", self.viewport.mirror, "Ctrl+M")
        self.grayscale_action = add("Grayscale", self._apply_grayscale, "Ctrl+G")
        toolbar.addSeparator()
        self.reset_crop_action = add("Reset Crop", self.viewport.reset_crop, "Esc")
        self.grid_action = add("Grid", self.viewport.set_grid_visible, "Ctrl+Shift+G")
        self.grid_action.setCheckable(True)
        self.grid_action.setChecked(self.viewport.is_grid_visible())

    def _prompt_open(self) -> None:
        start = self._settings.get("last_open_path") or ""
        filename, _ = QFileDialog.getOpenFileName(self, "Open image", start, _IMAGE_FILTER)
        if filename:
            self.open_path(Path(filename))

    def _prompt_save(self) -> None:
        if self.viewport.image() is None:
            return
        suggested = ""
        if self._current_path is not None:
            suggested = str(self._current_path.with_name(f"{self._current_path.stem}_crop.png"))
        filename, _ = QFileDialog.getSaveFileName(self, "Save visible region", suggested, _IMAGE_FILTER)
        if filename:
            self.save_visible(Path(filename))

    def _apply_grayscale(self) -> None:
        try:
            self.viewport.apply_grayscale()
        except CropViewError as exc:
            _LOGGER.error("Grayscale conversion failed: %s", exc)
            QMessageBox.critical(self, "Grayscale", str(exc))

    def _handle_crop_changed(self, crop: Rect | None) -> None:
        self._update_title()
        if crop is None:
            self.statusBar().clearMessage()
        else:
            self.statusBar().showMessage(
                f"Crop {crop.width}×{crop.height} at ({crop.x}, {crop.y})"
            )

    def _update_title(self) -> None:
        name = self._current_path.name if self._current_path is not None else "No image"
        image = self.viewport.image()
        if image is None:
            self.setWindowTitle(f"cropview - {name}")
            return
        self.setWindowTitle(f"cropview - {name} ({image.width()}×{image.height()})")


__all__ = ["MainWindow"]
