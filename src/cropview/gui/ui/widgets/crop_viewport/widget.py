"""
Image viewport with drag-to-crop selection.

The widget fits the image (or the active crop) into its surface while
preserving the aspect ratio, lets the user drag out a new crop with the left
mouse button and applies quarter-turn rotations, mirroring and grayscale
conversion.  Scaling is cached in a viewport-sized bitmap that is only
rebuilt when the image, the crop or the widget size changes.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QPoint, QRect, QSize, Qt, Signal
from PySide6.QtGui import (
    QColor,
    QImage,
    QMouseEvent,
    QPainter,
    QPaintEvent,
    QPen,
    QResizeEvent,
    QTransform,
)
from PySide6.QtWidgets import QWidget

from cropview.config import (
    DEFAULT_BACKGROUND,
    GRID_ALPHA,
    GRID_GRAY,
    OVERLAY_ALPHA,
    RESIZE_SETTLE_MS,
)
from cropview.core.filters.grayscale import grayscale_qimage
from cropview.settings.manager import SettingsManager
from .geometry import FitResult, Point, Rect, fit_rectangle, grid_lines, overlay_bands
from .model import CropModel
from .render_cache import RenderCache, RenderQuality
from .resize_debouncer import ResizeDebouncer
from .selection import PointerButton, SelectionController

_LOGGER = logging.getLogger(__name__)

_BUTTONS = {
    Qt.MouseButton.LeftButton: PointerButton.PRIMARY,
    Qt.MouseButton.RightButton: PointerButton.SECONDARY,
    Qt.MouseButton.MiddleButton: PointerButton.MIDDLE,
}

# Formats QPainter cannot draw into; materialised regions fall back to ARGB32.
_UNPAINTABLE_FORMATS = {
    QImage.Format.Format_Invalid,
    QImage.Format.Format_Mono,
    QImage.Format.Format_MonoLSB,
    QImage.Format.Format_Indexed8,
}


def _pointer_button(button: Qt.MouseButton) -> PointerButton:
    return _BUTTONS.get(button, PointerButton.OTHER)


def _event_point(event: QMouseEvent) -> Point:
    pos = event.position()
    return Point(int(pos.x()), int(pos.y()))


def _qrect(rect: Rect) -> QRect:
    return QRect(rect.x, rect.y, rect.width, rect.height)


class CropViewport(QWidget):
    """Displays an image fitted to the widget and lets the user crop it."""

    cropChanged = Signal(object)
    imageChanged = Signal()

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        settings: SettingsManager | None = None,
    ) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)
        self.setMinimumSize(QSize(64, 64))

        self._image: QImage | None = None
        self._grid_visible: bool = False
        self._overlay_colour = QColor(0, 0, 0, OVERLAY_ALPHA)
        self._grid_pen = QPen(QColor(GRID_GRAY, GRID_GRAY, GRID_GRAY, GRID_ALPHA), 1)

        self._crop_model = CropModel()
        self._render_cache = RenderCache(DEFAULT_BACKGROUND)
        self._resize_debouncer = ResizeDebouncer(
            on_settled=self._handle_resize_settled,
            interval_ms=RESIZE_SETTLE_MS,
            timer_parent=self,
        )
        self._selection = SelectionController(
            crop_model=self._crop_model,
            fit_provider=self.fit_result,
            image_size_provider=self._image_size,
            on_request_update=self.update,
            on_crop_committed=self._handle_crop_committed,
        )

        self._settings = settings
        if settings is not None:
            self._apply_settings()
            settings.settingsChanged.connect(self._handle_settings_changed)

    # ------------------------------------------------------------------
    # Image management
    # ------------------------------------------------------------------
    def image(self) -> QImage | None:
        """Return the image currently displayed."""
        return self._image

    def set_image(self, image: QImage | None, *, keep_crop: bool = False) -> None:
        """Display *image*.

        The crop is cleared unless *keep_crop* is set and the current crop
        still fits inside the new image.
        """
        if image is not None and image.isNull():
            image = None
        if image is self._image:
            return

        self._image = image
        self._selection.cancel()
        crop = self._crop_model.crop
        if crop is not None and not (
            keep_crop
            and image is not None
            and crop.right <= image.width()
            and crop.bottom <= image.height()
        ):
            self._crop_model.reset()
            self.cropChanged.emit(None)
        self._invalidate_both()
        self.imageChanged.emit()

    def visible_region(self) -> QImage:
        """Return the crop (or the whole image) as a new standalone image."""
        if self._image is None:
            return QImage()
        source = self._crop_model.effective_rect(self._image.width(), self._image.height())
        fmt = self._image.format()
        if fmt in _UNPAINTABLE_FORMATS:
            fmt = QImage.Format.Format_ARGB32

        region = QImage(source.width, source.height, fmt)
        region.fill(Qt.GlobalColor.transparent)
        painter = QPainter(region)
        try:
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
            painter.drawImage(QRect(0, 0, source.width, source.height), self._image, _qrect(source))
        finally:
            painter.end()
        return region

    # ------------------------------------------------------------------
    # Crop and transforms
    # ------------------------------------------------------------------
    def crop(self) -> Rect | None:
        """Return the active crop in image coordinates, or ``None``."""
        return self._crop_model.crop

    def set_crop(self, rect: Rect) -> None:
        """Replace the crop programmatically; raises ``InvalidCropError``."""
        if self._image is None:
            return
        self._crop_model.set_crop(rect, self._image.width(), self._image.height())
        self._selection.cancel()
        self._invalidate_both()
        self.cropChanged.emit(self._crop_model.crop)

    def reset_crop(self) -> None:
        """Show the whole image again."""
        self._selection.cancel()
        had_crop = self._crop_model.has_crop()
        self._crop_model.reset()
        self._invalidate_both()
        if had_crop:
            self.cropChanged.emit(None)

    def rotate_90(self) -> None:
        """Rotate the image a quarter turn clockwise, carrying the crop along."""
        self._apply_transform(QTransform().rotate(90), self._crop_model.rotate_90)

    def rotate_270(self) -> None:
        """Rotate the image a quarter turn counter-clockwise, carrying the crop along."""
        self._apply_transform(QTransform().rotate(270), self._crop_model.rotate_270)

    def mirror(self) -> None:
        """Flip the image horizontally, carrying the crop along."""
        if self._image is None:
            return
        self._selection.cancel()
        self._image = self._image.mirrored(True, False)
        self._crop_model.mirror(self._image.width())
        self._after_transform()

    def apply_grayscale(self) -> None:
        """Convert the image to grayscale in place.

        Raises
        ------
        PixelBufferError
            If the pixel memory cannot be accessed.
        """
        if self._image is None:
            return
        self._image = grayscale_qimage(self._image)
        self._invalidate_both()
        self.imageChanged.emit()

    # ------------------------------------------------------------------
    # Display state
    # ------------------------------------------------------------------
    def is_grid_visible(self) -> bool:
        return self._grid_visible

    def set_grid_visible(self, visible: bool) -> None:
        visible = bool(visible)
        if visible == self._grid_visible:
            return
        self._grid_visible = visible
        self.update()

    def is_resizing(self) -> bool:
        return self._resize_debouncer.is_resizing()

    def is_selecting(self) -> bool:
        return self._selection.is_dragging()

    def selection_rect(self) -> Rect | None:
        """Return the screen-space drag rectangle while a drag is visible."""
        return self._selection.selection_rect()

    def last_render_quality(self) -> RenderQuality | None:
        return self._render_cache.last_quality

    def fit_result(self) -> FitResult | None:
        """Return the fit of the visible region inside the widget."""
        if self._image is None:
            return None
        region = self._crop_model.effective_rect(self._image.width(), self._image.height())
        return fit_rectangle(region.width, region.height, self.width(), self.height())

    def render_bitmap(self) -> QImage | None:
        """Return the cached composited bitmap, rebuilding it if stale."""
        if self._image is None:
            return None
        return self._render_cache.ensure_fresh(
            self._image,
            self._crop_model.crop,
            self.size(),
            resizing=self._resize_debouncer.is_resizing(),
        )

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def resizeEvent(self, event: QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._resize_debouncer.notify_resize()
        self.update()

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if self._selection.handle_press(_event_point(event), _pointer_button(event.button())):
            self.setCursor(Qt.CursorShape.CrossCursor)
        else:
            self.unsetCursor()
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self._selection.handle_move(_event_point(event))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        self._selection.handle_release(_event_point(event), _pointer_button(event.button()))
        self.unsetCursor()
        event.accept()

    def paintEvent(self, event: QPaintEvent) -> None:  # type: ignore[override]
        painter = QPainter(self)
        try:
            bitmap = self.render_bitmap()
            if bitmap is None:
                painter.fillRect(self.rect(), self._render_cache.background())
                return
            painter.drawImage(QPoint(0, 0), bitmap)

            fit = self.fit_result()
            if fit is None:
                return
            if self._grid_visible:
                self._paint_grid(painter, fit.display_rect)
            selection = self._selection.selection_rect()
            if selection is not None:
                for band in overlay_bands(fit.display_rect, selection):
                    painter.fillRect(_qrect(band), self._overlay_colour)
        finally:
            painter.end()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _image_size(self) -> tuple[int, int] | None:
        if self._image is None:
            return None
        return (self._image.width(), self._image.height())

    def _apply_transform(self, transform: QTransform, update_crop) -> None:
        if self._image is None:
            return
        self._selection.cancel()
        self._image = self._image.transformed(transform)
        update_crop(self._image.width(), self._image.height())
        self._after_transform()

    def _after_transform(self) -> None:
        self._invalidate_both()
        self.imageChanged.emit()
        if self._crop_model.has_crop():
            self.cropChanged.emit(self._crop_model.crop)

    def _invalidate_both(self) -> None:
        self._render_cache.invalidate()
        self.update()

    def _paint_grid(self, painter: QPainter, display_rect: Rect) -> None:
        painter.setPen(self._grid_pen)
        for start, end in grid_lines(display_rect):
            painter.drawLine(int(start.x), int(start.y), int(end.x), int(end.y))

    def _handle_crop_committed(self, rect: Rect) -> None:
        self._render_cache.invalidate()
        self.cropChanged.emit(rect)

    def _handle_resize_settled(self) -> None:
        self._invalidate_both()

    def _apply_settings(self) -> None:
        if self._settings is None:
            return
        viewer = self._settings.viewer()
        self._resize_debouncer.set_interval(viewer.resize_settle_ms)
        self._render_cache.set_background(viewer.background)
        self._overlay_colour.setAlpha(viewer.overlay_alpha)
        self.set_grid_visible(viewer.show_grid)
        self.update()

    def _handle_settings_changed(self, key: str, _value: object) -> None:
        if key == "viewer" or key.startswith("viewer."):
            self._apply_settings()


__all__ = ["CropViewport"]
