"""Integration tests for the CropViewport widget."""

import time

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for GUI tests", exc_type=ImportError)

from PySide6.QtCore import QEvent, QPointF, QSize, Qt
from PySide6.QtGui import QColor, QImage, QMouseEvent, QResizeEvent
from PySide6.QtWidgets import QApplication

from cropview.gui.ui.widgets.crop_viewport import CropViewport, Rect, RenderQuality
from cropview.settings import SettingsManager


def _solid(width: int, height: int, colour: QColor = QColor(255, 255, 255)) -> QImage:
    image = QImage(width, height, QImage.Format.Format_RGB32)
    image.fill(colour)
    return image


def _mouse(kind: QEvent.Type, x: float, y: float, button=Qt.MouseButton.LeftButton) -> QMouseEvent:
    buttons = Qt.MouseButton.NoButton if kind == QEvent.Type.MouseButtonRelease else button
    if kind == QEvent.Type.MouseMove:
        button = Qt.MouseButton.NoButton
    pos = QPointF(x, y)
    return QMouseEvent(kind, pos, pos, button, buttons, Qt.KeyboardModifier.NoModifier)


def _drag(widget: CropViewport, start, end, button=Qt.MouseButton.LeftButton) -> None:
    widget.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, *start, button=button))
    widget.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, *end, button=button))
    widget.mouseReleaseEvent(_mouse(QEvent.Type.MouseButtonRelease, *end, button=button))


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        QApplication.processEvents()
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def viewport(qapp):
    widget = CropViewport()
    widget.resize(1000, 500)
    widget.set_image(_solid(1000, 500))
    yield widget
    widget.deleteLater()


@pytest.fixture
def crop_events(viewport):
    events = []
    viewport.cropChanged.connect(events.append)
    return events


def test_drag_commits_crop(viewport, crop_events):
    _drag(viewport, (100, 100), (300, 250))
    assert viewport.crop() == Rect(100, 100, 200, 150)
    assert crop_events == [Rect(100, 100, 200, 150)]
    assert not viewport.is_selecting()
    assert viewport.selection_rect() is None


def test_thin_drag_is_discarded(viewport, crop_events):
    _drag(viewport, (100, 100), (110, 300))
    assert viewport.crop() is None
    assert crop_events == []


def test_right_button_never_selects(viewport):
    _drag(viewport, (100, 100), (300, 250), button=Qt.MouseButton.RightButton)
    assert viewport.crop() is None


def test_selection_rect_visible_while_dragging(viewport):
    viewport.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 100, 100))
    viewport.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 300, 250))
    assert viewport.is_selecting()
    assert viewport.selection_rect() == Rect(100, 100, 200, 150)


def test_overlay_darkens_outside_selection(viewport):
    viewport.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, 100, 100))
    viewport.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, 300, 250))
    frame = viewport.grab().toImage()
    assert frame.pixelColor(200, 200).red() == 255
    assert frame.pixelColor(20, 20).red() < 150


def test_rotate_carries_crop(viewport, crop_events):
    viewport.set_crop(Rect(100, 100, 200, 150))

    viewport.rotate_90()
    image = viewport.image()
    assert (image.width(), image.height()) == (500, 1000)
    assert viewport.crop() == Rect(250, 100, 150, 200)

    viewport.rotate_270()
    image = viewport.image()
    assert (image.width(), image.height()) == (1000, 500)
    assert viewport.crop() == Rect(100, 100, 200, 150)
    assert crop_events[-1] == Rect(100, 100, 200, 150)


def test_rotate_90_turns_pixels_clockwise(viewport):
    image = _solid(1000, 500)
    image.setPixelColor(0, 0, QColor(255, 0, 0))
    viewport.set_image(image)
    viewport.rotate_90()
    assert viewport.image().pixelColor(499, 0) == QColor(255, 0, 0)


def test_mirror_flips_pixels_and_crop(viewport):
    image = _solid(1000, 500)
    image.setPixelColor(0, 0, QColor(255, 0, 0))
    viewport.set_image(image)
    viewport.set_crop(Rect(100, 100, 200, 150))
    viewport.mirror()
    assert viewport.image().pixelColor(999, 0) == QColor(255, 0, 0)
    assert viewport.crop() == Rect(700, 100, 200, 150)


def test_reset_crop_emits_once(viewport, crop_events):
    viewport.reset_crop()
    assert crop_events == []
    viewport.set_crop(Rect(10, 10, 50, 50))
    viewport.reset_crop()
    assert viewport.crop() is None
    assert crop_events == [Rect(10, 10, 50, 50), None]


def test_visible_region_copies_crop(viewport):
    image = _solid(1000, 500)
    image.setPixelColor(150, 120, QColor(0, 0, 255))
    viewport.set_image(image)
    viewport.set_crop(Rect(100, 100, 200, 150))
    region = viewport.visible_region()
    assert region.size() == QSize(200, 150)
    assert region.pixelColor(50, 20) == QColor(0, 0, 255)
    assert region.pixelColor(0, 0) == QColor(255, 255, 255)


def test_visible_region_without_crop_is_whole_image(viewport):
    assert viewport.visible_region().size() == QSize(1000, 500)


def test_apply_grayscale(viewport):
    viewport.set_image(_solid(40, 20, QColor(30, 20, 10)))
    viewport.apply_grayscale()
    assert viewport.image().pixelColor(5, 5) == QColor(22, 22, 22)


def test_set_image_clears_crop_unless_kept(viewport, crop_events):
    viewport.set_crop(Rect(10, 10, 50, 50))
    viewport.set_image(_solid(800, 400), keep_crop=True)
    assert viewport.crop() == Rect(10, 10, 50, 50)

    viewport.set_image(_solid(40, 40), keep_crop=True)
    assert viewport.crop() is None

    viewport.set_crop(Rect(1, 1, 20, 20))
    viewport.set_image(_solid(40, 40))
    assert viewport.crop() is None
    assert crop_events[-1] is None


def test_operations_without_image_are_noops(qapp):
    widget = CropViewport()
    widget.resize(300, 200)
    widget.rotate_90()
    widget.rotate_270()
    widget.mirror()
    widget.apply_grayscale()
    widget.set_crop(Rect(0, 0, 10, 10))
    _drag(widget, (10, 10), (200, 150))
    assert widget.image() is None
    assert widget.crop() is None
    assert widget.visible_region().isNull()
    assert widget.render_bitmap() is None
    widget.deleteLater()


def test_render_quality_drops_while_resizing(qapp, tmp_path):
    settings = SettingsManager(tmp_path / "settings.json")
    settings.set("viewer.resize_settle_ms", 20)
    widget = CropViewport(settings=settings)
    widget.resize(1000, 800)
    widget.set_image(_solid(1000, 800))

    assert _wait_until(lambda: not widget.is_resizing())
    widget.render_bitmap()
    assert widget.last_render_quality() is RenderQuality.HIGH

    widget.resize(900, 700)
    QApplication.sendEvent(widget, QResizeEvent(QSize(900, 700), QSize(1000, 800)))
    assert widget.is_resizing()
    widget.render_bitmap()
    assert widget.last_render_quality() is RenderQuality.FAST

    assert _wait_until(lambda: not widget.is_resizing())
    widget.render_bitmap()
    assert widget.last_render_quality() is RenderQuality.HIGH
    widget.deleteLater()


def test_settings_drive_grid_visibility(qapp, tmp_path):
    settings = SettingsManager(tmp_path / "settings.json")
    widget = CropViewport(settings=settings)
    assert not widget.is_grid_visible()
    settings.set("viewer.show_grid", True)
    assert widget.is_grid_visible()
    widget.deleteLater()
