"""
Cached, viewport-sized rendering of the visible image region.

Scaling a large photo with smooth filtering is far too slow to repeat on every
paint event, so the widget composites the fitted image once into a bitmap the
size of the viewport and blits that bitmap until the image, the crop or the
viewport size changes.
"""

from __future__ import annotations

import enum
import logging

from PySide6.QtCore import QRect, QSize, Qt
from PySide6.QtGui import QColor, QImage, QPainter

from cropview.config import DEFAULT_BACKGROUND, FAST_QUALITY_MAX_SOURCE
from .geometry import Rect, fit_rectangle

_LOGGER = logging.getLogger(__name__)

CacheKey = tuple[int, tuple[int, int, int, int] | None, tuple[int, int]]


class RenderQuality(enum.Enum):
    """Interpolation used when compositing the image into the cache."""

    FAST = "fast"
    HIGH = "high"


def select_quality(resizing: bool, source_width: int, source_height: int) -> RenderQuality:
    """Pick the interpolation quality for a source region.

    Nearest-neighbour sampling is used while the viewport is being resized and
    for sources below :data:`FAST_QUALITY_MAX_SOURCE` on both axes; everything
    else gets smooth filtering.
    """
    if resizing:
        return RenderQuality.FAST
    if source_width < FAST_QUALITY_MAX_SOURCE and source_height < FAST_QUALITY_MAX_SOURCE:
        return RenderQuality.FAST
    return RenderQuality.HIGH


class RenderCache:
    """Owns the composited viewport bitmap and decides when to rebuild it."""

    def __init__(self, background: QColor | str = DEFAULT_BACKGROUND) -> None:
        self._background = QColor(background)
        self._bitmap: QImage | None = None
        self._key: CacheKey | None = None
        self._last_quality: RenderQuality | None = None

    @property
    def last_quality(self) -> RenderQuality | None:
        """Return the quality used for the most recent rebuild."""
        return self._last_quality

    def background(self) -> QColor:
        return QColor(self._background)

    def set_background(self, colour: QColor | str) -> None:
        colour = QColor(colour)
        if colour == self._background:
            return
        self._background = colour
        self.invalidate()

    def is_valid(self) -> bool:
        return self._bitmap is not None

    def invalidate(self) -> None:
        """Drop the cached bitmap so the next request rebuilds it."""
        self._bitmap = None
        self._key = None

    def ensure_fresh(
        self,
        image: QImage,
        crop: Rect | None,
        viewport_size: QSize,
        *,
        resizing: bool = False,
    ) -> QImage:
        """Return a bitmap of *viewport_size* showing *image* fitted inside it.

        Parameters
        ----------
        image:
            Full source image.
        crop:
            Sub-rectangle of *image* to display, or ``None`` for all of it.
        viewport_size:
            Size of the widget surface.
        resizing:
            True while a resize burst is in progress; forces fast sampling.
        """
        key: CacheKey = (
            int(image.cacheKey()),
            crop.as_tuple() if crop is not None else None,
            (viewport_size.width(), viewport_size.height()),
        )
        if self._bitmap is not None and self._key == key:
            return self._bitmap

        self._bitmap = self._rebuild(image, crop, viewport_size, resizing)
        self._key = key
        return self._bitmap

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _rebuild(
        self,
        image: QImage,
        crop: Rect | None,
        viewport_size: QSize,
        resizing: bool,
    ) -> QImage:
        bitmap = QImage(viewport_size, QImage.Format.Format_RGB32)
        bitmap.fill(self._background)

        source = crop if crop is not None else Rect(0, 0, image.width(), image.height())
        fit = fit_rectangle(
            source.width,
            source.height,
            viewport_size.width(),
            viewport_size.height(),
        )
        if fit is None or image.isNull():
            self._last_quality = None
            return bitmap

        quality = select_quality(resizing, source.width, source.height)
        smooth = quality is RenderQuality.HIGH

        painter = QPainter(bitmap)
        try:
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, smooth)
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, smooth)
            target = fit.display_rect
            painter.drawImage(
                QRect(target.x, target.y, target.width, target.height),
                image,
                QRect(source.x, source.y, source.width, source.height),
            )
        finally:
            painter.end()

        self._last_quality = quality
        _LOGGER.debug(
            "Rebuilt %dx%d render cache (%s quality)",
            viewport_size.width(),
            viewport_size.height(),
            quality.value,
        )
        return bitmap


__all__ = ["RenderCache", "RenderQuality", "select_quality"]
