"""Helpers for loading and saving Qt images with a Pillow fallback."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps
from PIL.ImageQt import ImageQt
from PySide6.QtGui import QImage, QImageReader, QImageWriter

from cropview.errors import ImageLoadError, ImageSaveError

_LOGGER = logging.getLogger(__name__)


def load_qimage(source: Path) -> Optional[QImage]:
    """Return a :class:`QImage` for *source*, or ``None`` if it cannot be decoded."""

    # Qt streams directly from the file and honours EXIF orientation; Pillow
    # only steps in for formats the installed Qt plugins cannot read.
    reader = QImageReader(str(source))
    disable_cache = getattr(reader, "setCacheEnabled", None)
    if callable(disable_cache):
        disable_cache(False)
    reader.setAutoTransform(True)
    image = reader.read()
    if not image.isNull():
        return image
    _LOGGER.debug("QImageReader failed for %s: %s", source, reader.errorString())
    return _load_with_pillow(source)


def open_image(source: Path) -> QImage:
    """Return the decoded image at *source*.

    Raises
    ------
    ImageLoadError
        If neither Qt nor Pillow can decode the file.
    """

    if not source.exists():
        raise ImageLoadError(f"Image not found: {source}")
    image = load_qimage(source)
    if image is None or image.isNull():
        raise ImageLoadError(f"Unable to decode image: {source}")
    return image


def save_qimage(image: QImage, destination: Path) -> None:
    """Write *image* to *destination*, picking the format from the suffix.

    Raises
    ------
    ImageSaveError
        If the image is null or the writer reports a failure.
    """

    if image.isNull():
        raise ImageSaveError(f"Refusing to save a null image to {destination}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    writer = QImageWriter(str(destination))
    if not writer.write(image):
        raise ImageSaveError(f"Failed to save {destination}: {writer.errorString()}")
    _LOGGER.debug("Saved %dx%d image to %s", image.width(), image.height(), destination)


def _load_with_pillow(source: Path) -> Optional[QImage]:
    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except (OSError, ValueError):
        _LOGGER.exception("Pillow failed to load image from %s", source)
        return None
    # ``ImageQt`` borrows Pillow's buffer; copy so the data outlives it.
    return QImage(qt_image).copy()


__all__ = ["load_qimage", "open_image", "save_qimage"]
