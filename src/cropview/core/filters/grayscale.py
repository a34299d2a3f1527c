"""In-place grayscale conversion for packed 8-bit pixel buffers.

The conversion runs on an explicit :class:`PixelBufferView` describing the
row stride, the bytes per pixel and the order of the first three channels, so
padded rows and extra channels (alpha) are handled without assumptions about
the native image layout.  :func:`grayscale_qimage` adapts Qt images to that
view.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any

import numpy as np
from PySide6.QtGui import QImage

from cropview.config import LUMA_WEIGHTS
from cropview.errors import PixelBufferError

_LOGGER = logging.getLogger(__name__)

# Rows converted per vectorised batch; bounds the float64 scratch memory.
_ROWS_PER_BATCH = 256

_CHANNEL_ORDERS = ("BGR", "RGB")


@dataclass(frozen=True)
class PixelBufferView:
    """Checked description of a writable packed pixel buffer.

    Parameters
    ----------
    buffer:
        Object exposing the buffer protocol (``bytearray``, ``memoryview``,
        a Qt ``bits()`` pointer, ...).
    width, height:
        Image dimensions in pixels.
    stride:
        Number of bytes between the starts of consecutive rows.  May exceed
        ``width * bytes_per_pixel`` when rows are padded.
    bytes_per_pixel:
        Bytes per pixel; at least three.
    channel_order:
        Order of the first three channels, ``"BGR"`` or ``"RGB"``.
    """

    buffer: Any
    width: int
    height: int
    stride: int
    bytes_per_pixel: int
    channel_order: str = "BGR"

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise PixelBufferError(f"Invalid dimensions {self.width}x{self.height}")
        if self.bytes_per_pixel < 3:
            raise PixelBufferError(
                f"At least 3 bytes per pixel required, got {self.bytes_per_pixel}"
            )
        if self.stride < self.width * self.bytes_per_pixel:
            raise PixelBufferError(
                f"Stride {self.stride} is shorter than a row of "
                f"{self.width * self.bytes_per_pixel} bytes"
            )
        if self.channel_order not in _CHANNEL_ORDERS:
            raise PixelBufferError(f"Unsupported channel order {self.channel_order!r}")

    @property
    def required_bytes(self) -> int:
        """Return the minimum buffer length covering every pixel."""
        if self.width == 0 or self.height == 0:
            return 0
        return self.stride * (self.height - 1) + self.width * self.bytes_per_pixel

    def as_array(self) -> np.ndarray:
        """Return a writable ``(height, width, bytes_per_pixel)`` uint8 view.

        Raises
        ------
        PixelBufferError
            If the buffer is too small, read-only or does not support the
            buffer protocol.
        """
        required = self.required_bytes
        try:
            flat = np.frombuffer(self.buffer, dtype=np.uint8)
        except (BufferError, TypeError, ValueError) as exc:
            raise PixelBufferError(f"Pixel buffer is not accessible: {exc}") from exc
        if flat.size < required:
            raise PixelBufferError(
                f"Pixel buffer holds {flat.size} bytes, {required} required"
            )
        if not flat.flags.writeable:
            raise PixelBufferError("Pixel buffer is read-only")
        return np.lib.stride_tricks.as_strided(
            flat,
            shape=(self.height, self.width, self.bytes_per_pixel),
            strides=(self.stride, self.bytes_per_pixel, 1),
        )


def apply_grayscale(view: PixelBufferView) -> None:
    """Replace the colour channels of every pixel in *view* with its luma.

    ``gray = round(0.299 * R + 0.587 * G + 0.114 * B)`` is written to the three
    colour channels; any further channels and the row padding are left
    untouched.  Applying the conversion twice yields the same buffer.
    """
    if view.width == 0 or view.height == 0:
        return
    pixels = view.as_array()

    if view.channel_order == "BGR":
        r_index, b_index = 2, 0
    else:
        r_index, b_index = 0, 2
    weight_r, weight_g, weight_b = LUMA_WEIGHTS

    for start in range(0, view.height, _ROWS_PER_BATCH):
        band = pixels[start : start + _ROWS_PER_BATCH]
        colour = band[..., :3].astype(np.float64)
        luma = (
            colour[..., r_index] * weight_r
            + colour[..., 1] * weight_g
            + colour[..., b_index] * weight_b
        )
        gray = np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)
        band[..., 0] = gray
        band[..., 1] = gray
        band[..., 2] = gray


def _qimage_layouts() -> dict[QImage.Format, tuple[int, str]]:
    layouts: dict[QImage.Format, tuple[int, str]] = {
        QImage.Format.Format_RGB888: (3, "RGB"),
        QImage.Format.Format_BGR888: (3, "BGR"),
        QImage.Format.Format_RGBA8888: (4, "RGB"),
        QImage.Format.Format_RGBX8888: (4, "RGB"),
        QImage.Format.Format_RGBA8888_Premultiplied: (4, "RGB"),
    }
    # 0xAARRGGBB words are laid out as B, G, R, A only on little-endian hosts.
    if sys.byteorder == "little":
        for fmt in (
            QImage.Format.Format_RGB32,
            QImage.Format.Format_ARGB32,
            QImage.Format.Format_ARGB32_Premultiplied,
        ):
            layouts[fmt] = (4, "BGR")
    return layouts


def qimage_buffer_view(image: QImage) -> PixelBufferView:
    """Return a :class:`PixelBufferView` over the pixels of *image*.

    Raises
    ------
    PixelBufferError
        If the image is null, its format has no 8-bit RGB layout or its
        pixel memory cannot be accessed.
    """
    if image.isNull():
        raise PixelBufferError("Cannot access pixels of a null image")
    layout = _qimage_layouts().get(image.format())
    if layout is None:
        raise PixelBufferError(f"Unsupported pixel format {image.format()!r}")
    bytes_per_pixel, order = layout

    ptr = image.bits()
    if ptr is None:
        raise PixelBufferError("Image pixel memory is not accessible")
    byte_count = image.sizeInBytes()
    if hasattr(ptr, "setsize"):
        ptr.setsize(byte_count)

    return PixelBufferView(
        buffer=ptr,
        width=image.width(),
        height=image.height(),
        stride=image.bytesPerLine(),
        bytes_per_pixel=bytes_per_pixel,
        channel_order=order,
    )


def grayscale_qimage(image: QImage) -> QImage:
    """Convert *image* to grayscale in place and return it.

    Images in a format without an 8-bit RGB layout are first converted to a
    32-bit format; the converted copy is modified and returned in that case.
    """
    if image.format() not in _qimage_layouts():
        target = (
            QImage.Format.Format_ARGB32
            if sys.byteorder == "little"
            else QImage.Format.Format_RGBA8888
        )
        _LOGGER.debug("Converting %r to %r before grayscale", image.format(), target)
        image = image.convertToFormat(target)

    apply_grayscale(qimage_buffer_view(image))
    return image


__all__ = [
    "PixelBufferView",
    "apply_grayscale",
    "grayscale_qimage",
    "qimage_buffer_view",
]
