"""Pixel-level image filters."""

from .grayscale import PixelBufferView, apply_grayscale, grayscale_qimage, qimage_buffer_view

__all__ = ["PixelBufferView", "apply_grayscale", "grayscale_qimage", "qimage_buffer_view"]
