"""
Crop viewport module.

This package provides the fitted image viewport with drag-to-crop selection,
split into pure geometry, crop and selection logic plus the Qt-facing render
cache, resize debouncer and widget.
"""

from .geometry import FitResult, Point, Rect, fit_rectangle, screen_to_image
from .model import CropModel
from .render_cache import RenderCache, RenderQuality, select_quality
from .resize_debouncer import ResizeDebouncer
from .selection import PointerButton, SelectionController, SelectionState
from .widget import CropViewport

__all__ = [
    "CropModel",
    "CropViewport",
    "FitResult",
    "Point",
    "PointerButton",
    "Rect",
    "RenderCache",
    "RenderQuality",
    "ResizeDebouncer",
    "SelectionController",
    "SelectionState",
    "fit_rectangle",
    "screen_to_image",
    "select_quality",
]
