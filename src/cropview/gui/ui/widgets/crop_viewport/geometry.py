"""
Viewport geometry for the crop viewport.

This module provides pure functions for fitting an image (or the active crop)
into the viewport and for converting between screen-space and image-space
coordinates.  Nothing here depends on Qt so the math can be exercised without
a display server.

## Coordinate Spaces

**Screen Space**: Pixel coordinates inside the widget.  Pointer events arrive
in this space and the fitted image is drawn into the *display rectangle*.

**Image Space**: Pixel coordinates inside the full source image.  Crops are
always stored in this space, relative to the full image rather than to the
currently visible crop.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """A 2D point in either screen or image space."""

    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle stored as ``(x, y, width, height)``."""

    x: int
    y: int
    width: int
    height: int

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def top_left(self) -> Point:
        return Point(self.x, self.y)

    def is_empty(self) -> bool:
        """Return True when the rectangle covers no area."""
        return self.width <= 0 or self.height <= 0

    def contains(self, point: Point) -> bool:
        """Return True if *point* lies inside the half-open rectangle."""
        return self.left <= point.x < self.right and self.top <= point.y < self.bottom

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_points(cls, first: Point, second: Point) -> Rect:
        """Return the normalised rectangle spanned by two corner points."""
        left = int(min(first.x, second.x))
        top = int(min(first.y, second.y))
        return cls(
            left,
            top,
            int(abs(first.x - second.x)),
            int(abs(first.y - second.y)),
        )


@dataclass(frozen=True)
class FitResult:
    """Fitted display rectangle and the screen-pixels-per-image-pixel scale."""

    display_rect: Rect
    scale: float


def fit_rectangle(
    source_width: int,
    source_height: int,
    viewport_width: int,
    viewport_height: int,
) -> FitResult | None:
    """Return the largest centred rectangle with the source aspect ratio.

    Parameters
    ----------
    source_width, source_height:
        Size of the region being displayed (the crop when one is active,
        otherwise the whole image).
    viewport_width, viewport_height:
        Size of the widget surface.

    Returns
    -------
    FitResult | None
        ``None`` when the source has no pixels or the viewport has no area.
        Callers are expected to skip painting and hit-testing in that case.
    """
    if source_width <= 0 or source_height <= 0:
        return None
    if viewport_width <= 0 or viewport_height <= 0:
        return None

    img_aspect = float(source_width) / float(source_height)
    ctrl_aspect = float(viewport_width) / float(viewport_height)

    if img_aspect > ctrl_aspect:
        width = int(viewport_width)
        height = int(viewport_width / img_aspect)
    else:
        height = int(viewport_height)
        width = int(viewport_height * img_aspect)

    display = Rect(
        (viewport_width - width) // 2,
        (viewport_height - height) // 2,
        width,
        height,
    )
    return FitResult(display, float(width) / float(source_width))


def clamp_to_rect(point: Point, rect: Rect) -> Point:
    """Clamp *point* into *rect*, including its right and bottom edges."""
    return Point(
        max(rect.left, min(rect.right, point.x)),
        max(rect.top, min(rect.bottom, point.y)),
    )


def screen_to_image(
    point: Point,
    fit: FitResult,
    crop_offset: Point = Point(0, 0),
) -> Point:
    """Map a screen-space point to full-image coordinates.

    The point is clamped to the display rectangle first so positions outside
    the visible image never extrapolate past its edges.  *crop_offset* is the
    top-left corner of the active crop, or the origin when no crop is set.
    """
    clamped = clamp_to_rect(point, fit.display_rect)
    inv_scale = 1.0 / fit.scale
    return Point(
        (clamped.x - fit.display_rect.x) * inv_scale + crop_offset.x,
        (clamped.y - fit.display_rect.y) * inv_scale + crop_offset.y,
    )


def image_to_screen(
    point: Point,
    fit: FitResult,
    crop_offset: Point = Point(0, 0),
) -> Point:
    """Inverse of :func:`screen_to_image` for points inside the visible region."""
    return Point(
        (point.x - crop_offset.x) * fit.scale + fit.display_rect.x,
        (point.y - crop_offset.y) * fit.scale + fit.display_rect.y,
    )


def overlay_bands(display_rect: Rect, selection: Rect) -> list[Rect]:
    """Return the parts of *display_rect* that lie outside *selection*.

    The result holds up to four non-overlapping bands (top, bottom, left,
    right) which together cover ``display_rect - selection``.
    """
    if display_rect.is_empty():
        return []

    left = max(display_rect.left, min(display_rect.right, selection.left))
    right = max(display_rect.left, min(display_rect.right, selection.right))
    top = max(display_rect.top, min(display_rect.bottom, selection.top))
    bottom = max(display_rect.top, min(display_rect.bottom, selection.bottom))

    bands = [
        Rect(display_rect.x, display_rect.y, display_rect.width, top - display_rect.top),
        Rect(display_rect.x, bottom, display_rect.width, display_rect.bottom - bottom),
        Rect(display_rect.x, top, left - display_rect.left, bottom - top),
        Rect(right, top, display_rect.right - right, bottom - top),
    ]
    return [band for band in bands if not band.is_empty()]


def grid_lines(display_rect: Rect) -> list[tuple[Point, Point]]:
    """Return composition guide lines through the centre and quarter marks."""
    left, top = display_rect.left, display_rect.top
    right, bottom = display_rect.right, display_rect.bottom
    width, height = display_rect.width, display_rect.height

    xs = (left + width // 4, left + width // 2, left + 3 * width // 4)
    ys = (top + height // 4, top + height // 2, top + 3 * height // 4)

    lines = [(Point(x, top), Point(x, bottom)) for x in xs]
    lines.extend((Point(left, y), Point(right, y)) for y in ys)
    return lines


__all__ = [
    "FitResult",
    "Point",
    "Rect",
    "clamp_to_rect",
    "fit_rectangle",
    "grid_lines",
    "image_to_screen",
    "overlay_bands",
    "screen_to_image",
]
