"""
Crop model for the crop viewport.

This module owns the optional crop rectangle in image space and keeps it
consistent with quarter-turn rotations and horizontal mirroring, without any
direct UI interaction.
"""

from __future__ import annotations

import logging

from cropview.config import MIN_CROP_SIZE
from cropview.errors import InvalidCropError
from .geometry import Point, Rect

_LOGGER = logging.getLogger(__name__)


class CropModel:
    """Holds the current crop; ``None`` stands for the whole image."""

    def __init__(self, min_size: int = MIN_CROP_SIZE) -> None:
        self._crop: Rect | None = None
        self._min_size = int(min_size)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def crop(self) -> Rect | None:
        """Return the active crop rectangle, or ``None`` for the whole image."""
        return self._crop

    @property
    def min_size(self) -> int:
        return self._min_size

    def has_crop(self) -> bool:
        return self._crop is not None

    def effective_rect(self, image_width: int, image_height: int) -> Rect:
        """Return the crop, or the full image rectangle when no crop is set."""
        if self._crop is None:
            return Rect(0, 0, int(image_width), int(image_height))
        return self._crop

    def offset(self) -> Point:
        """Return the crop's top-left corner, or the origin without a crop."""
        if self._crop is None:
            return Point(0, 0)
        return self._crop.top_left

    def min_dimension(self, image_width: int, image_height: int) -> int:
        """Return the shorter side of the effective region."""
        region = self.effective_rect(image_width, image_height)
        return min(region.width, region.height)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Clear the crop so the whole image is shown again."""
        self._crop = None

    def set_crop(self, rect: Rect, image_width: int, image_height: int) -> None:
        """Replace the crop with *rect* after validating it against the image.

        Raises
        ------
        InvalidCropError
            If *rect* is empty or reaches outside the image.
        """
        if rect.is_empty():
            raise InvalidCropError(f"Crop rectangle {rect.as_tuple()} is empty")
        if rect.x < 0 or rect.y < 0 or rect.right > image_width or rect.bottom > image_height:
            raise InvalidCropError(
                f"Crop rectangle {rect.as_tuple()} exceeds image bounds "
                f"{image_width}x{image_height}"
            )
        self._crop = rect

    def rotate_90(self, image_width: int, image_height: int) -> None:
        """Follow a clockwise quarter turn of the image.

        *image_width* and *image_height* describe the image after its pixels
        were rotated.
        """
        c = self._crop
        if c is None:
            return
        self._crop = Rect(image_width - c.y - c.height, c.x, c.height, c.width)

    def rotate_270(self, image_width: int, image_height: int) -> None:
        """Follow a counter-clockwise quarter turn of the image.

        *image_width* and *image_height* describe the image after its pixels
        were rotated.
        """
        c = self._crop
        if c is None:
            return
        self._crop = Rect(c.y, image_height - c.x - c.width, c.height, c.width)

    def mirror(self, image_width: int) -> None:
        """Flip the crop about the image's vertical centre line."""
        c = self._crop
        if c is None:
            return
        self._crop = Rect(image_width - c.x - c.width, c.y, c.width, c.height)

    def commit_selection(
        self,
        min_x: float,
        min_y: float,
        max_x: float,
        max_y: float,
        image_width: int,
        image_height: int,
    ) -> bool:
        """Replace the crop with a selection expressed in full-image coordinates.

        Parameters
        ----------
        min_x, min_y, max_x, max_y:
            Corners of the selection in image space.  When a crop is already
            active the caller has added its offset, so these always refer to
            the full image.
        image_width, image_height:
            Size of the full image used for clamping.

        Returns
        -------
        bool
            True when the crop was replaced, False when the clamped selection
            is smaller than the minimum crop size and was discarded.
        """
        left = max(0, min(image_width - 1, int(min_x)))
        top = max(0, min(image_height - 1, int(min_y)))
        right = int(max_x)
        bottom = int(max_y)

        width = min(image_width - left, right - left)
        height = min(image_height - top, bottom - top)

        if width < self._min_size or height < self._min_size:
            _LOGGER.debug(
                "Discarding %dx%d selection below the %dpx minimum",
                width,
                height,
                self._min_size,
            )
            return False

        self._crop = Rect(left, top, width, height)
        _LOGGER.debug("Committed crop %s", self._crop.as_tuple())
        return True


__all__ = ["CropModel"]
