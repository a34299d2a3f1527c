"""Default configuration values for cropview."""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Crop selection
# ---------------------------------------------------------------------------

# Committed crops must be at least this many image pixels on both axes, and a
# drag is only started on regions strictly larger than this.
MIN_CROP_SIZE: Final[int] = 6

# Both axes of a drag must travel further than this many screen pixels before
# the release commits a selection.
DRAG_THRESHOLD_PX: Final[int] = 20

# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

# Sources smaller than this on both axes are drawn with nearest-neighbour
# sampling.
FAST_QUALITY_MAX_SOURCE: Final[int] = 512

# Quiet period after the last resize event before a full-quality repaint.
RESIZE_SETTLE_MS: Final[int] = 300

OVERLAY_ALPHA: Final[int] = 155
GRID_ALPHA: Final[int] = 155
GRID_GRAY: Final[int] = 155
DEFAULT_BACKGROUND: Final[str] = "#000000"

# ---------------------------------------------------------------------------
# Pixel transforms
# ---------------------------------------------------------------------------

# ITU-R BT.601 luma weights in (R, G, B) order.
LUMA_WEIGHTS: Final[tuple[float, float, float]] = (0.299, 0.587, 0.114)
