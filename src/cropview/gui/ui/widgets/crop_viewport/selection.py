"""
Drag-to-crop selection state machine.

The controller tracks one press-to-release gesture in screen space and, when
the gesture is large enough, maps both corners into image space and commits
them to the :class:`~.model.CropModel`.  It has no Qt dependency; the widget
translates Qt mouse buttons into :class:`PointerButton` values.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

from cropview.config import DRAG_THRESHOLD_PX
from .geometry import FitResult, Point, Rect, clamp_to_rect, screen_to_image
from .model import CropModel

_LOGGER = logging.getLogger(__name__)


class PointerButton(enum.IntEnum):
    """Pointer buttons understood by the selection controller."""

    OTHER = 0
    PRIMARY = 1
    SECONDARY = 2
    MIDDLE = 4


class SelectionState(enum.Enum):
    """Lifecycle of a drag gesture."""

    IDLE = "idle"
    DRAGGING = "dragging"


class SelectionController:
    """Turns pointer gestures into committed crop rectangles."""

    def __init__(
        self,
        *,
        crop_model: CropModel,
        fit_provider: Callable[[], FitResult | None],
        image_size_provider: Callable[[], tuple[int, int] | None],
        on_request_update: Callable[[], None],
        on_crop_committed: Callable[[Rect], None],
        drag_threshold: int = DRAG_THRESHOLD_PX,
    ) -> None:
        """Initialize the selection controller.

        Parameters
        ----------
        crop_model:
            Model receiving committed selections.
        fit_provider:
            Callable returning the current fit of the visible region, or
            ``None`` when nothing can be displayed.
        image_size_provider:
            Callable returning ``(width, height)`` of the full image, or
            ``None`` when no image is loaded.
        on_request_update:
            Callback to request a repaint of the selection overlay.
        on_crop_committed:
            Callback invoked with the new crop after a successful commit.
        drag_threshold:
            Distance in screen pixels both axes must exceed to commit.
        """
        self._model = crop_model
        self._fit_provider = fit_provider
        self._image_size_provider = image_size_provider
        self._on_request_update = on_request_update
        self._on_crop_committed = on_crop_committed
        self._drag_threshold = int(drag_threshold)

        self._state = SelectionState.IDLE
        self._anchor = Point(0, 0)
        self._current: Point | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def state(self) -> SelectionState:
        return self._state

    def is_dragging(self) -> bool:
        return self._state is SelectionState.DRAGGING

    @property
    def anchor(self) -> Point:
        return self._anchor

    @property
    def current(self) -> Point | None:
        return self._current

    def selection_rect(self) -> Rect | None:
        """Return the screen-space drag rectangle while a drag is visible."""
        if not self.is_dragging() or self._current is None:
            return None
        return Rect.from_points(self._anchor, self._current)

    def cancel(self) -> None:
        """Abort any gesture in progress without committing."""
        was_visible = self.selection_rect() is not None
        self._reset()
        if was_visible:
            self._on_request_update()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------
    def handle_press(self, position: Point, button: PointerButton) -> bool:
        """Start a drag on a primary press; return True if one started."""
        if button != PointerButton.PRIMARY:
            self.cancel()
            return False

        image_size = self._image_size_provider()
        fit = self._fit_provider()
        if image_size is None or fit is None:
            self._reset()
            return False

        if self._model.min_dimension(*image_size) <= self._model.min_size:
            # Region already at the minimum; nothing smaller can be selected.
            self._reset()
            return False

        self._anchor = clamp_to_rect(position, fit.display_rect)
        self._current = None
        self._state = SelectionState.DRAGGING
        return True

    def handle_move(self, position: Point) -> None:
        """Track the pointer while dragging."""
        if not self.is_dragging():
            return
        fit = self._fit_provider()
        if fit is None:
            return
        self._current = clamp_to_rect(position, fit.display_rect)
        self._on_request_update()

    def handle_release(self, position: Point, button: PointerButton) -> bool:
        """Finish the drag; return True if a new crop was committed."""
        if button != PointerButton.PRIMARY:
            self.cancel()
            return False
        if not self.is_dragging():
            return False

        anchor, current = self._anchor, self._current
        self._reset()

        committed = False
        if current is not None and self._exceeds_threshold(anchor, current):
            committed = self._commit(anchor, current)
        else:
            _LOGGER.debug("Ignoring drag below the %dpx threshold", self._drag_threshold)
        self._on_request_update()
        return committed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _reset(self) -> None:
        self._state = SelectionState.IDLE
        self._current = None

    def _exceeds_threshold(self, anchor: Point, current: Point) -> bool:
        # Both axes must travel past the threshold; a long thin drag is rejected.
        return (
            abs(anchor.x - current.x) > self._drag_threshold
            and abs(anchor.y - current.y) > self._drag_threshold
        )

    def _commit(self, anchor: Point, current: Point) -> bool:
        fit = self._fit_provider()
        image_size = self._image_size_provider()
        if fit is None or image_size is None:
            return False

        offset = self._model.offset()
        first = screen_to_image(anchor, fit, offset)
        second = screen_to_image(current, fit, offset)
        image_width, image_height = image_size

        committed = self._model.commit_selection(
            min(first.x, second.x),
            min(first.y, second.y),
            max(first.x, second.x),
            max(first.y, second.y),
            image_width,
            image_height,
        )
        if committed and self._model.crop is not None:
            self._on_crop_committed(self._model.crop)
        return committed


__all__ = ["PointerButton", "SelectionController", "SelectionState"]
