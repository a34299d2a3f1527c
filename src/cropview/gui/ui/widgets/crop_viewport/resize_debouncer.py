"""
Resize settle timer for the crop viewport.

This module tracks whether a burst of resize events is in progress and fires
a single callback once the burst has been quiet for the settle interval.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer

from cropview.config import RESIZE_SETTLE_MS

_LOGGER = logging.getLogger(__name__)


class ResizeDebouncer:
    """Cancel-and-reschedule timer that reports when resizing has settled."""

    def __init__(
        self,
        *,
        on_settled: Callable[[], None],
        interval_ms: int = RESIZE_SETTLE_MS,
        timer_parent: QObject | None = None,
    ) -> None:
        """Initialize the debouncer.

        Parameters
        ----------
        on_settled:
            Callback run once the resize burst has been quiet for the interval.
        interval_ms:
            Quiet period in milliseconds.
        timer_parent:
            Parent QObject for the timer (optional).
        """
        self._on_settled = on_settled
        self._resizing: bool = False

        self._timer = QTimer(timer_parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(interval_ms)))
        self._timer.timeout.connect(self._handle_timeout)

    def is_resizing(self) -> bool:
        """Return True while a resize burst is in progress."""
        return self._resizing

    def interval(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int) -> None:
        self._timer.setInterval(max(0, int(interval_ms)))

    def is_pending(self) -> bool:
        """Return True if the settle callback is scheduled."""
        return self._timer.isActive()

    def notify_resize(self) -> None:
        """Record a resize event and restart the quiet period."""
        self._resizing = True
        self._timer.stop()
        self._timer.start()

    def cancel(self) -> None:
        """Stop the pending settle callback without running it."""
        self._timer.stop()
        self._resizing = False

    def _handle_timeout(self) -> None:
        self._timer.stop()
        self._resizing = False
        _LOGGER.debug("Resize settled after %d ms", self._timer.interval())
        self._on_settled()


__all__ = ["ResizeDebouncer"]
