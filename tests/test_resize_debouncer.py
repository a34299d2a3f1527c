"""Tests for the resize settle timer."""

import time

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for debouncer tests", exc_type=ImportError)

from cropview.gui.ui.widgets.crop_viewport.resize_debouncer import ResizeDebouncer


def _wait_until(qapp, predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        qapp.processEvents()
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_notify_marks_resizing(qapp):
    debouncer = ResizeDebouncer(on_settled=lambda: None, interval_ms=1000)
    assert not debouncer.is_resizing()
    debouncer.notify_resize()
    assert debouncer.is_resizing()
    assert debouncer.is_pending()
    debouncer.cancel()


def test_settle_callback_fires_once(qapp):
    calls = []
    debouncer = ResizeDebouncer(on_settled=lambda: calls.append(True), interval_ms=20)
    for _ in range(5):
        debouncer.notify_resize()

    assert _wait_until(qapp, lambda: calls)
    assert calls == [True]
    assert not debouncer.is_resizing()
    assert not debouncer.is_pending()


def test_each_notification_restarts_quiet_period(qapp):
    calls = []
    debouncer = ResizeDebouncer(on_settled=lambda: calls.append(True), interval_ms=400)
    debouncer.notify_resize()
    time.sleep(0.25)
    qapp.processEvents()
    debouncer.notify_resize()
    time.sleep(0.25)
    qapp.processEvents()
    assert calls == []
    assert debouncer.is_resizing()
    assert _wait_until(qapp, lambda: calls)


def test_cancel_prevents_callback(qapp):
    calls = []
    debouncer = ResizeDebouncer(on_settled=lambda: calls.append(True), interval_ms=10)
    debouncer.notify_resize()
    debouncer.cancel()
    assert not debouncer.is_resizing()
    assert not _wait_until(qapp, lambda: calls, timeout=0.1)


def test_set_interval_clamps_negative(qapp):
    debouncer = ResizeDebouncer(on_settled=lambda: None, interval_ms=300)
    assert debouncer.interval() == 300
    debouncer.set_interval(-5)
    assert debouncer.interval() == 0
