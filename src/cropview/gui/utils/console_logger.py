"""Console handler installation for the cropview entry points."""

from __future__ import annotations

import logging
import sys

_INSTALLED_HANDLERS: set[str] = set()

_DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _find_handler(logger: logging.Logger, handler_name: str) -> logging.Handler | None:
    for handler in logger.handlers:
        if getattr(handler, "name", None) == handler_name:
            return handler
    return None


def ensure_console_logger(
    logger: logging.Logger,
    handler_name: str,
    *,
    level: int = logging.INFO,
    fmt: str = _DEFAULT_FORMAT,
) -> None:
    """Attach a single named stdout handler to *logger*.

    Repeated calls do not add handlers; they only move the logger and the
    existing handler to *level*, so ``--verbose`` can raise verbosity after
    the GUI or CLI already installed the handler.
    """
    handler = _find_handler(logger, handler_name)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.name = handler_name
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    handler.setLevel(level)
    logger.setLevel(level)
    _INSTALLED_HANDLERS.add(handler_name)


def remove_console_logger(logger: logging.Logger, handler_name: str) -> None:
    """Detach the handler installed by :func:`ensure_console_logger`, if any."""
    handler = _find_handler(logger, handler_name)
    if handler is not None:
        logger.removeHandler(handler)
        handler.close()
    _INSTALLED_HANDLERS.discard(handler_name)


__all__ = ["ensure_console_logger", "remove_console_logger"]
