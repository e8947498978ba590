"""Logging for recordtail.

Each component logs to a child of the ``recordtail`` logger (``engine``,
``rotation``, ``probe``, ``listener``). Opens, transient absences and the
start of a catch-up are DEBUG, detected rotations and catch-up totals INFO,
text dropped at a rotation boundary WARNING and fatal I/O ERROR with the
traceback. The package logger stays at WARNING and only gets a stderr
handler when the embedding application has not configured one.
"""
from __future__ import annotations

import logging
from typing import Optional

_ROOT_NAME = "recordtail"
_LOGGER: Optional[logging.Logger] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a child of it when ``name`` is given."""
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger(_ROOT_NAME)
        # Only add a handler if the application hasn't configured logging.
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
        _LOGGER = logger
    if name:
        return _LOGGER.getChild(name)
    return _LOGGER

__all__ = ["get_logger"]
