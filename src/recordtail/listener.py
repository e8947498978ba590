"""Listener contract between the tailing engine and record consumers.

The engine calls every hook synchronously from its own poll loop, so a slow
hook stalls tailing. ``is_valid`` is the only hook an implementation must
provide; it decides when the accumulated text forms a complete record.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol

from .logutil import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .engine import TailEngine

_LOG = get_logger("listener")


class TailListener(Protocol):
    """Hooks invoked by :class:`~recordtail.engine.TailEngine`.

    Subclass explicitly to inherit the no-op defaults, or implement the
    methods structurally.
    """

    def is_valid(self, candidate: str) -> bool:
        """Return True when ``candidate`` is a complete record."""
        ...

    def init(self, engine: "TailEngine") -> None:
        """Called once when the engine is constructed."""

    def rotated(self, last_validated_position: int, current_position: int) -> Optional[str]:
        """Called once per detected rotation.

        Return the path of the archived file to read its remaining records,
        or None to skip catch-up.
        """
        return None

    def handle(self, source: str, record: str) -> None:
        """Called once per delivered record, in file order."""

    def not_exists(self) -> None:
        """Called once if the tailed path is absent at startup."""

    def handle_exception(self, exc: BaseException) -> None:
        """Called once before a fatal error is raised to the caller."""


class CallbackListener(TailListener):
    """Listener assembled from plain callables; only ``is_valid`` is required."""

    def __init__(
        self,
        is_valid: Callable[[str], bool],
        handle: Optional[Callable[[str, str], None]] = None,
        rotated: Optional[Callable[[int, int], Optional[str]]] = None,
        not_exists: Optional[Callable[[], None]] = None,
        handle_exception: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self._is_valid = is_valid
        self._handle = handle
        self._rotated = rotated
        self._not_exists = not_exists
        self._handle_exception = handle_exception

    def is_valid(self, candidate: str) -> bool:
        return bool(self._is_valid(candidate))

    def rotated(self, last_validated_position: int, current_position: int) -> Optional[str]:
        if self._rotated is None:
            return None
        return self._rotated(last_validated_position, current_position)

    def handle(self, source: str, record: str) -> None:
        if self._handle is not None:
            self._handle(source, record)

    def not_exists(self) -> None:
        if self._not_exists is not None:
            self._not_exists()

    def handle_exception(self, exc: BaseException) -> None:
        if self._handle_exception is not None:
            self._handle_exception(exc)


class LoggingListener(TailListener):
    """Accepts every line as a record and logs each event."""

    def init(self, engine: "TailEngine") -> None:
        _LOG.info("Tailing %s", engine.path)

    def rotated(self, last_validated_position: int, current_position: int) -> Optional[str]:
        _LOG.info("File rotated (last validated=%d, position=%d)", last_validated_position, current_position)
        return None

    def handle(self, source: str, record: str) -> None:
        _LOG.info("New record from %s: %s", source, record)

    def not_exists(self) -> None:
        _LOG.info("File does not exist")

    def handle_exception(self, exc: BaseException) -> None:
        _LOG.error("Received exception", exc_info=exc)

    def is_valid(self, candidate: str) -> bool:
        _LOG.debug("Validating partial record: %s", candidate)
        return True


__all__ = ["TailListener", "CallbackListener", "LoggingListener"]
