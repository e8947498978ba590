"""Polling tail engine that delivers complete records to a listener.

The engine reads the tailed file from the beginning, accumulating lines
until the listener accepts the accumulated text as a record. Each poll
iteration first checks whether the path was rotated (renamed away and
recreated); if so the remainder of the archived file is replayed and the
new file is read from offset zero.

``execute()`` blocks; run it on its own thread when tailing several files.
``stop()`` is cooperative and takes effect at the next iteration boundary,
so it may take up to one poll interval plus one read.
"""
from __future__ import annotations

import dataclasses
import enum
import errno
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .accumulator import RecordAccumulator
from .config import TailConfig
from .errors import ConfigurationError, FatalIOError, NotFoundError, TransientIOError
from .listener import CallbackListener, TailListener
from .logutil import get_logger
from .probe import MetadataProbe, RetryPolicy
from .rotation import RotationHandler, is_rotated

_LOG = get_logger("engine")


class TailState(enum.Enum):
    INIT = "init"
    RUNNING = "running"
    ROTATING = "rotating"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass
class TailSession:
    """Mutable state for one tailed path, owned by a single engine."""

    path: str
    poll_interval: int
    listener: TailListener
    encoding: str = "utf-8"
    errors: str = "replace"
    epoch_creation_time: float = 0.0
    epoch_inode: Optional[int] = None
    running: bool = True
    accumulator: Optional[RecordAccumulator] = None
    # Counters
    records_delivered: int = 0
    catch_up_records: int = 0
    rotations: int = 0
    transient_misses: int = 0
    opens: int = 0

    def __post_init__(self) -> None:
        if self.accumulator is None:
            self.accumulator = self._new_accumulator()

    def _new_accumulator(self) -> RecordAccumulator:
        return RecordAccumulator(self.path, self.listener, encoding=self.encoding, errors=self.errors)

    @property
    def position(self) -> int:
        return self.accumulator.position

    @property
    def last_validated_position(self) -> int:
        return self.accumulator.last_validated_position

    @property
    def pending_buffer(self) -> str:
        return self.accumulator.pending_text

    def reset_epoch(self) -> None:
        """Start a new file epoch at offset zero with an empty buffer."""
        self.accumulator = self._new_accumulator()
        self.epoch_creation_time = 0.0
        self.epoch_inode = None


def _adapt_listener(listener: Any) -> TailListener:
    # Structural listeners may omit every hook except is_valid.
    if TailListener in type(listener).__mro__:
        return listener
    return CallbackListener(
        listener.is_valid,
        handle=getattr(listener, "handle", None),
        rotated=getattr(listener, "rotated", None),
        not_exists=getattr(listener, "not_exists", None),
        handle_exception=getattr(listener, "handle_exception", None),
    )


class TailEngine:
    def __init__(
        self,
        listener: Any,
        poll_interval: int,
        path: "str | os.PathLike[str]",
        *,
        config: Optional[TailConfig] = None,
        probe: Optional[MetadataProbe] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if listener is None:
            raise ConfigurationError("Listener cannot be None")
        if not callable(getattr(listener, "is_valid", None)):
            raise ConfigurationError(f"Listener {listener!r} does not provide is_valid()")
        self._config = dataclasses.replace(config or TailConfig(), poll_interval_ms=poll_interval).validate()
        self._path = os.path.abspath(os.fspath(path))
        self._sleep = sleep or time.sleep
        self._probe = probe or MetadataProbe(
            RetryPolicy(self._config.probe_attempts, self._config.probe_delay_s, self._sleep)
        )
        self.listener = listener
        self._listener = _adapt_listener(listener)
        self._session = TailSession(
            path=self._path,
            poll_interval=self._config.poll_interval_ms,
            listener=self._listener,
            encoding=self._config.encoding,
            errors=self._config.errors,
        )
        self._rotation = RotationHandler(self._listener, self._config.encoding, self._config.errors)
        self._state = TailState.INIT
        init = getattr(listener, "init", None)
        if callable(init):
            init(self)

    @property
    def path(self) -> str:
        return self._path

    @property
    def state(self) -> TailState:
        return self._state

    @property
    def session(self) -> TailSession:
        return self._session

    @property
    def position(self) -> int:
        return self._session.position

    @property
    def last_validated_position(self) -> int:
        return self._session.last_validated_position

    @property
    def config(self) -> TailConfig:
        return self._config

    def stop(self) -> None:
        """Request shutdown; observed at the top of the next iteration."""
        self._session.running = False

    def execute(self) -> None:
        """Tail the file until :meth:`stop` is called or a fatal error occurs."""
        if self._state is not TailState.INIT:
            raise ConfigurationError(f"engine for {self._path} has already been executed")
        if not os.path.exists(self._path):
            self._state = TailState.FAILED
            self._listener.not_exists()
            cause = FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), self._path)
            raise NotFoundError(f"{self._path} does not exist") from cause

        self._state = TailState.RUNNING
        _LOG.debug("Tailing %s every %d ms", self._path, self._config.poll_interval_ms)
        try:
            while self._session.running:
                self._follow()
        except OSError as exc:
            self._fail(exc)
        except BaseException:
            self._state = TailState.FAILED
            raise
        self._state = TailState.STOPPED
        _LOG.debug("Stopped tailing %s", self._path)

    def _fail(self, exc: OSError) -> None:
        self._state = TailState.FAILED
        _LOG.error("Aborting tail of %s: %s", self._path, exc, exc_info=exc)
        self._listener.handle_exception(exc)
        raise FatalIOError(f"I/O failure while tailing {self._path}: {exc}") from exc

    def _pause(self) -> None:
        self._sleep(self._config.poll_interval_s)

    def _follow(self) -> None:
        """Tail one file epoch; returns after a rotation or on stop."""
        session = self._session
        try:
            handle = open(self._path, "rb")
        except FileNotFoundError:
            # Rotation in progress: the path was moved away and not yet recreated.
            session.transient_misses += 1
            _LOG.debug("%s missing on open; waiting for it to reappear", self._path)
            self._pause()
            return
        with handle:
            session.opens += 1
            session.epoch_creation_time, session.epoch_inode = self._probe.handle_identity(handle)
            _LOG.debug("Opened %s (creation time %.6f)", self._path, session.epoch_creation_time)
            while session.running:
                try:
                    rotated = self._check_rotation()
                except TransientIOError as exc:
                    session.transient_misses += 1
                    _LOG.debug("Transient absence while tailing: %s", exc)
                    self._pause()
                    continue
                if rotated:
                    self._state = TailState.ROTATING
                    self._rotation.rotate(session)
                    self._state = TailState.RUNNING
                    self._pause()
                    return
                session.records_delivered += session.accumulator.drain(handle)
                self._pause()

    def _check_rotation(self) -> bool:
        st = self._probe.stat(self._path)
        return is_rotated(
            st.st_size,
            self._session.position,
            self._probe.path_creation_time(st, self._session.epoch_inode, self._session.epoch_creation_time),
            self._session.epoch_creation_time,
        )


__all__ = ["TailEngine", "TailSession", "TailState"]
