"""Filesystem metadata reads with bounded retry for transient absence.

Rotation tools routinely unlink and recreate the tailed path, so a missing
file is retried a fixed number of times before the absence is reported as a
:class:`~recordtail.errors.TransientIOError`.
"""
from __future__ import annotations

import os
import time
from typing import IO, Any, Callable, Optional, Tuple, TypeVar

from .errors import TransientIOError
from .logutil import get_logger

_LOG = get_logger("probe")

T = TypeVar("T")


class RetryPolicy:
    """Fixed-delay bounded retry on ``FileNotFoundError``."""

    def __init__(self, max_attempts: int = 3, delay: float = 0.1, sleep: Optional[Callable[[float], None]] = None) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self._sleep = sleep or time.sleep

    def call(self, fn: Callable[..., T], path: str, *args: Any) -> T:
        """Invoke ``fn(path, *args)``; other exceptions propagate immediately."""
        attempt = 0
        while True:
            attempt += 1
            try:
                return fn(path, *args)
            except FileNotFoundError as exc:
                if attempt >= self.max_attempts:
                    raise TransientIOError(path, attempt) from exc
                _LOG.debug("%s missing (attempt %d/%d); retrying", path, attempt, self.max_attempts)
                self._sleep(self.delay)


def creation_time_of(st: os.stat_result) -> float:
    # st_birthtime is only populated on some platforms (macOS, BSD, Windows);
    # elsewhere the inode change time is the closest substitute.
    birth = getattr(st, "st_birthtime", None)
    if birth is not None:
        return float(birth)
    return float(st.st_ctime)


class MetadataProbe:
    def __init__(self, policy: Optional[RetryPolicy] = None) -> None:
        self.policy = policy or RetryPolicy()

    def stat(self, path: str) -> os.stat_result:
        return self.policy.call(os.stat, path)

    def creation_time(self, path: str) -> float:
        return creation_time_of(self.stat(path))

    @staticmethod
    def creation_time_of(st: os.stat_result) -> float:
        return creation_time_of(st)

    @staticmethod
    def handle_creation_time(handle: IO[bytes]) -> float:
        """Creation time of an already-open handle; cannot go missing."""
        return creation_time_of(os.fstat(handle.fileno()))

    @staticmethod
    def handle_identity(handle: IO[bytes]) -> Tuple[float, int]:
        st = os.fstat(handle.fileno())
        return creation_time_of(st), st.st_ino

    @staticmethod
    def path_creation_time(st: os.stat_result, epoch_inode: Optional[int], epoch_creation_time: float) -> float:
        """Creation time of the tailed path as compared against the open epoch.

        Without a birth time the inode change time moves on every write or
        truncate, so it only counts as newer once the path names a different
        inode than the open handle.
        """
        if getattr(st, "st_birthtime", None) is None and st.st_ino == epoch_inode:
            return epoch_creation_time
        return creation_time_of(st)


__all__ = ["RetryPolicy", "MetadataProbe", "creation_time_of"]
