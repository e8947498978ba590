"""Exception taxonomy raised by the tailing engine."""
from __future__ import annotations


class TailerError(Exception):
    """Base class for every error the engine raises to its caller."""


class ConfigurationError(TailerError, ValueError):
    """Invalid construction: missing listener, negative poll interval, reuse."""


class NotFoundError(TailerError):
    """The tailed path did not exist when the engine started."""


class TransientIOError(TailerError):
    """A file stayed absent after the bounded metadata retries ran out.

    The engine recovers from this while running; callers only see it when
    using the probe directly.
    """

    def __init__(self, path: str, attempts: int) -> None:
        super().__init__(f"{path} still missing after {attempts} attempt(s)")
        self.path = path
        self.attempts = attempts


class FatalIOError(TailerError):
    """Unrecoverable I/O failure while tailing; the run is terminated."""


__all__ = [
    "TailerError",
    "ConfigurationError",
    "NotFoundError",
    "TransientIOError",
    "FatalIOError",
]
