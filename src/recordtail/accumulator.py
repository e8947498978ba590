"""Partial-record buffering and position tracking for one open handle.

Lines are read in binary mode so ``position`` is a true byte offset that can
be used to seek into the archived copy of a rotated file. Line terminators
are not part of the accumulated text: a record split over several reads (or
several physical lines) is the concatenation of the pieces.
"""
from __future__ import annotations

import codecs
from typing import IO, Optional

from .listener import TailListener


def strip_terminator(raw: bytes) -> bytes:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw


class RecordAccumulator:
    def __init__(
        self,
        source: str,
        listener: TailListener,
        *,
        position: int = 0,
        last_validated_position: Optional[int] = None,
        pending: bytes = b"",
        encoding: str = "utf-8",
        errors: str = "replace",
    ) -> None:
        self.source = source
        self.listener = listener
        self.position = position
        self.last_validated_position = position if last_validated_position is None else last_validated_position
        self.pending = pending
        self.encoding = encoding
        self.errors = errors
        self.delivered = 0

    @property
    def pending_text(self) -> str:
        # A slow writer may split a multibyte character across reads; the
        # incomplete tail stays undecoded until the rest of it arrives.
        decoder = codecs.getincrementaldecoder(self.encoding)(self.errors)
        return decoder.decode(self.pending, final=False)

    def feed(self, raw: bytes) -> Optional[str]:
        """Accumulate one raw line; return the record if it was delivered."""
        self.pending = self.pending + strip_terminator(raw)
        self.position += len(raw)
        candidate = self.pending_text
        if not self.listener.is_valid(candidate):
            return None
        self.listener.handle(self.source, candidate)
        self.last_validated_position = self.position
        self.pending = b""
        self.delivered += 1
        return candidate

    def drain(self, handle: IO[bytes]) -> int:
        """Feed every line currently available from ``handle``.

        Returns the number of records delivered.
        """
        before = self.delivered
        while True:
            raw = handle.readline()
            if not raw:
                break
            self.feed(raw)
        return self.delivered - before


__all__ = ["RecordAccumulator", "strip_terminator"]
