"""Rotation detection and catch-up on the archived file.

A rotation is only confirmed when the tailed path both shrank below what
was already consumed and carries a newer creation time than the file that
was opened. Shrinking alone happens on truncation in place, and a newer
timestamp alone can be filesystem noise.

When the listener names the archived copy, its unread tail is replayed
starting from the carried-over partial record so a record split across the
rotation boundary is delivered once, whole.
"""
from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .accumulator import RecordAccumulator
from .logutil import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .engine import TailSession

_LOG = get_logger("rotation")


def is_rotated(size: int, position: int, creation_time: float, epoch_creation_time: float) -> bool:
    return size + 1 < position and creation_time > epoch_creation_time


class RotationHandler:
    def __init__(self, listener, encoding: str = "utf-8", errors: str = "replace") -> None:
        self.listener = listener
        self.encoding = encoding
        self.errors = errors

    def rotate(self, session: "TailSession") -> int:
        """Run the listener notification and catch-up, then reset the session.

        Returns the number of records delivered from the archived file.
        """
        current = session.accumulator
        _LOG.info(
            "Rotation detected on %s (last validated=%d, position=%d)",
            session.path, current.last_validated_position, current.position,
        )
        session.rotations += 1
        archived = self.listener.rotated(current.last_validated_position, current.position)
        if archived is not None:
            archived = os.fspath(archived)
        delivered = 0
        leftover = current.pending
        if archived is None:
            _LOG.info("No archived file named for %s; skipping catch-up", session.path)
        elif not os.path.exists(archived):
            _LOG.info("Archived file %s not found; skipping catch-up", archived)
        else:
            delivered, leftover = self.catch_up(archived, current)
        if leftover:
            _LOG.warning("Discarding %d unvalidated byte(s) at rotation boundary of %s", len(leftover), session.path)
        session.catch_up_records += delivered
        session.records_delivered += delivered
        session.reset_epoch()
        return delivered

    def catch_up(self, archived: str, current: RecordAccumulator) -> tuple[int, bytes]:
        # The last read may have consumed part of a record that never
        # validated, so resume after everything already read.
        start = max(current.last_validated_position, current.position)
        _LOG.debug("Handling rotated file '%s' starting at position %d", archived, start)
        reader = RecordAccumulator(
            archived,
            self.listener,
            position=start,
            last_validated_position=current.last_validated_position,
            pending=current.pending,
            encoding=self.encoding,
            errors=self.errors,
        )
        try:
            handle = open(archived, "rb")
        except FileNotFoundError:
            _LOG.info("Archived file %s vanished before catch-up", archived)
            return 0, current.pending
        with handle:
            handle.seek(start)
            delivered = reader.drain(handle)
        _LOG.info("Caught up %d record(s) from %s", delivered, archived)
        return delivered, reader.pending


__all__ = ["is_rotated", "RotationHandler"]
