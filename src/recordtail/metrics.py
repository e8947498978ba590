"""Metrics helper for TailEngine.

Provides a lightweight, dependency-free snapshot of session counters suitable
for exposure via HTTP or logging. Avoids mutating the engine.
"""
from __future__ import annotations

from typing import Any, Dict

from .engine import TailEngine


def session_metrics(engine: TailEngine) -> Dict[str, Any]:
    session = engine.session
    return {
        "path": session.path,
        "state": engine.state.value,
        "position": session.position,
        "last_validated_position": session.last_validated_position,
        "pending_bytes": len(session.accumulator.pending),
        "records_delivered": session.records_delivered,
        "catch_up_records": session.catch_up_records,
        "rotations": session.rotations,
        "transient_misses": session.transient_misses,
        "opens": session.opens,
        "config": {
            "poll_interval_ms": engine.config.poll_interval_ms,
            "probe_attempts": engine.config.probe_attempts,
            "probe_delay_ms": engine.config.probe_delay_ms,
            "encoding": engine.config.encoding,
        },
    }

__all__ = ["session_metrics"]
