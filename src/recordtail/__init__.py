"""Package metadata and public API for recordtail.

The version is read from importlib.metadata so an editable install reports
the version declared in pyproject.toml, with a hardcoded fallback for direct
source usage without installation.
"""

from __future__ import annotations

from importlib import metadata as _metadata

from .config import TailConfig
from .engine import TailEngine, TailSession, TailState
from .errors import (
	ConfigurationError,
	FatalIOError,
	NotFoundError,
	TailerError,
	TransientIOError,
)
from .listener import CallbackListener, LoggingListener, TailListener
from .metrics import session_metrics

__all__ = [
	"__version__",
	"CallbackListener",
	"ConfigurationError",
	"FatalIOError",
	"LoggingListener",
	"NotFoundError",
	"TailConfig",
	"TailEngine",
	"TailListener",
	"TailSession",
	"TailState",
	"TailerError",
	"TransientIOError",
	"session_metrics",
]

_FALLBACK_VERSION = "0.1.0"  # MUST match pyproject.toml [project].version

try:  # pragma: no cover - success path covered indirectly via test_version
	__version__ = _metadata.version("recordtail")  # type: ignore[assignment]
except Exception:  # pragma: no cover - fallback exercised if metadata missing
	__version__ = _FALLBACK_VERSION
