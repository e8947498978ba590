import threading
import time
from typing import Callable, List, Optional
from unittest.mock import Mock

import pytest

from recordtail import TailConfig, TailEngine


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.01) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def mock_listener(is_valid=None, archived: Optional[str] = None) -> Mock:
    """Mock listener; ``is_valid`` may be a bool or a predicate."""
    listener = Mock()
    if callable(is_valid):
        listener.is_valid.side_effect = is_valid
    else:
        listener.is_valid.return_value = True if is_valid is None else is_valid
    listener.rotated.return_value = archived
    return listener


def handled(listener: Mock) -> List[tuple]:
    return [c.args for c in listener.handle.call_args_list]


class EngineRunner:
    """Runs ``engine.execute()`` on a daemon thread and captures its outcome."""

    def __init__(self, engine: TailEngine) -> None:
        self.engine = engine
        self.error: Optional[BaseException] = None
        self.thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        try:
            self.engine.execute()
        except BaseException as exc:  # noqa: BLE001 - surfaced to the test
            self.error = exc

    def start(self) -> "EngineRunner":
        self.thread.start()
        return self

    def stop(self, timeout: float = 2.0) -> None:
        self.engine.stop()
        self.thread.join(timeout=timeout)


@pytest.fixture
def fast_config() -> TailConfig:
    return TailConfig(poll_interval_ms=10, probe_attempts=3, probe_delay_ms=10)


@pytest.fixture
def run_engine(fast_config):
    runners: List[EngineRunner] = []

    def _start(listener, path, poll_interval: int = 10, **kwargs) -> EngineRunner:
        kwargs.setdefault("config", fast_config)
        runner = EngineRunner(TailEngine(listener, poll_interval, str(path), **kwargs)).start()
        runners.append(runner)
        return runner

    yield _start
    for runner in runners:
        runner.stop()
