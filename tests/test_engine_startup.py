import logging
import os
from unittest.mock import Mock

import pytest

from recordtail import (
    ConfigurationError,
    FatalIOError,
    NotFoundError,
    TailConfig,
    TailEngine,
    TailState,
)

from conftest import mock_listener


def test_missing_file_notifies_listener_and_fails(tmp_path):
    listener = mock_listener()
    engine = TailEngine(listener, 10, str(tmp_path / "garbage"))
    with pytest.raises(NotFoundError) as info:
        engine.execute()
    listener.not_exists.assert_called_once_with()
    listener.rotated.assert_not_called()
    listener.handle.assert_not_called()
    assert isinstance(info.value.__cause__, FileNotFoundError)
    assert engine.state is TailState.FAILED


def test_none_listener_fails_before_any_io(tmp_path, monkeypatch):
    touched = []
    monkeypatch.setattr(os.path, "exists", lambda p: touched.append(p) or True)
    with pytest.raises(ConfigurationError):
        TailEngine(None, 1000, str(tmp_path / "garbage"))
    assert touched == []


def test_listener_without_is_valid_is_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        TailEngine(object(), 1000, str(tmp_path / "app.log"))


def test_negative_poll_interval_is_rejected(tmp_path):
    with pytest.raises(ConfigurationError):
        TailEngine(mock_listener(), -1, str(tmp_path / "app.log"))


def test_config_validation():
    with pytest.raises(ConfigurationError):
        TailConfig(probe_attempts=0).validate()
    with pytest.raises(ConfigurationError):
        TailConfig(encoding="no-such-codec").validate()
    cfg = TailConfig(poll_interval_ms=250, probe_delay_ms=50).validate()
    assert cfg.poll_interval_s == 0.25
    assert cfg.probe_delay_s == 0.05


@pytest.mark.skipif(os.name == "nt", reason="opening a directory raises PermissionError on Windows")
def test_directory_target_is_fatal(tmp_path):
    listener = mock_listener()
    engine = TailEngine(listener, 10, str(tmp_path))
    with pytest.raises(FatalIOError) as info:
        engine.execute()
    listener.handle_exception.assert_called_once()
    assert isinstance(listener.handle_exception.call_args.args[0], IsADirectoryError)
    listener.rotated.assert_not_called()
    assert isinstance(info.value.__cause__, IsADirectoryError)
    assert engine.state is TailState.FAILED


def test_engine_runs_only_once(tmp_path):
    engine = TailEngine(mock_listener(), 10, str(tmp_path / "garbage"))
    with pytest.raises(NotFoundError):
        engine.execute()
    with pytest.raises(ConfigurationError):
        engine.execute()


def test_path_is_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    engine = TailEngine(Mock(), 10, "app.log")
    assert engine.path == str(tmp_path / "app.log")


@pytest.mark.skipif(os.name == "nt", reason="opening a directory raises PermissionError on Windows")
def test_fatal_failure_is_logged_with_traceback(tmp_path, caplog):
    caplog.set_level(logging.ERROR, logger="recordtail")
    engine = TailEngine(mock_listener(), 10, str(tmp_path))
    with pytest.raises(FatalIOError):
        engine.execute()
    errors = [r for r in caplog.records if r.levelno == logging.ERROR and r.name == "recordtail.engine"]
    assert len(errors) == 1
    assert errors[0].exc_info is not None
    assert isinstance(errors[0].exc_info[1], IsADirectoryError)
