"""Tests for the dirmon command line."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

import pytest
from typer.testing import CliRunner

from dirmon import cli
from dirmon.cli import app
from dirmon.daemon.runner import DaemonRunner

runner = CliRunner()


@pytest.fixture()
def started(monkeypatch) -> list[object]:
    """Replace the daemon so the command returns instead of watching forever."""
    runs: list[object] = []

    class _FakeDaemon:
        def __init__(self, config) -> None:
            self.config = config

        async def run(self) -> None:
            runs.append(self.config)

        def stop(self) -> None:
            pass

    monkeypatch.setattr(cli, "DaemonRunner", _FakeDaemon)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    monkeypatch.setattr(signal, "signal", lambda *_args: None)
    return runs


def _action(tmp_path: Path, name: str = "action.bat") -> Path:
    path = tmp_path / name
    path.write_text("@echo off\n", encoding="utf-8")
    return path


def test_no_arguments_prints_usage(started) -> None:
    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "Usage: dirmon" in result.output
    assert started == []


def test_one_argument_is_too_few(tmp_path: Path, started) -> None:
    result = runner.invoke(app, [str(tmp_path)])
    assert result.exit_code == 1
    assert "too few arguments" in result.output
    assert started == []


def test_missing_watch_path_exits_before_watching(tmp_path: Path, started) -> None:
    result = runner.invoke(app, [str(tmp_path / "missing"), str(_action(tmp_path))])
    assert result.exit_code == 1
    assert "No such file or directory" in result.output
    assert started == []


def test_wrong_action_suffix_exits_before_watching(tmp_path: Path, started) -> None:
    action = _action(tmp_path, "action.txt")
    result = runner.invoke(app, [str(tmp_path), str(action)])
    assert result.exit_code == 1
    assert "the second parameter must be" in result.output
    assert started == []


def test_missing_action_file_exits(tmp_path: Path, started) -> None:
    result = runner.invoke(app, [str(tmp_path), str(tmp_path / "nope.cmd")])
    assert result.exit_code == 1
    assert started == []


def test_valid_arguments_start_monitoring(tmp_path: Path, started) -> None:
    action = _action(tmp_path, "Rebuild.BAT")
    result = runner.invoke(app, [str(tmp_path) + "/", str(action)])
    assert result.exit_code == 0
    assert len(started) == 1
    assert started[0].watch_path == tmp_path
    assert started[0].action_path == action


def test_invalid_log_level_exits(tmp_path: Path, started) -> None:
    result = runner.invoke(app, [str(tmp_path), str(_action(tmp_path)), "--log-level", "loud"])
    assert result.exit_code == 1
    assert "log level" in result.output
    assert started == []


# -- logging streams and signals ---------------------------------------------


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_info_goes_to_stdout_and_warnings_to_stderr(capsys, restore_root_logging) -> None:
    cli.configure_logging("info")
    log = logging.getLogger("dirmon.daemon.scheduler")

    log.info("Detected a modification.")
    log.warning("Non-zero exit code 7 was returned by action.sh")
    log.debug("action: running")

    out, err = capsys.readouterr()
    assert "Detected a modification." in out
    assert "Detected a modification." not in err
    assert "Non-zero exit code 7" in err
    assert "Non-zero exit code 7" not in out
    assert "action: running" not in out + err


def test_signal_closes_watch_and_serve_returns(monkeypatch, config_factory, fake_source, fake_action) -> None:
    handlers = {}
    monkeypatch.setattr(signal, "signal", lambda signum, handler: handlers.__setitem__(signum, handler))
    daemon = DaemonRunner(config_factory(poll_seconds=60.0), source=fake_source, action=fake_action)

    async def _run() -> None:
        task = asyncio.create_task(cli._serve(daemon))
        fake_source.push("/watched/a.txt")
        await asyncio.sleep(0.05)
        handlers[signal.SIGTERM](signal.SIGTERM, None)
        await asyncio.wait_for(task, timeout=5)

    asyncio.run(_run())
    assert signal.SIGINT in handlers
    assert fake_source.closed is True
    assert daemon.raw_events == 1
