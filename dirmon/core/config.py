from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigError(RuntimeError):
    """Raised when the monitor cannot be configured from its arguments."""


DEFAULT_POLL_SECONDS = 5.0
DEFAULT_QUIET_SECONDS = 5.0
DEFAULT_MAX_BURST_SECONDS = 60.0

# Batch scripts run through cmd.exe, shell scripts through sh.
ACTION_SUFFIXES = (".bat", ".cmd", ".sh")

LOG_LEVELS = ("debug", "info", "warning", "error")


class MonitorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    watch_path: Path
    action_path: Path
    poll_seconds: float = Field(default=DEFAULT_POLL_SECONDS, gt=0)
    quiet_seconds: float = Field(default=DEFAULT_QUIET_SECONDS, gt=0)
    max_burst_seconds: float = Field(default=DEFAULT_MAX_BURST_SECONDS, gt=0)
    log_level: str = "info"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return level


def strip_trailing_separators(raw: str) -> str:
    """Drop trailing path separators, keeping a bare root intact."""
    separators = os.sep + (os.altsep or "")
    stripped = raw.rstrip(separators)
    if not stripped and raw:
        return raw[0]
    return stripped


def has_action_suffix(path: str) -> bool:
    return path.lower().endswith(ACTION_SUFFIXES)


def verify_path(path: Path) -> None:
    """Raise ``ConfigError`` with the OS error text if *path* cannot be found."""
    try:
        os.stat(path)
    except OSError as exc:
        raise ConfigError(exc.strerror or str(exc)) from exc


def build_config(*, watch_path: str, action_path: str, log_level: str = "info") -> MonitorConfig:
    """Validate the command-line arguments and build a ``MonitorConfig``.

    Checks run in the order an operator sees them fail: the watched path,
    then the action file suffix, then the action file itself.
    """
    watch = Path(strip_trailing_separators(watch_path))
    verify_path(watch)

    if not has_action_suffix(action_path):
        suffixes = ", ".join(f'"{s}"' for s in ACTION_SUFFIXES)
        raise ConfigError(f"the second parameter must be one of {suffixes} files")

    action = Path(action_path)
    verify_path(action)

    try:
        return MonitorConfig(watch_path=watch, action_path=action, log_level=log_level)
    except ValueError as exc:
        raise ConfigError(f"invalid monitor config: {exc}") from exc
