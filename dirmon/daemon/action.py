"""Synchronous execution of the configured action file."""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from dirmon.core.events import EventBus, EventType

logger = logging.getLogger(__name__)

LAUNCH_FAILED = -1


def build_command(action_path: Path) -> list[str]:
    """Return the argv that runs *action_path* with its interpreter."""
    suffix = action_path.suffix.lower()
    if suffix in (".bat", ".cmd"):
        return ["cmd", "/c", str(action_path)]
    if suffix == ".sh":
        return ["sh", str(action_path)]
    return [str(action_path)]


class ActionRunner:
    """Runs the action file and reports non-zero exit codes as warnings.

    :meth:`run` blocks until the command exits. A failing action never
    raises; its exit code is returned so the caller can carry on.
    """

    def __init__(self, action_path: Path, event_bus: EventBus | None = None) -> None:
        self.action_path = action_path
        self._event_bus = event_bus or EventBus()

    def run(self, burst_start: float | None = None) -> int:
        command = build_command(self.action_path)
        logger.debug("action: running %s", command)
        launch_error: OSError | None = None
        try:
            returncode = subprocess.run(command, check=False).returncode
        except OSError as exc:
            launch_error = exc
            returncode = LAUNCH_FAILED

        if returncode == 0:
            return 0

        event = self._event_bus.publish(
            EventType.ACTION_FAILED,
            burst_start if burst_start is not None else time.time(),
            returncode=returncode,
            action=str(self.action_path),
        )
        if launch_error is not None:
            logger.warning("[%s] Could not run %s: %s", event.display_time, self.action_path, launch_error)
        else:
            logger.warning(
                "[%s] Non-zero exit code %d was returned by %s",
                event.display_time,
                returncode,
                self.action_path,
            )
        return returncode
