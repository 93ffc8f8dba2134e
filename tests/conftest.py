from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from watchfiles import Change

from dirmon.core.config import MonitorConfig


class FakeSource:
    """Change source fed by the test; ``close`` ends iteration like a closed watch."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[set[tuple[Change, str]] | None] = asyncio.Queue()
        self.closed = False

    async def changes(self):
        while True:
            batch = await self._queue.get()
            if batch is None:
                return
            yield batch

    def push(self, *paths: str) -> None:
        self._queue.put_nowait({(Change.modified, p) for p in paths or ("/watched/file.txt",)})

    def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(None)


class FakeAction:
    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[float | None] = []

    def run(self, burst_start: float | None = None) -> int:
        self.calls.append(burst_start)
        return self.returncode


@pytest.fixture()
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture()
def fake_action() -> FakeAction:
    return FakeAction()


@pytest.fixture()
def config_factory(tmp_path: Path):
    def _make(**overrides) -> MonitorConfig:
        action = tmp_path / "action.sh"
        if not action.exists():
            action.write_text("exit 0\n", encoding="utf-8")
        values = {"watch_path": tmp_path, "action_path": action}
        values.update(overrides)
        return MonitorConfig(**values)

    return _make
