"""Directory change source backed by ``watchfiles``."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol

from watchfiles import Change, awatch

logger = logging.getLogger(__name__)

ChangeBatch = set[tuple[Change, str]]


class ChangeSource(Protocol):
    """Blocks until the watched subtree changes; :meth:`close` ends the wait."""

    def changes(self) -> AsyncIterator[ChangeBatch]: ...

    def close(self) -> None: ...


class ChangeWatcher:
    """Yields one batch of changes per notification from the OS watch.

    Iteration waits without a timeout. Calling :meth:`close` sets the stop
    event, which makes the pending wait return and ends iteration. Filtering
    is disabled so every change under *root* counts.
    """

    def __init__(self, root: Path, *, recursive: bool = True) -> None:
        self.root = root
        self._recursive = recursive
        self._stop_event = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._stop_event.is_set()

    async def changes(self) -> AsyncIterator[ChangeBatch]:
        async for batch in awatch(
            self.root,
            watch_filter=None,
            recursive=self._recursive,
            stop_event=self._stop_event,
        ):
            yield batch
        logger.debug("watcher: watch on %s closed", self.root)

    def close(self) -> None:
        self._stop_event.set()


def describe_batch(batch: ChangeBatch) -> str:
    """Short human-readable summary of a change batch for log lines."""
    if not batch:
        return "no paths"
    first = sorted(path for _change, path in batch)[0]
    if len(batch) == 1:
        return first
    return f"{first} and {len(batch) - 1} more"
