"""Coalescing state shared by the watcher and the trigger scheduler."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

FireCallback = Callable[[float], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class BurstSnapshot:
    burst_start: float
    last_seen: float


class BurstState:
    """Tracks the pending burst of change notifications.

    ``burst_start`` is the arrival time of the first unconsumed event and
    ``last_seen`` the arrival time of the most recent one. Both are ``None``
    together when no burst is pending. The fields are only touched under
    ``self._lock``, through :meth:`record` and :meth:`fire_if_due`.

    A burst is due once it is older than *max_burst_seconds*, or once no event
    has arrived for *quiet_seconds*.
    """

    def __init__(self, quiet_seconds: float, max_burst_seconds: float) -> None:
        self._quiet_seconds = quiet_seconds
        self._max_burst_seconds = max_burst_seconds
        self._lock = asyncio.Lock()
        self._burst_start: float | None = None
        self._last_seen: float | None = None

    async def record(self, now: float) -> None:
        """Record an event arriving at *now*."""
        async with self._lock:
            if self._burst_start is None:
                self._burst_start = now
            self._last_seen = now

    def _due_start(self, now: float) -> float | None:
        """Return the burst start if the burst should fire at *now*; callers hold the lock."""
        if self._burst_start is None or self._last_seen is None:
            return None
        age = now - self._burst_start
        since_last = now - self._last_seen
        if age < self._max_burst_seconds and since_last < self._quiet_seconds:
            return None
        return self._burst_start

    async def fire_if_due(self, now: float, fire: FireCallback) -> bool:
        """Await ``fire(burst_start)`` and reset the burst if it is due.

        The lock stays held while *fire* runs, so an event arriving meanwhile
        is recorded after the reset and opens a new burst.
        """
        async with self._lock:
            start = self._due_start(now)
            if start is None:
                return False
            try:
                await fire(start)
            finally:
                self._burst_start = None
                self._last_seen = None
            return True

    def snapshot(self) -> BurstSnapshot | None:
        if self._burst_start is None or self._last_seen is None:
            return None
        return BurstSnapshot(burst_start=self._burst_start, last_seen=self._last_seen)
