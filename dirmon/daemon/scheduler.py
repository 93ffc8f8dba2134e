"""Fixed-cadence trigger loop that fires the action for finished bursts."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Callable

from dirmon.core.events import EventBus, EventType
from dirmon.daemon.action import ActionRunner
from dirmon.daemon.burst import BurstState

logger = logging.getLogger(__name__)


class TriggerScheduler:
    """Evaluates the burst policy every *poll_seconds* and runs the action.

    Ticks land at ``start + n * poll_seconds``; ticks missed while the action
    was running are skipped, not replayed. :meth:`stop` sets the stop flag
    and waits for the loop to finish; an action that is already running is
    allowed to complete.
    """

    def __init__(
        self,
        state: BurstState,
        action: ActionRunner,
        poll_seconds: float,
        event_bus: EventBus | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._state = state
        self._action = action
        self._poll_seconds = poll_seconds
        self._event_bus = event_bus or EventBus()
        self._clock = clock

        self._running = False
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.fired = 0

    @property
    def task(self) -> asyncio.Task[None] | None:
        """The background loop task while the scheduler is started."""
        return self._task

    async def start(self) -> None:
        """Launch the trigger loop as a background task."""
        if self._running:
            return
        self._running = True
        self._stop_event.clear()
        self._task = asyncio.create_task(self._tick_loop())

    async def stop(self) -> None:
        """Set the stop flag and wait for the loop to exit.

        An exception that ended the loop is re-raised here.
        """
        self._running = False
        self._stop_event.set()
        task, self._task = self._task, None
        if task is not None:
            await task

    async def tick(self) -> bool:
        """Evaluate the policy once. Returns whether the action fired."""
        return await self._state.fire_if_due(self._clock(), self._fire)

    # -- internals ------------------------------------------------------------

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        ticks = 0
        while self._running:
            elapsed = loop.time() - started
            ticks = max(ticks + 1, math.floor(elapsed / self._poll_seconds) + 1)
            delay = max(0.0, started + ticks * self._poll_seconds - loop.time())
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
            if not self._running:
                break
            await self.tick()

    async def _fire(self, burst_start: float) -> None:
        event = self._event_bus.publish(EventType.BURST_FIRED, burst_start)
        logger.info("[%s] Detected a modification.", event.display_time)
        self.fired += 1
        # Run in a worker thread so the watcher keeps receiving notifications.
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._action.run, burst_start)
