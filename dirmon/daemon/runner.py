"""DaemonRunner: top-level orchestrator that owns the watcher, burst state, and trigger loop."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from dirmon.core.config import ConfigError, MonitorConfig
from dirmon.core.events import EventBus, EventType
from dirmon.daemon.action import ActionRunner
from dirmon.daemon.burst import BurstState
from dirmon.daemon.scheduler import TriggerScheduler
from dirmon.daemon.watcher import ChangeSource, ChangeWatcher, describe_batch

logger = logging.getLogger(__name__)


class DaemonRunner:
    """Owns the event bus, change source, burst state, and trigger scheduler.

    :meth:`run` is the event loop: it waits on the change source in the
    calling task and records every notification, while the scheduler runs as
    a background task. Closing the source (see :meth:`stop`) ends :meth:`run`
    after the scheduler has been stopped and awaited. If the scheduler dies,
    the source is closed as well and its exception is raised from :meth:`run`.
    """

    def __init__(
        self,
        config: MonitorConfig,
        source: ChangeSource | None = None,
        action: ActionRunner | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.source = source or ChangeWatcher(config.watch_path)
        self.action = action or ActionRunner(config.action_path, event_bus=self.event_bus)
        self.state = BurstState(
            quiet_seconds=config.quiet_seconds,
            max_burst_seconds=config.max_burst_seconds,
        )
        self.scheduler = TriggerScheduler(
            self.state,
            self.action,
            poll_seconds=config.poll_seconds,
            event_bus=self.event_bus,
            clock=clock,
        )
        self._clock = clock
        self.raw_events = 0

    async def run(self) -> None:
        """Watch until the change source is closed."""
        logger.info("Start monitoring %s ...", self.config.watch_path)
        await self.scheduler.start()
        if self.scheduler.task is not None:
            self.scheduler.task.add_done_callback(self._on_scheduler_done)
        try:
            try:
                async for batch in self.source.changes():
                    await self._on_change(len(batch), describe_batch(batch))
            except OSError as exc:
                raise ConfigError(f"could not watch {self.config.watch_path}: {exc}") from exc
        finally:
            await self.scheduler.stop()
            logger.debug("daemon: stopped after %d notifications", self.raw_events)

    def stop(self) -> None:
        """Close the change source; :meth:`run` returns once the scheduler exits."""
        self.source.close()

    def _on_scheduler_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled() or task.exception() is None:
            return
        logger.error("daemon: trigger loop failed, closing the watch on %s", self.config.watch_path)
        self.source.close()

    async def _on_change(self, count: int, summary: str) -> None:
        now = self._clock()
        await self.state.record(now)
        self.raw_events += 1
        event = self.event_bus.publish(EventType.CHANGE_DETECTED, now, count=count, summary=summary)
        logger.info("[%s] Detected a modification. (raw) %s", event.display_time, summary)
