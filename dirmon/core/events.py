"""Monitor events published by the watcher, trigger scheduler, and action runner.

Every published event carries the timestamp its log line shows, so callers
publish first and log with :attr:`MonitorEvent.display_time`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    CHANGE_DETECTED = "change.detected"
    BURST_FIRED = "burst.fired"
    ACTION_FAILED = "action.failed"


def format_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%a %b %d %H:%M:%S %Y")


@dataclass(slots=True, frozen=True)
class MonitorEvent:
    event_type: EventType
    timestamp: float
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def display_time(self) -> str:
        return format_timestamp(self.timestamp)


EventHandler = Callable[[MonitorEvent], None]


class EventBus:
    """Fans monitor events out to subscribers in registration order.

    A failing subscriber is logged and skipped; it never reaches the watcher
    or the trigger loop.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[frozenset[EventType], EventHandler]] = []

    def subscribe(self, handler: EventHandler, *event_types: EventType) -> None:
        """Call *handler* for *event_types*, or for every event when none are given."""
        self._subscribers.append((frozenset(event_types), handler))

    def publish(self, event_type: EventType, timestamp: float, **data: Any) -> MonitorEvent:
        """Build the event, deliver it, and return it for logging."""
        event = MonitorEvent(event_type=event_type, timestamp=timestamp, data=data)
        for wanted, handler in list(self._subscribers):
            if wanted and event_type not in wanted:
                continue
            try:
                handler(event)
            except Exception:
                logger.exception("subscriber %r failed for %s", handler, event_type.value)
        return event
