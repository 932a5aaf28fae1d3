"""Lifecycle events published by the executor.

The executor does not log by itself. It hands every event to an observer, and
the default observer turns them into structured log records.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .app_logging import LOGGER_NAME, log_with_fields
from .models import PartId, Status
from .utils import utc_now_iso


class EventKind(str, Enum):
    WORKER_STARTED = "worker_started"
    JOB_RECEIVED = "job_received"
    STATUS_CHANGED = "status_changed"
    JOB_FAILED = "job_failed"
    WORKER_STOPPED = "worker_stopped"
    WORKER_CRASHED = "worker_crashed"


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    kind: EventKind
    worker: str
    part_id: PartId | None = None
    status: Status | None = None
    error: BaseException | None = None
    at: str = field(default_factory=utc_now_iso)


class Observer(Protocol):
    def on_event(self, event: LifecycleEvent) -> None: ...


class NullObserver:
    def on_event(self, event: LifecycleEvent) -> None:
        _ = event


class CollectingObserver:
    """Keeps every event in memory. Safe to share between workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[LifecycleEvent] = []

    def on_event(self, event: LifecycleEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[LifecycleEvent]:
        with self._lock:
            return list(self._events)

    def kinds(self) -> list[EventKind]:
        return [event.kind for event in self.events]


_LEVELS = {
    EventKind.WORKER_STARTED: logging.INFO,
    EventKind.JOB_RECEIVED: logging.DEBUG,
    EventKind.STATUS_CHANGED: logging.DEBUG,
    EventKind.JOB_FAILED: logging.ERROR,
    EventKind.WORKER_STOPPED: logging.WARNING,
    EventKind.WORKER_CRASHED: logging.ERROR,
}


class LoggingObserver:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def on_event(self, event: LifecycleEvent) -> None:
        fields: dict[str, object] = {"worker": event.worker}
        if event.part_id is not None:
            fields["part"] = str(event.part_id)
        if event.status is not None:
            fields["status"] = str(event.status)
        if event.error is not None:
            fields["error"] = str(event.error)
        level = _LEVELS[event.kind]
        if event.status is not None and event.status.is_terminal:
            level = logging.INFO
        log_with_fields(self.logger, level, event.kind.value, **fields)
