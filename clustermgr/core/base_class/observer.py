"""
Management events and their observers.

Managers publish an event when an operation starts, completes, fails or
times out, and when their connector is swapped. Events arrive on whichever
thread settled the operation (normally the connector loop thread), so
observers must be quick and thread-safe.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(str, Enum):
    OPERATION_STARTED = "operation_started"
    OPERATION_COMPLETED = "operation_completed"
    OPERATION_FAILED = "operation_failed"
    OPERATION_TIMED_OUT = "operation_timed_out"
    WORKER_SWITCHED = "worker_switched"


_EVENT_LEVELS = {
    EventType.OPERATION_STARTED: logging.DEBUG,
    EventType.OPERATION_COMPLETED: logging.INFO,
    EventType.OPERATION_FAILED: logging.ERROR,
    EventType.OPERATION_TIMED_OUT: logging.WARNING,
    EventType.WORKER_SWITCHED: logging.INFO,
}


@dataclass
class ManagerEvent:
    """One step in the life of a management operation"""

    event_type: EventType
    connector_name: str
    interface_name: Optional[str] = None
    operation_name: Optional[str] = None
    target: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_ms: Optional[float] = None
    success: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def metric_key(self) -> str:
        return f"{self.connector_name}.{self.operation_name or 'unknown'}"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form, used as ``extra`` by LoggingObserver"""
        data = asdict(self)
        data["event_type"] = self.event_type.value
        data["timestamp"] = self.timestamp.isoformat()
        return data


class EventObserver(ABC):

    @abstractmethod
    def on_event(self, event: ManagerEvent) -> None:
        """Handle one event; must not block"""


class EventPublisher:
    """Fans events out to subscribed observers, isolating their failures"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._observers: List[EventObserver] = []
        self._logger = logger or logging.getLogger(__name__)

    def subscribe(self, observer: EventObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: EventObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observers(self) -> List[EventObserver]:
        return list(self._observers)

    def publish(self, event: ManagerEvent) -> None:
        for observer in self.observers:
            try:
                observer.on_event(event)
            except Exception:
                # a broken observer must not fail the operation it reports on
                self._logger.warning(
                    "Observer %s failed on %s", type(observer).__name__, event.event_type.value,
                    exc_info=True,
                )


class LoggingObserver(EventObserver):
    """Writes each event as one log line; timeouts at WARNING, failures at ERROR"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def on_event(self, event: ManagerEvent) -> None:
        level = _EVENT_LEVELS.get(event.event_type, logging.INFO)
        if not event.success and event.event_type != EventType.OPERATION_TIMED_OUT:
            level = logging.ERROR

        owner = event.interface_name or event.connector_name
        call = f"{owner}::{event.operation_name or 'unknown'}"
        if event.target:
            call += f"({event.target})"

        parts = [f"[{event.event_type.value}]", call]
        if event.event_type == EventType.OPERATION_COMPLETED:
            parts.append("OK")
        elif not event.success:
            parts.append("FAILED")
        if event.duration_ms is not None:
            parts.append(f"in {event.duration_ms:.2f}ms")
        if event.error:
            parts.append(f"- {event.error}")

        self.logger.log(level, " ".join(parts), extra={"event": event.to_dict()})


class MetricsObserver(EventObserver):
    """Per ``connector.operation`` durations and failure counts of settled operations"""

    def __init__(self):
        self._durations: Dict[str, List[float]] = {}
        self._failures: Dict[str, int] = {}
        self._lock = threading.Lock()

    def on_event(self, event: ManagerEvent) -> None:
        if event.duration_ms is None:
            return
        key = event.metric_key
        with self._lock:
            self._durations.setdefault(key, []).append(event.duration_ms)
            if not event.success:
                self._failures[key] = self._failures.get(key, 0) + 1

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """``count``, ``failures``, ``avg_ms``, ``min_ms`` and ``max_ms`` per key"""
        with self._lock:
            return {
                key: {
                    "count": len(durations),
                    "failures": self._failures.get(key, 0),
                    "avg_ms": sum(durations) / len(durations),
                    "min_ms": min(durations),
                    "max_ms": max(durations),
                }
                for key, durations in self._durations.items()
            }

    def reset(self) -> None:
        with self._lock:
            self._durations.clear()
            self._failures.clear()
