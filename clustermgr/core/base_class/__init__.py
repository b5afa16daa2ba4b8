"""
Core base classes for connectors.

Provides:
- Base connector abstractions
- Observer hooks for manager events
"""
from __future__ import annotations

from .base_connectors import (
    BaseConnector,
    ClusterConnector,
)

from .observer import (
    EventType,
    ManagerEvent,
    EventObserver,
    EventPublisher,
    LoggingObserver,
    MetricsObserver,
)

__all__ = [
    "BaseConnector",
    "ClusterConnector",
    "EventType",
    "ManagerEvent",
    "EventObserver",
    "EventPublisher",
    "LoggingObserver",
    "MetricsObserver",
]
