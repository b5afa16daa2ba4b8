"""
Common ground for management interfaces.

An interface drives a ClusterConnector (its worker) and reports every
operation it issues to an optional EventPublisher. The worker can be swapped
at runtime, e.g. to point the same manager at another cluster node.
"""
from __future__ import annotations

import time
from abc import ABC
from typing import Any, Callable, Dict, Optional

from clustermgr.core.base_class.base_connectors import ClusterConnector
from clustermgr.core.base_class.observer import (
    EventPublisher,
    EventType,
    ManagerEvent,
)
from clustermgr.core.exceptions import BucketNotFoundError, classify_failure
from clustermgr.core.pending import PendingResult
from clustermgr.models.request_model import OperationRequest


class BaseInterface(ABC):
    """Worker holder with event reporting and classified, tracked submission"""

    def __init__(
        self,
        worker: ClusterConnector,
        name: Optional[str] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        """
        Args:
            worker: Connector that executes the requests
            name: Name used in events (defaults to the worker's name)
            event_publisher: Receiver of operation events, if any
        """
        self._worker = worker
        self._name = name or worker.name
        self._event_publisher = event_publisher

    @property
    def name(self) -> str:
        return self._name

    @property
    def worker(self) -> ClusterConnector:
        return self._worker

    @property
    def event_publisher(self) -> Optional[EventPublisher]:
        return self._event_publisher

    def switch_worker(self, new_worker: ClusterConnector) -> None:
        """
        Route subsequent operations to ``new_worker``.

        Operations already submitted finish on the previous worker, which is
        neither started nor stopped here.
        """
        previous = self._worker.name
        self._worker = new_worker
        self.publish_event(
            EventType.WORKER_SWITCHED,
            "switch_worker",
            metadata={"old_worker": previous, "new_worker": new_worker.name},
        )

    def publish_event(
        self,
        event_type: EventType,
        operation_name: str,
        target: Optional[str] = None,
        success: bool = True,
        error: Optional[str] = None,
        duration_ms: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self._event_publisher is None:
            return
        self._event_publisher.publish(
            ManagerEvent(
                event_type=event_type,
                connector_name=self._worker.name,
                interface_name=self._name,
                operation_name=operation_name,
                target=target,
                success=success,
                error=error,
                duration_ms=duration_ms,
                metadata=metadata or {},
            )
        )

    def _execute_with_tracking(
        self,
        request: OperationRequest,
        on_not_found: Optional[Callable[[BucketNotFoundError], Any]] = None,
    ) -> PendingResult[Any]:
        """
        Submit ``request`` and return its classified, tracked result.

        Any failure, including one raised by ``submit`` itself, is turned into
        a taxonomy error carrying the operation and bucket. ``on_not_found``
        converts BucketNotFoundError into a value for operations where a
        missing bucket is an answer rather than an error.
        """
        operation_name, target = request.kind.value, request.target
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - started) * 1000

        self.publish_event(EventType.OPERATION_STARTED, operation_name, target)

        try:
            pending = self._worker.submit(request)
        except Exception as e:
            pending = PendingResult.failed(e)

        pending = pending.map_failure(lambda error: classify_failure(error, operation_name, target))
        if on_not_found is not None:
            pending = pending.recover(BucketNotFoundError, on_not_found)

        def completed(value: Any) -> Any:
            self.publish_event(
                EventType.OPERATION_COMPLETED, operation_name, target, duration_ms=elapsed_ms()
            )
            return value

        def failed(error: BaseException) -> Any:
            self.publish_event(
                EventType.OPERATION_FAILED,
                operation_name,
                target,
                success=False,
                error=str(error),
                duration_ms=elapsed_ms(),
            )
            raise error

        # events are published before waiters see the outcome
        return pending.then(on_value=completed, on_error=failed)

    def start(self, timeout: Optional[float] = None) -> None:
        self._worker.start(timeout)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._worker.stop(timeout)

    def is_healthy(self) -> bool:
        """Cached health of the current worker"""
        return self._worker.is_healthy()
