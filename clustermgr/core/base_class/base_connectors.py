"""
Base connector abstractions for cluster transports.

A cluster connector is the execution engine behind the management API: it
accepts an OperationRequest and returns a PendingResult without blocking the
caller. Connectors own the concurrency they run on (an event loop thread);
concrete implementations live in `connectors/` and implement `execute()`.
"""

from __future__ import annotations

import abc
import asyncio
import threading
from typing import Any, Optional

from clustermgr.core.exceptions import TransportError
from clustermgr.core.pending import PendingResult
from clustermgr.models.request_model import OperationRequest


class BaseConnector(abc.ABC):
    """Common lifecycle and health-check contract for all connectors."""

    def __init__(self, name: str):
        self._name = name
        self._healthy: bool = False

    @property
    def name(self) -> str:
        return self._name

    @abc.abstractmethod
    async def initialize(self) -> None:
        """Allocate resources (connection pools, clients, etc.)."""

    @abc.abstractmethod
    async def shutdown(self) -> None:
        """Cleanly release all resources."""

    @abc.abstractmethod
    async def health_check(self) -> bool:
        """Perform a real remote-health check if possible."""

    def is_healthy(self) -> bool:
        """Fast, cached health indicator."""
        return self._healthy

    def _set_health(self, value: bool) -> None:
        self._healthy = value


class ClusterConnector(BaseConnector, abc.ABC):
    """
    Base abstraction for cluster management transports.

    ``start()`` spins up the connector's event loop thread and runs
    ``initialize()`` on it; ``submit()`` schedules ``execute()`` on that loop
    and hands back a PendingResult that completes exactly once.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lifecycle_lock = threading.Lock()

    @abc.abstractmethod
    async def execute(self, request: OperationRequest) -> Any:
        """
        Perform one request against the cluster.

        Returns the decoded result (ClusterInfo, list of BucketSettings,
        BucketSettings or bool) or raises a taxonomy error from core.exceptions.
        """

    @property
    def loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """Event loop the connector's I/O runs on (None until started)"""
        return self._loop

    def is_running(self) -> bool:
        return self._loop is not None and self._loop.is_running()

    def start(self, timeout: Optional[float] = None) -> "ClusterConnector":
        """Start the event loop thread and initialize the connector (idempotent)."""
        with self._lifecycle_lock:
            if self._thread is not None:
                return self
            loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=self._run_loop,
                args=(loop,),
                name=f"{self.name}-loop",
                daemon=True,
            )
            thread.start()
            self._loop, self._thread = loop, thread

        try:
            asyncio.run_coroutine_threadsafe(self.initialize(), loop).result(timeout)
        except BaseException:
            self.stop(timeout)
            raise
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Shut the connector down and stop its event loop thread.

        Raises:
            RuntimeError: If called from the connector's own loop thread
        """
        with self._lifecycle_lock:
            loop, thread = self._loop, self._thread
            if thread is not None and threading.current_thread() is thread:
                # waiting for shutdown here would block the loop it runs on
                raise RuntimeError(f"connector '{self.name}' cannot be stopped from its own loop thread")
            self._loop = self._thread = None
        if loop is None or thread is None:
            return

        try:
            asyncio.run_coroutine_threadsafe(self.shutdown(), loop).result(timeout)
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout)
            if not thread.is_alive():
                loop.close()

    def submit(self, request: OperationRequest) -> PendingResult[Any]:
        """Schedule ``request`` without blocking; the result completes on the connector loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return PendingResult.failed(
                TransportError(
                    f"connector '{self.name}' is not started",
                    operation=request.kind.value,
                    target=request.target,
                )
            )

        coroutine = self.execute(request)
        try:
            future = asyncio.run_coroutine_threadsafe(coroutine, loop)
        except RuntimeError as e:
            coroutine.close()
            return PendingResult.failed(
                TransportError(
                    f"connector '{self.name}' is shutting down: {e}",
                    operation=request.kind.value,
                    target=request.target,
                )
            )
        return PendingResult(future)

    def __enter__(self) -> "ClusterConnector":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            asyncio.set_event_loop(None)
