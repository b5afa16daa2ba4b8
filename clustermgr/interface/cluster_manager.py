"""
Cluster Manager - blocking facade over AsyncClusterManager.

Each call issues exactly one asynchronous operation and waits for it up to a
deadline. When the deadline passes first, ManagementTimeoutError is raised and
the operation is left running; it may still take effect on the server.
"""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable, List, Optional

from clustermgr.config.config import Settings, get_settings
from clustermgr.core.base_class.observer import EventType
from clustermgr.core.exceptions import (
    ClusterManagerError,
    ManagementTimeoutError,
    classify_failure,
)
from clustermgr.core.pending import PendingResult
from clustermgr.core.time_unit import Timeout, TimeUnit, to_seconds
from clustermgr.interface.async_cluster_manager import AsyncClusterManager
from clustermgr.models.bucket_model import BucketSettings
from clustermgr.models.cluster_model import ClusterInfo


class ClusterManager:
    """
    Synchronous cluster management API.

    ``timeout`` arguments are amounts in ``unit`` or a ``timedelta``; None
    falls back to the default management timeout (75 seconds unless
    configured otherwise).

    Example:
        with ClusterManager.connect() as manager:
            if not manager.has_bucket("travel"):
                manager.insert_bucket(BucketSettings(name="travel", quota=256))
    """

    def __init__(
        self,
        async_manager: AsyncClusterManager,
        default_timeout: Optional[float] = None,
        get_logger: Optional[Callable[[], logging.Logger]] = None,
    ):
        self._async = async_manager
        if default_timeout is None:
            default_timeout = get_settings().cluster_management_timeout
        self.default_timeout = to_seconds(default_timeout)
        self.logger = get_logger() if get_logger else logging.getLogger(__name__)

    @classmethod
    def connect(cls, settings: Optional[Settings] = None) -> "ClusterManager":
        """Build a manager with its own connector, started and ready for use"""
        from clustermgr.core.factories import create_cluster_manager

        return create_cluster_manager(settings)

    def async_(self) -> AsyncClusterManager:
        """The asynchronous manager behind this facade (same object on every call)"""
        return self._async

    # =========================================================================
    # Management operations
    # =========================================================================

    def info(self, timeout: Optional[Timeout] = None, unit: TimeUnit = TimeUnit.SECONDS) -> ClusterInfo:
        seconds = self._resolve(timeout, unit)
        return self._wait(self._async.info(), seconds, "info")

    def get_buckets(
        self, timeout: Optional[Timeout] = None, unit: TimeUnit = TimeUnit.SECONDS
    ) -> List[BucketSettings]:
        seconds = self._resolve(timeout, unit)
        return self._wait(self._async.get_buckets(), seconds, "get_buckets")

    def get_bucket(
        self, name: str, timeout: Optional[Timeout] = None, unit: TimeUnit = TimeUnit.SECONDS
    ) -> Optional[BucketSettings]:
        """Settings of the named bucket, None if there is no such bucket"""
        seconds = self._resolve(timeout, unit)
        return self._wait(self._async.get_bucket(name), seconds, "get_bucket", name)

    def has_bucket(
        self, name: str, timeout: Optional[Timeout] = None, unit: TimeUnit = TimeUnit.SECONDS
    ) -> bool:
        seconds = self._resolve(timeout, unit)
        return self._wait(self._async.has_bucket(name), seconds, "has_bucket", name)

    def insert_bucket(
        self,
        settings: BucketSettings,
        timeout: Optional[Timeout] = None,
        unit: TimeUnit = TimeUnit.SECONDS,
    ) -> BucketSettings:
        """
        Create a bucket.

        Raises:
            BucketAlreadyExistsError: A bucket with this name already exists
        """
        seconds = self._resolve(timeout, unit)
        return self._wait(
            self._async.insert_bucket(settings), seconds, "insert_bucket", settings.name
        )

    def update_bucket(
        self,
        settings: BucketSettings,
        timeout: Optional[Timeout] = None,
        unit: TimeUnit = TimeUnit.SECONDS,
    ) -> BucketSettings:
        """
        Update an existing bucket.

        Raises:
            BucketNotFoundError: No bucket with this name exists
        """
        seconds = self._resolve(timeout, unit)
        return self._wait(
            self._async.update_bucket(settings), seconds, "update_bucket", settings.name
        )

    def remove_bucket(
        self, name: str, timeout: Optional[Timeout] = None, unit: TimeUnit = TimeUnit.SECONDS
    ) -> bool:
        """True if the server acknowledged the removal, False if the bucket did not exist"""
        seconds = self._resolve(timeout, unit)
        return self._wait(self._async.remove_bucket(name), seconds, "remove_bucket", name)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> "ClusterManager":
        self._async.start()
        return self

    def close(self) -> None:
        """Stop the underlying connector; pending operations are abandoned"""
        self._async.stop()

    def __enter__(self) -> "ClusterManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve(self, timeout: Optional[Timeout], unit: TimeUnit) -> float:
        return to_seconds(timeout, unit, default=self.default_timeout)

    def _wait(
        self,
        pending: PendingResult[Any],
        seconds: float,
        operation: str,
        target: Optional[str] = None,
    ) -> Any:
        try:
            return pending.wait(seconds)
        except ClusterManagerError as e:
            e.annotate(operation, target)
            self.logger.error(f"{e}")
            raise
        except concurrent.futures.TimeoutError:
            # the timer fired first; a completion racing in afterwards does not count
            self.logger.warning(
                f"{operation} did not complete within {seconds:g}s (target={target})"
            )
            self._async.publish_event(
                EventType.OPERATION_TIMED_OUT,
                operation,
                target,
                success=False,
                duration_ms=seconds * 1000,
            )
            raise ManagementTimeoutError(seconds, operation=operation, target=target) from None
        except Exception as e:
            classified = classify_failure(e, operation, target)
            self.logger.error(f"{classified}")
            raise classified from e
