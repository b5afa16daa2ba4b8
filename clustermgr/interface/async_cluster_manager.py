"""
Asynchronous cluster manager - non-blocking management operations.

Every method submits exactly one request to the connector and returns a
PendingResult right away. Results can be awaited from asyncio code or waited
on from a thread; deadlines are left to the caller (see ClusterManager).

Insert, update and remove are acknowledged by the server before the work is
applied, so a successful result does not guarantee read-after-write.
"""
from typing import Any, Callable, Dict, List, Optional

from clustermgr.core.base_class.base_connectors import ClusterConnector
from clustermgr.core.base_class.observer import EventPublisher
from clustermgr.core.pending import PendingResult
from clustermgr.core.registry import register_interface
from clustermgr.interface.base import BaseInterface
from clustermgr.models.bucket_model import BucketSettings
from clustermgr.models.cluster_model import ClusterInfo
from clustermgr.models.request_model import OperationKind, OperationRequest

# What "bucket does not exist" means per operation. Operations missing here
# (update_bucket) report it as BucketNotFoundError.
ABSENT_BUCKET_RESULTS: Dict[OperationKind, Callable[[Any], Any]] = {
    OperationKind.GET: lambda _: None,
    OperationKind.HAS: lambda _: False,
    OperationKind.REMOVE: lambda _: False,
}


@register_interface("async-cluster-manager")
class AsyncClusterManager(BaseInterface):
    """
    High-level asynchronous interface for cluster management.

    Failures are delivered through the returned PendingResult as one of the
    errors from ``clustermgr.core.exceptions``, annotated with the operation
    name and bucket. Invalid arguments raise immediately.
    """

    def __init__(
        self,
        worker: ClusterConnector,
        name: Optional[str] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        """
        Initialize the manager.

        Args:
            worker: Cluster connector instance (e.g., CouchbaseRestConnector)
            name: Interface name (defaults to worker name)
            event_publisher: Optional event publisher for observability
        """
        super().__init__(worker, name, event_publisher)

    def info(self) -> PendingResult[ClusterInfo]:
        """Cluster-wide metadata"""
        return self._submit(OperationRequest(OperationKind.INFO))

    def get_buckets(self) -> PendingResult[List[BucketSettings]]:
        """Settings of all buckets in server order, possibly empty"""
        return self._submit(OperationRequest(OperationKind.LIST))

    def get_bucket(self, name: str) -> PendingResult[Optional[BucketSettings]]:
        """Settings of one bucket, or None when it does not exist"""
        return self._submit(OperationRequest(OperationKind.GET, name=_require_name(name)))

    def has_bucket(self, name: str) -> PendingResult[bool]:
        """Whether the bucket exists; absence resolves to False"""
        return self._submit(OperationRequest(OperationKind.HAS, name=_require_name(name)))

    def insert_bucket(self, settings: BucketSettings) -> PendingResult[BucketSettings]:
        """
        Create a bucket.

        Fails with BucketAlreadyExistsError when the name is taken.
        """
        return self._submit(
            OperationRequest(OperationKind.INSERT, settings=_require_settings(settings))
        )

    def update_bucket(self, settings: BucketSettings) -> PendingResult[BucketSettings]:
        """
        Replace the configuration of an existing bucket.

        Fails with BucketNotFoundError when there is no bucket of that name.
        """
        return self._submit(
            OperationRequest(OperationKind.UPDATE, settings=_require_settings(settings))
        )

    def remove_bucket(self, name: str) -> PendingResult[bool]:
        """Delete a bucket; True if the server acknowledged, False if it did not exist"""
        return self._submit(OperationRequest(OperationKind.REMOVE, name=_require_name(name)))

    def _submit(self, request: OperationRequest) -> PendingResult[Any]:
        return self._execute_with_tracking(
            request,
            on_not_found=ABSENT_BUCKET_RESULTS.get(request.kind),
        )


def _require_name(name: str) -> str:
    if not isinstance(name, str) or not name:
        raise ValueError("bucket name must be a non-empty string")
    return name


def _require_settings(settings: BucketSettings) -> BucketSettings:
    if not isinstance(settings, BucketSettings):
        raise TypeError(f"expected BucketSettings, got {type(settings).__name__}")
    return settings
