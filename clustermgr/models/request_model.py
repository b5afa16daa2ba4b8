"""
Operation request - descriptor of a single management call handed to a connector.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from clustermgr.models.bucket_model import BucketSettings


class OperationKind(str, Enum):
    """Management operations; values are the operation names used in errors and events"""
    INFO = "info"
    LIST = "get_buckets"
    GET = "get_bucket"
    HAS = "has_bucket"
    INSERT = "insert_bucket"
    UPDATE = "update_bucket"
    REMOVE = "remove_bucket"

    @property
    def targets_bucket(self) -> bool:
        return self not in (OperationKind.INFO, OperationKind.LIST)


@dataclass(frozen=True)
class OperationRequest:
    """
    One management call. Owned by the call that creates it, never reused.

    ``timeout`` is an optional transport-level bound in seconds; the caller-facing
    deadline is enforced by whoever waits on the result.
    """

    kind: OperationKind
    name: Optional[str] = None
    settings: Optional[BucketSettings] = None
    timeout: Optional[float] = None

    @property
    def target(self) -> Optional[str]:
        """Bucket the request refers to, if any"""
        if self.name is not None:
            return self.name
        if self.settings is not None:
            return self.settings.name
        return None
