"""
Core module exports - error taxonomy, pending results, time units and registries.

Factories live in ``clustermgr.core.factories`` and are imported from there.
"""

from .exceptions import (
    BucketAlreadyExistsError,
    BucketNotFoundError,
    ClusterManagerError,
    DecodeError,
    ManagementTimeoutError,
    TransportError,
    classify_failure,
)
from .pending import PendingResult
from .registry import (
    get_all_connectors,
    get_connector_class,
    get_interface_class,
    register_connector,
    register_interface,
)
from .time_unit import Timeout, TimeUnit, to_seconds

__all__ = [
    'BucketAlreadyExistsError',
    'BucketNotFoundError',
    'ClusterManagerError',
    'DecodeError',
    'ManagementTimeoutError',
    'TransportError',
    'classify_failure',
    'PendingResult',
    'get_all_connectors',
    'get_connector_class',
    'get_interface_class',
    'register_connector',
    'register_interface',
    'Timeout',
    'TimeUnit',
    'to_seconds',
]
