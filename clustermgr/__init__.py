"""
clustermgr - bucket management client for Couchbase-style clusters.

Blocking use goes through ClusterManager, non-blocking use through the
AsyncClusterManager returned by ``ClusterManager.async_()``.
"""

__version__ = "1.0.0"

from clustermgr.config import Settings, get_settings, reset_settings
from clustermgr.core import (
    BucketAlreadyExistsError,
    BucketNotFoundError,
    ClusterManagerError,
    DecodeError,
    ManagementTimeoutError,
    PendingResult,
    TimeUnit,
    TransportError,
)
from clustermgr.core.factories import ConnectorFactory, create_cluster_manager
from clustermgr.interface import AsyncClusterManager, ClusterManager
from clustermgr.models import BucketSettings, BucketType, ClusterInfo, NodeInfo

__all__ = [
    '__version__',
    'Settings',
    'get_settings',
    'reset_settings',
    'BucketAlreadyExistsError',
    'BucketNotFoundError',
    'ClusterManagerError',
    'DecodeError',
    'ManagementTimeoutError',
    'PendingResult',
    'TimeUnit',
    'TransportError',
    'ConnectorFactory',
    'create_cluster_manager',
    'AsyncClusterManager',
    'ClusterManager',
    'BucketSettings',
    'BucketType',
    'ClusterInfo',
    'NodeInfo',
]
