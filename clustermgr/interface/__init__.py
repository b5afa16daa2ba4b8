"""
Interface module exports - high-level managers over cluster connectors.
"""

from .base import BaseInterface
from .async_cluster_manager import AsyncClusterManager
from .cluster_manager import ClusterManager

__all__ = [
    'BaseInterface',
    'AsyncClusterManager',
    'ClusterManager',
]
