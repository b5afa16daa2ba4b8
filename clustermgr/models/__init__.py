"""
Models module exports - Centralized imports for data models.
"""

from .bucket_model import BucketSettings, BucketType
from .cluster_model import ClusterInfo, NodeInfo
from .request_model import OperationKind, OperationRequest

__all__ = [
    'BucketSettings',
    'BucketType',
    'ClusterInfo',
    'NodeInfo',
    'OperationKind',
    'OperationRequest',
]
