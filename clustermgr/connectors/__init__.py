"""
Connectors module exports - Centralized imports for connector functionality.
"""

from .couchbase_rest_connector import CouchbaseRestConnector

__all__ = [
    'CouchbaseRestConnector',
]
