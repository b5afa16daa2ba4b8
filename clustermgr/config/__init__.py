"""
Config module exports - Centralized imports for configuration functionality.
"""

from .config import Settings, get_settings, reset_settings
from .cluster_config import ClusterSettings
from .logging_config import LoggingSettings

__all__ = [
    'Settings',
    'get_settings',
    'reset_settings',
    'ClusterSettings',
    'LoggingSettings',
]
