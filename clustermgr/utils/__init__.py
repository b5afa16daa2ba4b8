"""
Utils module exports - logging setup shared by all components.
"""

from .logging import get_logger, get_logger_from_config, resolve_level, setup_logger

__all__ = [
    'get_logger',
    'get_logger_from_config',
    'resolve_level',
    'setup_logger',
]
