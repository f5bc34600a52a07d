"""
Utility modules for CaspyStore.

This module contains utility classes and functions including
exceptions, configuration and logging setup.
"""

from .logging import setup_logging, get_logger
from .config import get_config

__all__ = [
    'setup_logging', 'get_logger', 'get_config'
]
