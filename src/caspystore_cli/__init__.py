"""
CaspyStore CLI - Command line interface for CaspyStore.

This package provides a CLI for inspecting schema mappings, managing
their tables and querying data through the native object store.
"""

__version__ = "0.1.0"

from .main import app

__all__ = ['app', '__version__']
