"""
Core functionality for CaspyStore.

This module contains the schema mapping, query description, connection
handling and the native object store built on top of them.
"""

from .mapping import FieldDescriptor, SchemaMapping, load_mapping
from .query import Query
from .connection import ConnectionManager, connect, disconnect
from .result import DeleteByQueryResult, KeyedResult
from .key_resolver import KeyResolver
from .mapper import EntityMapper
from .store import NativeObjectStore
from .entity import generate_entity_model

__all__ = [
    'FieldDescriptor', 'SchemaMapping', 'load_mapping',
    'Query',
    'ConnectionManager', 'connect', 'disconnect',
    'DeleteByQueryResult', 'KeyedResult',
    'KeyResolver', 'EntityMapper', 'NativeObjectStore',
    'generate_entity_model',
]
