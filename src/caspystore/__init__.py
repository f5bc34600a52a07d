"""
CaspyStore - native object store for Apache Cassandra.

Maps typed Python entities to CQL rows: CRUD by key, query-driven
bulk read, delete and update.
"""

__version__ = "0.1.0"

from .core import (
    FieldDescriptor, SchemaMapping, load_mapping,
    Query,
    ConnectionManager, connect, disconnect,
    DeleteByQueryResult, KeyedResult,
    KeyResolver, EntityMapper, NativeObjectStore,
    generate_entity_model,
)
from .core.connection import connection
from ._internal.accessors import KeyExtractable

__all__ = [
    'FieldDescriptor', 'SchemaMapping', 'load_mapping',
    'Query',
    'ConnectionManager', 'connect', 'disconnect', 'connection',
    'DeleteByQueryResult', 'KeyedResult',
    'KeyResolver', 'EntityMapper', 'NativeObjectStore', 'KeyExtractable',
    'generate_entity_model',
    '__version__',
]
