# caspystore/_internal/schema_sync.py

import logging
from typing import Optional

from . import query_builder
from ..core.connection import ConnectionManager, connection as default_connection
from ..core.mapping import SchemaMapping

logger = logging.getLogger(__name__)


class SchemaAssurance:
    """Cria, verifica e remove a tabela descrita por um mapeamento."""

    def __init__(self, conn: Optional[ConnectionManager] = None):
        self.connection = conn or default_connection

    def create_if_missing(self, mapping: SchemaMapping) -> None:
        cql = query_builder.build_create_table_cql(mapping)
        self.connection.execute(cql)
        logger.info(f"Tabela '{mapping.qualified_table}' garantida")

    def exists(self, mapping: SchemaMapping) -> bool:
        keyspace = mapping.keyspace or self.connection.keyspace
        if not keyspace:
            logger.warning(f"Sem keyspace para verificar a tabela '{mapping.table}'")
            return False
        cluster = self.connection.cluster
        if cluster is None:
            return False
        keyspace_meta = cluster.metadata.keyspaces.get(keyspace)
        if keyspace_meta is None:
            return False
        return mapping.table in keyspace_meta.tables

    def drop(self, mapping: SchemaMapping) -> None:
        self.connection.execute(query_builder.build_drop_table_cql(mapping))
        logger.info(f"Tabela '{mapping.qualified_table}' removida")
