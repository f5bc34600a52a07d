# caspystore/core/connection.py

import logging
from typing import Any, Dict, List, Optional, Sequence

from cassandra.cluster import Cluster, NoHostAvailable
from cassandra.auth import PlainTextAuthProvider

from ..utils.exceptions import ConnectionError

logger = logging.getLogger(__name__)

APPLIED_COLUMN = '[applied]'


class ConnectionManager:
    """
    Mantém o cluster e a sessão do Cassandra e executa statements.

    ``execute`` tem dois caminhos: sem parâmetros o texto CQL é enviado como
    está; com parâmetros ele é preparado uma vez (cache por texto) e executado
    com os valores posicionais.
    """
    def __init__(self):
        self.cluster: Optional[Cluster] = None
        self.session = None
        self.keyspace: Optional[str] = None
        self._prepared_statement_cache: Dict[str, Any] = {}

    @property
    def is_connected(self) -> bool:
        return self.session is not None

    def connect(
        self,
        contact_points: Optional[List[str]] = None,
        port: int = 9042,
        keyspace: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        **kwargs: Any,
    ):
        """Conecta ao cluster e, opcionalmente, define o keyspace da sessão."""
        contact_points = contact_points or ['127.0.0.1']
        if username is not None:
            kwargs['auth_provider'] = PlainTextAuthProvider(username=username, password=password)
        try:
            self.cluster = Cluster(contact_points=contact_points, port=port, **kwargs)
            self.session = self.cluster.connect()
        except NoHostAvailable as e:
            self.cluster = None
            self.session = None
            raise ConnectionError(f"Não foi possível conectar ao Cassandra em {contact_points}:{port}: {e}") from e

        if keyspace:
            self.use_keyspace(keyspace)
        logger.info(f"Conectado ao Cassandra em {contact_points}:{port} (keyspace: {keyspace})")
        return self.session

    def use_keyspace(self, keyspace: str):
        session = self.get_session()
        session.set_keyspace(keyspace)
        self.keyspace = keyspace
        # Statements preparados ficam atrelados ao keyspace anterior
        self._prepared_statement_cache.clear()

    def disconnect(self):
        if self.cluster is not None:
            self.cluster.shutdown()
            logger.info("Desconectado do Cassandra")
        self.cluster = None
        self.session = None
        self.keyspace = None
        self._prepared_statement_cache.clear()

    def get_session(self):
        if self.session is None:
            raise ConnectionError("Não há conexão ativa com o Cassandra. Chame connect() primeiro.")
        return self.session

    def prepare(self, cql: str):
        """Prepara o statement, reaproveitando o cache por texto CQL."""
        prepared = self._prepared_statement_cache.get(cql)
        if prepared is None:
            prepared = self.get_session().prepare(cql)
            self._prepared_statement_cache[cql] = prepared
        return prepared

    def execute(self, cql: str, params: Optional[Sequence[Any]] = None):
        """Executa um statement e retorna o ResultSet do driver."""
        session = self.get_session()
        if not params:
            logger.debug(f"Executando CQL: {cql}")
            return session.execute(cql)
        logger.debug(f"Executando CQL: {cql} com parâmetros: {list(params)}")
        return session.execute(self.prepare(cql), list(params))

    def was_applied(self, result) -> bool:
        return was_applied(result)


def was_applied(result) -> bool:
    """
    Indica se o Cassandra aplicou o statement.

    Só statements condicionais (IF ...) retornam a coluna ``[applied]``; os
    demais são sempre aplicados.
    """
    column_names = getattr(result, 'column_names', None)
    if not column_names or column_names[0] != APPLIED_COLUMN:
        return True
    return bool(result.was_applied)


# Instância padrão, usada quando nenhuma conexão é passada explicitamente
connection = ConnectionManager()


def connect(**kwargs: Any):
    return connection.connect(**kwargs)


def disconnect():
    connection.disconnect()


def get_session():
    return connection.get_session()


def execute(cql: str, params: Optional[Sequence[Any]] = None):
    return connection.execute(cql, params)
