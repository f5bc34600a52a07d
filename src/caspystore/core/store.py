# caspystore/core/store.py

import logging
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from .connection import ConnectionManager, connection as default_connection
from .key_resolver import KeyResolver
from .mapper import EntityMapper
from .mapping import SchemaMapping
from .query import Query
from .result import DeleteByQueryResult, KeyedResult
from .._internal import query_builder
from .._internal.schema_sync import SchemaAssurance
from ..utils.exceptions import MultipleResultsError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NativeObjectStore(Generic[T]):
    """
    Persistência de entidades cujo mapeamento linha <-> objeto é delegado a um
    ``EntityMapper``, em vez de acesso coluna a coluna.

    Uma instância por (tipo de entidade, mapeamento). A construção garante a
    tabela e monta o mapper e o resolvedor de chaves, que ficam com o store
    durante toda a sua vida. Não há estado mutável por chamada nem locks:
    a segurança entre threads é a da sessão do driver.
    """
    def __init__(
        self,
        entity_cls: Type[T],
        mapping: SchemaMapping,
        conn: Optional[ConnectionManager] = None,
        auto_create: bool = True,
    ):
        self.entity_cls = entity_cls
        self.mapping = mapping
        self.connection = conn or default_connection
        self.schema = SchemaAssurance(self.connection)

        if auto_create:
            self.schema.create_if_missing(mapping)

        self.mapper = EntityMapper(entity_cls, mapping, self.connection)
        self.key_resolver = KeyResolver(entity_cls, mapping)

    def __repr__(self) -> str:
        return f"<NativeObjectStore {self.entity_cls.__name__} table={self.mapping.qualified_table}>"

    def _execute(self, cql: str, params: list):
        try:
            # Sem parâmetros o texto vai direto, sem prepare
            if len(params) == 0:
                return self.connection.execute(cql)
            return self.connection.execute(cql, params)
        except Exception as e:
            logger.error(f"Erro ao executar '{cql}': {e}")
            raise

    # --- Operações por chave ---

    def put(self, key: Any, value: T) -> None:
        logger.debug(f"Objeto salvo com chave: {key!r} e valor: {value!r}")
        self.mapper.save(value)

    def get(self, key: Any, fields: Optional[Sequence[str]] = None, strict: bool = False) -> Optional[T]:
        """
        Busca por chave primária.

        Sem ``fields`` usa a busca direta do mapper. Com ``fields`` monta um
        SELECT só com essas colunas e retorna a primeira entidade na ordem do
        cursor; linhas adicionais são ignoradas, a menos que ``strict=True``,
        que lança ``MultipleResultsError``.
        """
        if fields is None:
            obj = self.mapper.get(key)
            if obj is not None:
                logger.debug(f"Objeto encontrado para a chave: {key!r}")
            else:
                logger.debug(f"Objeto não encontrado para a chave: {key!r}")
            return obj

        cql, params = query_builder.build_select_fields_cql(self.mapping, fields, key)
        result_set = self._execute(cql, params)
        objects = list(self.mapper.map(result_set))
        if not objects:
            logger.debug(f"Objeto não encontrado para a chave: {key!r}")
            return None
        if strict and len(objects) > 1:
            raise MultipleResultsError(
                f"{len(objects)} linhas retornadas para a chave {key!r} em {self.mapping.qualified_table}"
            )
        logger.debug(f"Objeto encontrado para a chave: {key!r}")
        return objects[0]

    def delete(self, key: Any) -> bool:
        """Remove por chave. Retorna True mesmo que a linha não existisse."""
        logger.debug(f"Objeto deletado para a chave: {key!r}")
        self.mapper.delete(key)
        return True

    # --- Operações por query ---

    def new_query(self) -> Query:
        return Query()

    def delete_by_query(self, query: Query) -> DeleteByQueryResult:
        cql, params = query_builder.build_delete_cql(self.mapping, query)
        result_set = self._execute(cql, params)
        logger.debug(f"Delete by query aplicado: {self.connection.was_applied(result_set)}")
        logger.info("Delete by query não retorna a quantidade de linhas removidas.")
        return DeleteByQueryResult(success=True, count=None)

    def update_by_query(self, query: Query) -> bool:
        cql, params = query_builder.build_update_cql(self.mapping, query)
        result_set = self._execute(cql, params)
        applied = self.connection.was_applied(result_set)
        logger.debug(f"Update by query aplicado: {applied}")
        return applied

    def execute(self, query: Query) -> KeyedResult:
        """
        Executa a leitura e devolve as entidades indexadas pela chave, na ordem
        em que o cursor as produziu. O cursor é totalmente consumido aqui.
        """
        result = KeyedResult(query)
        cql, params = query_builder.build_select_cql(self.mapping, query)
        result_set = self._execute(cql, params)
        for entity in self.mapper.map(result_set):
            result.add(self.key_resolver.resolve(entity), entity)
        logger.debug(f"Query retornou {len(result)} objetos de {self.mapping.qualified_table}")
        return result

    # --- Schema ---

    def create_schema(self) -> None:
        self.schema.create_if_missing(self.mapping)

    def schema_exists(self) -> bool:
        return self.schema.exists(self.mapping)

    def delete_schema(self) -> None:
        self.schema.drop(self.mapping)

    def close(self) -> None:
        # A sessão pertence ao ConnectionManager
        logger.debug(f"Store fechado: {self!r}")
