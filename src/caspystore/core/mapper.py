# caspystore/core/mapper.py

import logging
from typing import Any, Dict, Iterable, Iterator, Optional

from .connection import ConnectionManager
from .mapping import SchemaMapping
from .._internal import query_builder
from .._internal.accessors import FieldReader
from ..utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _row_to_dict(row: Any) -> Dict[str, Any]:
    """Aceita linhas do driver (namedtuple), dicionários ou objetos com _asdict()."""
    if isinstance(row, dict):
        return dict(row)
    if hasattr(row, '_asdict'):
        return row._asdict()
    raise TypeError(f"Formato de linha não suportado: {type(row)}")


class EntityMapper:
    """
    Mapeia um tipo de entidade para a sua tabela: salva, busca e remove por
    chave, e converte linhas de um cursor em instâncias.

    Construído uma vez por ``NativeObjectStore``; o CQL por chave e os leitores
    de campo são montados aqui e reaproveitados em todas as chamadas.
    """
    def __init__(self, entity_cls: type, mapping: SchemaMapping, conn: ConnectionManager):
        self.entity_cls = entity_cls
        self.mapping = mapping
        self.connection = conn
        self._key_field = mapping.require_primary_key()

        self._insert_cql = query_builder.build_insert_cql(mapping)
        self._select_cql = query_builder.build_select_by_key_cql(mapping)
        self._delete_cql = query_builder.build_delete_by_key_cql(mapping)

        self._readers = {
            descriptor.name: FieldReader.bind(entity_cls, descriptor.name)
            for descriptor in mapping.fields
        }
        self._column_to_field = {descriptor.column: descriptor.name for descriptor in mapping.fields}

    def __repr__(self) -> str:
        return f"<EntityMapper {self.entity_cls.__name__} -> {self.mapping.qualified_table}>"

    def to_params(self, entity: Any) -> list:
        """Valores de todos os campos mapeados, na ordem das colunas do INSERT."""
        params = [self._readers[descriptor.name].read(entity) for descriptor in self.mapping.fields]
        key_index = self.mapping.field_names.index(self._key_field.name)
        if params[key_index] is None:
            raise ValidationError(f"Primary key '{self._key_field.name}' cannot be None before saving.")
        return params

    def from_row(self, row: Any) -> Any:
        """
        Constrói a entidade a partir da linha. Campos mapeados ausentes da
        linha (fora da projeção) chegam como None.
        """
        data = dict.fromkeys(self.mapping.field_names)
        for column, value in _row_to_dict(row).items():
            field_name = self._column_to_field.get(column)
            if field_name is not None:
                data[field_name] = value
        return self.entity_cls(**data)

    def save(self, entity: Any) -> None:
        params = self.to_params(entity)
        self.connection.execute(self._insert_cql, params)
        logger.debug(f"Instância salva: {self.entity_cls.__name__}")

    def get(self, key: Any) -> Optional[Any]:
        result_set = self.connection.execute(self._select_cql, [key])
        row = result_set.one()
        if row is None:
            return None
        return self.from_row(row)

    def delete(self, key: Any) -> None:
        self.connection.execute(self._delete_cql, [key])
        logger.debug(f"Instância deletada: {self.entity_cls.__name__} chave={key!r}")

    def map(self, rows: Iterable[Any]) -> Iterator[Any]:
        """Sequência preguiçosa de entidades; consome o cursor uma única vez."""
        for row in rows:
            yield self.from_row(row)
