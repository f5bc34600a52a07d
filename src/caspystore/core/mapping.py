# caspystore/core/mapping.py

"""
Mapeamento entre um tipo de entidade e uma tabela do Cassandra.

Um ``SchemaMapping`` é imutável depois de construído e compartilhado, somente
leitura, por todas as operações de um mesmo tipo de entidade.
"""

import logging
import os
import tomllib
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from ..utils.exceptions import MappingConfigurationError

logger = logging.getLogger(__name__)

PRIMARY_KEY_PROPERTY = "primarykey"
COLUMN_PROPERTY = "column"
TYPE_PROPERTY = "type"
DEFAULT_CQL_TYPE = "text"


def parse_bool_property(value: Optional[str]) -> bool:
    """Só a string 'true' (sem diferenciar maiúsculas) é verdadeira."""
    return value is not None and value.lower() == "true"


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FieldDescriptor(BaseModel):
    """Um campo da entidade e suas propriedades nomeadas (todas strings)."""

    model_config = ConfigDict(frozen=True)

    name: str
    properties: Dict[str, str] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("O nome do campo não pode ser vazio")
        return value

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_as_strings(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): _stringify(v) for k, v in value.items()}
        return value

    def get_property(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.properties.get(name, default)

    @property
    def is_primary_key(self) -> bool:
        return parse_bool_property(self.properties.get(PRIMARY_KEY_PROPERTY))

    @property
    def column(self) -> str:
        return self.properties.get(COLUMN_PROPERTY) or self.name

    @property
    def cql_type(self) -> str:
        return self.properties.get(TYPE_PROPERTY) or DEFAULT_CQL_TYPE


class SchemaMapping(BaseModel):
    """
    Descreve como um tipo de entidade corresponde a uma tabela.

    A ordem de ``fields`` é a ordem declarada e é significativa: se mais de um
    campo estiver marcado como chave primária, vale o primeiro.
    """

    model_config = ConfigDict(frozen=True)

    table: str
    keyspace: Optional[str] = None
    fields: Tuple[FieldDescriptor, ...] = ()

    @field_validator("fields")
    @classmethod
    def _unique_names(cls, value: Tuple[FieldDescriptor, ...]) -> Tuple[FieldDescriptor, ...]:
        seen = set()
        for descriptor in value:
            if descriptor.name in seen:
                raise ValueError(f"Campo duplicado no mapeamento: '{descriptor.name}'")
            seen.add(descriptor.name)
        return value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaMapping":
        """
        Constrói um mapeamento a partir de um dicionário.

        Cada campo pode vir como ``{"name": ..., "properties": {...}}`` ou com as
        propriedades "achatadas" ao lado do nome, que é o formato do TOML::

            {"name": "id", "primarykey": true, "type": "text"}
        """
        try:
            raw_fields = data.get("fields", [])
            fields = []
            for raw in raw_fields:
                raw = dict(raw)
                name = raw.pop("name", None)
                properties = dict(raw.pop("properties", {}))
                properties.update(raw)
                fields.append({"name": name, "properties": properties})
            return cls.model_validate({
                "table": data.get("table"),
                "keyspace": data.get("keyspace"),
                "fields": fields,
            })
        except (PydanticValidationError, TypeError, AttributeError) as e:
            raise MappingConfigurationError(f"Mapeamento inválido: {e}") from e

    # --- Consultas ao mapeamento ---

    def primary_key_field(self) -> Optional[FieldDescriptor]:
        """Primeiro campo, na ordem declarada, marcado como chave primária."""
        for descriptor in self.fields:
            if descriptor.is_primary_key:
                return descriptor
        return None

    def require_primary_key(self) -> FieldDescriptor:
        descriptor = self.primary_key_field()
        if descriptor is None:
            raise MappingConfigurationError(
                f"Nenhum campo marcado como '{PRIMARY_KEY_PROPERTY}' no mapeamento da tabela '{self.table}'"
            )
        return descriptor

    def field(self, name: str) -> FieldDescriptor:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        raise ValueError(f"Campo '{name}' não existe no mapeamento da tabela '{self.table}'")

    def has_field(self, name: str) -> bool:
        return any(descriptor.name == name for descriptor in self.fields)

    def column_for(self, name: str) -> str:
        return self.field(name).column

    @property
    def field_names(self) -> List[str]:
        return [descriptor.name for descriptor in self.fields]

    @property
    def columns(self) -> List[str]:
        return [descriptor.column for descriptor in self.fields]

    @property
    def qualified_table(self) -> str:
        if self.keyspace:
            return f"{self.keyspace}.{self.table}"
        return self.table


def load_mapping(path: str) -> SchemaMapping:
    """
    Carrega um mapeamento de um arquivo TOML.

    Formato::

        [mapping]
        keyspace = "demo"
        table = "users"

        [[mapping.fields]]
        name = "id"
        primarykey = true

        [[mapping.fields]]
        name = "name"
        column = "full_name"
    """
    if not os.path.exists(path):
        raise MappingConfigurationError(f"Arquivo de mapeamento não encontrado: {path}")
    try:
        with open(path, "rb") as f:
            document = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise MappingConfigurationError(f"Arquivo de mapeamento inválido '{path}': {e}") from e

    if "mapping" not in document:
        raise MappingConfigurationError(f"Tabela [mapping] ausente em '{path}'")

    mapping = SchemaMapping.from_dict(document["mapping"])
    logger.debug(f"Mapeamento carregado de {path}: tabela {mapping.qualified_table}")
    return mapping
