# caspystore/core/entity.py

"""
Geração de um tipo de entidade (modelo Pydantic) a partir de um mapeamento,
para quem não tem uma classe de domínio própria (ex: a CLI).
"""

import datetime
import decimal
import uuid
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, create_model

from .mapping import SchemaMapping

CQL_TO_PYTHON: Dict[str, type] = {
    'text': str,
    'varchar': str,
    'ascii': str,
    'int': int,
    'bigint': int,
    'smallint': int,
    'tinyint': int,
    'varint': int,
    'counter': int,
    'float': float,
    'double': float,
    'decimal': decimal.Decimal,
    'boolean': bool,
    'uuid': uuid.UUID,
    'timeuuid': uuid.UUID,
    'timestamp': datetime.datetime,
    'date': datetime.date,
    'blob': bytes,
}


class Record(BaseModel):
    """Base dos modelos gerados: aceita só os campos do mapeamento."""
    model_config = ConfigDict(extra='forbid')


def python_type_for(cql_type: str) -> Any:
    return CQL_TO_PYTHON.get(cql_type.strip().lower(), Any)


def generate_entity_model(mapping: SchemaMapping, name: Optional[str] = None) -> Type[Record]:
    """Todos os campos são opcionais: leituras com projeção trazem só parte deles."""
    model_name = name or ''.join(part.capitalize() for part in mapping.table.split('_')) or 'Record'
    field_definitions: Dict[str, Tuple[Any, Any]] = {}
    for descriptor in mapping.fields:
        py_type = python_type_for(descriptor.cql_type)
        field_definitions[descriptor.name] = (Optional[py_type], None)
    return create_model(model_name, __base__=Record, **field_definitions)
