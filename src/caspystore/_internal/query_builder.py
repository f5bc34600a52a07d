# caspystore/_internal/query_builder.py

"""
Geração de CQL parametrizado a partir de um ``SchemaMapping`` e de uma ``Query``.

Todas as funções ``build_*`` que recebem valores retornam ``(cql, params)``,
com ``params`` na mesma ordem dos marcadores ``?`` do texto.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.mapping import SchemaMapping
from ..core.query import Query

_OPERATORS = {
    'exact': '=',
    'gt': '>',
    'gte': '>=',
    'lt': '<',
    'lte': '<=',
    'contains': 'CONTAINS',
}


def _split_filter_key(key: str) -> Tuple[str, str]:
    if '__' in key:
        field_name, op = key.rsplit('__', 1)
        return field_name, op
    return key, 'exact'


def _build_where_clause(mapping: SchemaMapping, filters: Optional[Dict[str, Any]]) -> Tuple[List[str], List[Any]]:
    """Traduz filtros ``campo__op`` (nomes de campo) em cláusulas sobre colunas."""
    clauses: List[str] = []
    params: List[Any] = []
    for key, value in (filters or {}).items():
        field_name, op = _split_filter_key(key)
        column = mapping.column_for(field_name)
        if op == 'in':
            if not isinstance(value, (list, tuple, set)):
                raise TypeError(f"O valor para o filtro '__in' deve ser uma lista, tupla ou set, recebido: {type(value)}")
            values = list(value)
            placeholders = ', '.join('?' for _ in values)
            clauses.append(f"{column} IN ({placeholders})")
            params.extend(values)
        elif op in _OPERATORS:
            clauses.append(f"{column} {_OPERATORS[op]} ?")
            params.append(value)
        else:
            raise ValueError(f"Operador de filtro não suportado: '{op}'")
    return clauses, params


def _build_query_where(mapping: SchemaMapping, query: Query) -> Tuple[List[str], List[Any]]:
    """Chave, intervalo de chave e filtros, nesta ordem."""
    clauses: List[str] = []
    params: List[Any] = []
    start_key, end_key = query.key_bounds
    if query.has_key or start_key is not None or end_key is not None:
        key_column = mapping.require_primary_key().column
        if query.has_key:
            clauses.append(f"{key_column} = ?")
            params.append(query.key_value)
        if start_key is not None:
            clauses.append(f"{key_column} >= ?")
            params.append(start_key)
        if end_key is not None:
            clauses.append(f"{key_column} <= ?")
            params.append(end_key)

    filter_clauses, filter_params = _build_where_clause(mapping, query.filters)
    clauses.extend(filter_clauses)
    params.extend(filter_params)
    return clauses, params


def _projection(mapping: SchemaMapping, fields: Optional[Sequence[str]]) -> str:
    if not fields:
        return '*'
    return ', '.join(mapping.column_for(name) for name in fields)


def _build_order_by(mapping: SchemaMapping, ordering: Sequence[str]) -> str:
    parts = []
    for name in ordering:
        if name.startswith('-'):
            parts.append(f"{mapping.column_for(name[1:])} DESC")
        else:
            parts.append(f"{mapping.column_for(name)} ASC")
    return ', '.join(parts)


# --- Statements por chave (usados pelo EntityMapper) ---

def build_insert_cql(mapping: SchemaMapping) -> str:
    columns = mapping.columns
    placeholders = ', '.join('?' for _ in columns)
    return f"INSERT INTO {mapping.qualified_table} ({', '.join(columns)}) VALUES ({placeholders})"


def build_select_by_key_cql(mapping: SchemaMapping) -> str:
    key_column = mapping.require_primary_key().column
    return f"SELECT * FROM {mapping.qualified_table} WHERE {key_column} = ?"


def build_delete_by_key_cql(mapping: SchemaMapping) -> str:
    key_column = mapping.require_primary_key().column
    return f"DELETE FROM {mapping.qualified_table} WHERE {key_column} = ?"


# --- Statements dirigidos por Query ---

def build_select_fields_cql(mapping: SchemaMapping, fields: Optional[Sequence[str]], key: Any) -> Tuple[str, List[Any]]:
    """SELECT limitado a ``fields`` para uma única chave."""
    key_column = mapping.require_primary_key().column
    cql = f"SELECT {_projection(mapping, fields)} FROM {mapping.qualified_table} WHERE {key_column} = ?"
    return cql, [key]


def build_select_cql(mapping: SchemaMapping, query: Query) -> Tuple[str, List[Any]]:
    """SELECT dirigido por query. Uma projeção parcial sempre inclui a chave primária."""
    clauses, params = _build_query_where(mapping, query)
    fields = list(query.fields)
    if fields:
        key_name = mapping.require_primary_key().name
        if key_name not in fields:
            fields.insert(0, key_name)
    cql = f"SELECT {_projection(mapping, fields)} FROM {mapping.qualified_table}"
    if clauses:
        cql += " WHERE " + " AND ".join(clauses)
    if query.ordering:
        cql += " ORDER BY " + _build_order_by(mapping, query.ordering)
    if query.limit_value is not None:
        cql += " LIMIT ?"
        params.append(query.limit_value)
    if query.filtering_allowed:
        cql += " ALLOW FILTERING"
    return cql, params


def build_delete_cql(mapping: SchemaMapping, query: Query) -> Tuple[str, List[Any]]:
    """
    DELETE dirigido por query. Com projeção parcial, remove só aquelas colunas;
    sem projeção (ou cobrindo todas as colunas não-chave) remove a linha.
    """
    clauses, params = _build_query_where(mapping, query)
    if not clauses:
        raise ValueError("A deleção em massa sem um filtro 'WHERE' não é permitida por segurança.")

    key_field = mapping.primary_key_field()
    non_key = [name for name in mapping.field_names if key_field is None or name != key_field.name]
    selected = [name for name in query.fields if key_field is None or name != key_field.name]

    target = ''
    if selected and set(selected) != set(non_key):
        target = ' ' + ', '.join(mapping.column_for(name) for name in selected)

    cql = f"DELETE{target} FROM {mapping.qualified_table} WHERE " + " AND ".join(clauses)
    return cql, params


def build_update_cql(mapping: SchemaMapping, query: Query) -> Tuple[str, List[Any]]:
    updates = query.updates
    if not updates:
        raise ValueError("Nenhum campo fornecido para atualização")

    key_field = mapping.primary_key_field()
    set_clauses = []
    set_params = []
    for name, value in updates.items():
        if key_field is not None and name == key_field.name:
            raise ValueError(f"A chave primária '{name}' não pode ser atualizada")
        set_clauses.append(f"{mapping.column_for(name)} = ?")
        set_params.append(value)

    clauses, where_params = _build_query_where(mapping, query)
    if not clauses:
        raise ValueError("Filtros de chave primária são obrigatórios para UPDATE")

    cql = f"UPDATE {mapping.qualified_table} SET {', '.join(set_clauses)} WHERE " + " AND ".join(clauses)
    return cql, set_params + where_params


# --- DDL ---

def build_create_table_cql(mapping: SchemaMapping) -> str:
    key_column = mapping.require_primary_key().column
    column_defs = ', '.join(f"{descriptor.column} {descriptor.cql_type}" for descriptor in mapping.fields)
    return f"CREATE TABLE IF NOT EXISTS {mapping.qualified_table} ({column_defs}, PRIMARY KEY ({key_column}))"


def build_drop_table_cql(mapping: SchemaMapping) -> str:
    return f"DROP TABLE IF EXISTS {mapping.qualified_table}"
