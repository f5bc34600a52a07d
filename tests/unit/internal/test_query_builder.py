import pytest
from caspystore._internal.query_builder import (
    build_insert_cql,
    build_select_by_key_cql,
    build_delete_by_key_cql,
    build_select_fields_cql,
    build_select_cql,
    build_delete_cql,
    build_update_cql,
    build_create_table_cql,
    build_drop_table_cql,
)
from caspystore.core.mapping import SchemaMapping
from caspystore.core.query import Query
from caspystore.utils.exceptions import MappingConfigurationError


class TestQueryBuilder:

    # Mapeamento de exemplo para os testes
    EXAMPLE_MAPPING = SchemaMapping.from_dict({
        'table': 'users',
        'fields': [
            {'name': 'id', 'primarykey': 'true', 'type': 'text'},
            {'name': 'name', 'column': 'full_name'},
            {'name': 'age', 'type': 'int'},
            {'name': 'emails', 'type': 'set<text>'},
        ],
    })

    KEYSPACE_MAPPING = SchemaMapping.from_dict({
        'keyspace': 'shop',
        'table': 'orders',
        'fields': [
            {'name': 'order_id', 'primarykey': True, 'type': 'uuid'},
            {'name': 'amount', 'type': 'decimal'},
        ],
    })

    NO_KEY_MAPPING = SchemaMapping.from_dict({
        'table': 'logs',
        'fields': [{'name': 'line'}],
    })

    def test_build_insert_cql(self):
        cql = build_insert_cql(self.EXAMPLE_MAPPING)
        assert cql == "INSERT INTO users (id, full_name, age, emails) VALUES (?, ?, ?, ?)"

    def test_build_insert_cql_qualified_table(self):
        cql = build_insert_cql(self.KEYSPACE_MAPPING)
        assert cql == "INSERT INTO shop.orders (order_id, amount) VALUES (?, ?)"

    def test_build_key_statements(self):
        assert build_select_by_key_cql(self.EXAMPLE_MAPPING) == "SELECT * FROM users WHERE id = ?"
        assert build_delete_by_key_cql(self.EXAMPLE_MAPPING) == "DELETE FROM users WHERE id = ?"

    def test_build_key_statements_without_primary_key(self):
        with pytest.raises(MappingConfigurationError):
            build_select_by_key_cql(self.NO_KEY_MAPPING)

    @pytest.mark.parametrize("fields, expected_cql", [
        (['name', 'age'], "SELECT full_name, age FROM users WHERE id = ?"),
        (['id'], "SELECT id FROM users WHERE id = ?"),
        ([], "SELECT * FROM users WHERE id = ?"),
        (None, "SELECT * FROM users WHERE id = ?"),
    ])
    def test_build_select_fields_cql(self, fields, expected_cql):
        cql, params = build_select_fields_cql(self.EXAMPLE_MAPPING, fields, 'u1')
        assert cql == expected_cql
        assert params == ['u1']

    def test_build_select_fields_cql_unknown_field(self):
        with pytest.raises(ValueError, match="Campo 'nickname' não existe"):
            build_select_fields_cql(self.EXAMPLE_MAPPING, ['nickname'], 'u1')

    @pytest.mark.parametrize("query, expected_cql, expected_params", [
        # Sem filtros, limite ou ordenação
        (Query(), "SELECT * FROM users", []),
        # Chave e intervalo de chave
        (Query().key('u1'), "SELECT * FROM users WHERE id = ?", ['u1']),
        (Query().key_range('a', 'm'), "SELECT * FROM users WHERE id >= ? AND id <= ?", ['a', 'm']),
        (Query().key_range(start='a'), "SELECT * FROM users WHERE id >= ?", ['a']),
        # Filtros com operadores, traduzidos para colunas
        (Query().filter(name='Alice'), "SELECT * FROM users WHERE full_name = ?", ['Alice']),
        (Query().filter(age__gt=25, name__exact='Bob'), "SELECT * FROM users WHERE age > ? AND full_name = ?", [25, 'Bob']),
        (Query().filter(emails__contains='a@b.com'), "SELECT * FROM users WHERE emails CONTAINS ?", ['a@b.com']),
        (Query().filter(id__in=['1', '2', '3']), "SELECT * FROM users WHERE id IN (?, ?, ?)", ['1', '2', '3']),
        # Projeção, ordenação, limite e ALLOW FILTERING
        (Query().only('name', 'age'), "SELECT id, full_name, age FROM users", []),
        (Query().only('age', 'id'), "SELECT age, id FROM users", []),
        (Query().order_by('-age', 'name'), "SELECT * FROM users ORDER BY age DESC, full_name ASC", []),
        (Query().filter(age__gte=18).limit(5), "SELECT * FROM users WHERE age >= ? LIMIT ?", [18, 5]),
        (Query().filter(age__lt=40).allow_filtering(), "SELECT * FROM users WHERE age < ? ALLOW FILTERING", [40]),
        (Query().key('u1').filter(age__lte=30), "SELECT * FROM users WHERE id = ? AND age <= ?", ['u1', 30]),
    ])
    def test_build_select_cql(self, query, expected_cql, expected_params):
        cql, params = build_select_cql(self.EXAMPLE_MAPPING, query)
        assert cql == expected_cql
        assert params == expected_params

    def test_build_select_cql_unsupported_operator(self):
        with pytest.raises(ValueError, match="Operador de filtro não suportado: 'unsupported'"):
            build_select_cql(self.EXAMPLE_MAPPING, Query().filter(name__unsupported='value'))

    def test_build_select_cql_in_operator_invalid_value(self):
        with pytest.raises(TypeError, match="O valor para o filtro '__in' deve ser uma lista, tupla ou set, recebido: <class 'str'>"):
            build_select_cql(self.EXAMPLE_MAPPING, Query().filter(id__in='1,2,3'))

    @pytest.mark.parametrize("query, expected_cql, expected_params", [
        (Query().key('u1'), "DELETE FROM users WHERE id = ?", ['u1']),
        (Query().filter(age__in=[1, 2]), "DELETE FROM users WHERE age IN (?, ?)", [1, 2]),
        # Projeção parcial remove só as colunas
        (Query().key('u1').only('name'), "DELETE full_name FROM users WHERE id = ?", ['u1']),
        # A chave na projeção é ignorada
        (Query().key('u1').only('id', 'age'), "DELETE age FROM users WHERE id = ?", ['u1']),
        # Projeção com todas as colunas não-chave remove a linha
        (Query().key('u1').only('name', 'age', 'emails'), "DELETE FROM users WHERE id = ?", ['u1']),
    ])
    def test_build_delete_cql(self, query, expected_cql, expected_params):
        cql, params = build_delete_cql(self.EXAMPLE_MAPPING, query)
        assert cql == expected_cql
        assert params == expected_params

    def test_build_delete_cql_no_filters(self):
        with pytest.raises(ValueError, match="A deleção em massa sem um filtro 'WHERE' não é permitida por segurança."):
            build_delete_cql(self.EXAMPLE_MAPPING, Query())

    @pytest.mark.parametrize("query, expected_cql, expected_params", [
        (Query().key('123').set(name='Bob'), "UPDATE users SET full_name = ? WHERE id = ?", ['Bob', '123']),
        (Query().key('456').set(age=31, name='Charlie'), "UPDATE users SET age = ?, full_name = ? WHERE id = ?", [31, 'Charlie', '456']),
        (Query().filter(id__in=['1', '2']).set(age=1), "UPDATE users SET age = ? WHERE id IN (?, ?)", [1, '1', '2']),
    ])
    def test_build_update_cql(self, query, expected_cql, expected_params):
        cql, params = build_update_cql(self.EXAMPLE_MAPPING, query)
        assert cql == expected_cql
        assert params == expected_params

    def test_build_update_cql_no_update_data(self):
        with pytest.raises(ValueError, match="Nenhum campo fornecido para atualização"):
            build_update_cql(self.EXAMPLE_MAPPING, Query().key('123'))

    def test_build_update_cql_no_where(self):
        with pytest.raises(ValueError, match="Filtros de chave primária são obrigatórios para UPDATE"):
            build_update_cql(self.EXAMPLE_MAPPING, Query().set(name='Bob'))

    def test_build_update_cql_primary_key_assignment(self):
        with pytest.raises(ValueError, match="A chave primária 'id' não pode ser atualizada"):
            build_update_cql(self.EXAMPLE_MAPPING, Query().key('1').set(id='2'))

    def test_build_create_table_cql(self):
        cql = build_create_table_cql(self.EXAMPLE_MAPPING)
        assert cql == "CREATE TABLE IF NOT EXISTS users (id text, full_name text, age int, emails set<text>, PRIMARY KEY (id))"

    def test_build_create_table_cql_qualified(self):
        cql = build_create_table_cql(self.KEYSPACE_MAPPING)
        assert cql == "CREATE TABLE IF NOT EXISTS shop.orders (order_id uuid, amount decimal, PRIMARY KEY (order_id))"

    def test_build_create_table_cql_without_primary_key(self):
        with pytest.raises(MappingConfigurationError):
            build_create_table_cql(self.NO_KEY_MAPPING)

    def test_build_drop_table_cql(self):
        assert build_drop_table_cql(self.KEYSPACE_MAPPING) == "DROP TABLE IF EXISTS shop.orders"
