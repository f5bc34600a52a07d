import re
from collections import namedtuple

import pytest

from caspystore.core.connection import ConnectionManager
from caspystore.core.mapping import SchemaMapping


class FakeResultSet(list):
    """Imita o ResultSet do driver: iterável, com one() e column_names."""

    def __init__(self, rows=(), column_names=None):
        super().__init__(rows)
        self.column_names = column_names

    def one(self):
        return self[0] if self else None

    @property
    def was_applied(self):
        return self[0][0]


_INSERT = re.compile(r"INSERT INTO (\S+) \((.+)\) VALUES")
_SELECT = re.compile(r"SELECT (.+) FROM (\S+) WHERE (\w+) = \?$")
_DELETE = re.compile(r"DELETE FROM (\S+) WHERE (\w+) = \?$")


def make_row(data: dict):
    Row = namedtuple("Row", list(data.keys()))
    return Row(**data)


class FakeSession:
    """
    Sessão em memória que entende o CQL por chave gerado pelo EntityMapper.
    Registra tudo que foi preparado e executado.
    """

    def __init__(self, key_column: str = "id"):
        self.key_column = key_column
        self.tables = {}
        self.prepared = []
        self.executed = []
        self.extra_rows = {}

    def prepare(self, cql):
        self.prepared.append(cql)
        return cql

    def set_keyspace(self, keyspace):
        self.keyspace = keyspace

    def execute(self, statement, params=None):
        self.executed.append((statement, params))
        cql = statement

        match = _INSERT.match(cql)
        if match:
            table, columns = match.group(1), [c.strip() for c in match.group(2).split(",")]
            row = dict(zip(columns, params))
            self.tables.setdefault(table, {})[row[self.key_column]] = row
            return FakeResultSet()

        match = _SELECT.match(cql)
        if match:
            projection, table, _ = match.groups()
            row = self.tables.get(table, {}).get(params[0])
            rows = [row] if row is not None else []
            rows += self.extra_rows.get(params[0], [])
            if projection.strip() != "*":
                columns = [c.strip() for c in projection.split(",")]
                rows = [{c: r.get(c) for c in columns} for r in rows]
            return FakeResultSet([make_row(r) for r in rows])

        match = _DELETE.match(cql)
        if match:
            self.tables.get(match.group(1), {}).pop(params[0], None)
            return FakeResultSet()

        return FakeResultSet()


@pytest.fixture
def user_mapping():
    return SchemaMapping.from_dict({
        "table": "users",
        "fields": [
            {"name": "id", "properties": {"primarykey": "true"}},
            {"name": "name"},
        ],
    })


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_connection(fake_session):
    conn = ConnectionManager()
    conn.session = fake_session
    return conn


@pytest.fixture
def result_set():
    """Fábrica de ResultSets falsos: result_set([{'id': 'u1'}], column_names=[...])."""
    def factory(rows=(), column_names=None):
        return FakeResultSet([make_row(r) if isinstance(r, dict) else r for r in rows], column_names)
    return factory
