import os
import time

import pytest

from caspystore.core.connection import ConnectionManager
from caspystore.utils.exceptions import ConnectionError

KEYSPACE = os.getenv("CASPY_TEST_KEYSPACE", "caspystore_test")


@pytest.fixture(scope="session")
def db_connection():
    """
    Conexão real com o Cassandra para a sessão de testes, com novas tentativas.
    Pula os testes de integração se nenhum nó responder.
    """
    hosts = os.getenv("CASPY_HOSTS", "127.0.0.1").split(",")
    port = int(os.getenv("CASPY_PORT", "9042"))
    max_retries = int(os.getenv("CASPY_TEST_RETRIES", "3"))
    retry_delay = 2

    conn = ConnectionManager()
    for attempt in range(max_retries):
        try:
            conn.connect(contact_points=hosts, port=port)
            break
        except ConnectionError as e:
            if attempt < max_retries - 1:
                time.sleep(retry_delay)
            else:
                pytest.skip(f"Cassandra indisponível em {hosts}:{port}: {e}")

    conn.execute(
        f"CREATE KEYSPACE IF NOT EXISTS {KEYSPACE} "
        "WITH replication = {'class': 'SimpleStrategy', 'replication_factor': 1}"
    )
    conn.use_keyspace(KEYSPACE)
    yield conn
    conn.disconnect()
