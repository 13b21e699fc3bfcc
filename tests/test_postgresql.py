"""
Tests for PostgreSQL gateway support.

Skipped unless psycopg2 is installed and POSTGRESQL_TEST_CONN (or the
default local connection string) reaches a running server.
"""
import importlib.util
import os

import pytest

from todocore.exceptions import StorageUnavailableError, TodoNotFoundError
from todocore.services import TodoService
from todocore.storage import open_gateway

DEFAULT_CONN = "host=localhost port=5432 dbname=postgres user=postgres password=postgres"


def check_postgresql_available():
    """Check if PostgreSQL is available for testing."""
    try:
        import psycopg2
    except ImportError:
        return False
    conn_string = os.getenv("POSTGRESQL_TEST_CONN", DEFAULT_CONN)
    try:
        conn = psycopg2.connect(conn_string, connect_timeout=2)
        conn.close()
        return True
    except Exception:
        return False


postgresql_available = pytest.mark.skipif(
    not check_postgresql_available(),
    reason="PostgreSQL not available (install psycopg2-binary and ensure PostgreSQL is running)"
)


@pytest.fixture
def pg_gateway():
    """PostgreSQL gateway on an emptied todos table."""
    gateway = open_gateway(os.getenv("POSTGRESQL_TEST_CONN", DEFAULT_CONN))
    gateway.initialize()
    with gateway._transaction("reset") as cursor:
        cursor.execute("TRUNCATE todos RESTART IDENTITY")
    yield gateway
    gateway.close()


@postgresql_available
class TestPostgreSQLGateway:

    def test_crud_round_trip(self, pg_gateway):
        todo_id = pg_gateway.insert({"task": "Buy milk", "description": "2 liters"})
        record = pg_gateway.find_by_id(todo_id)
        assert record["task"] == "Buy milk"
        assert record["status"] == "INIT"

        pg_gateway.update(todo_id, {"status": "DONE"})
        assert pg_gateway.find_by_id(todo_id)["status"] == "DONE"

        pg_gateway.delete(todo_id)
        with pytest.raises(TodoNotFoundError):
            pg_gateway.find_by_id(todo_id)

    def test_find_all_empty(self, pg_gateway):
        assert pg_gateway.find_all() == []

    def test_service_timestamps_are_strings(self, pg_gateway):
        todo = TodoService(pg_gateway).create_todo("Buy milk")
        assert isinstance(todo.created_at, str)

    @pytest.mark.parametrize("todo_id", [2**31, 2**63])
    def test_id_beyond_serial_range_not_found(self, pg_gateway, todo_id):
        with pytest.raises(TodoNotFoundError):
            pg_gateway.find_by_id(todo_id)
        with pytest.raises(TodoNotFoundError):
            pg_gateway.update(todo_id, {"status": "DONE"})
        with pytest.raises(TodoNotFoundError):
            pg_gateway.delete(todo_id)


@pytest.mark.skipif(
    importlib.util.find_spec("psycopg2") is None,
    reason="psycopg2 not installed",
)
def test_unreachable_server_raises_storage_unavailable():
    gateway = open_gateway("host=127.0.0.1 port=1 dbname=todos user=nobody")
    with pytest.raises(StorageUnavailableError):
        gateway.initialize()
