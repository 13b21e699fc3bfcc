"""
Storage abstraction layer.
Provides a clean interface for todo persistence that can be swapped out.
"""
from .interface import TodoGateway, MUTABLE_FIELDS
from .memory_storage import InMemoryGateway
from .sqlite_storage import SQLiteGateway


def detect_database_type(database_url: str) -> str:
    """
    Work out which engine a connection string refers to.

    Returns:
        'memory', 'postgresql' or 'sqlite'
    """
    url = database_url.strip()
    lowered = url.lower()
    if lowered.startswith("memory://"):
        return "memory"
    if lowered.startswith(("postgresql://", "postgres://")):
        return "postgresql"
    if "dbname=" in lowered and "host=" in lowered:
        return "postgresql"
    return "sqlite"


def open_gateway(database_url: str, slow_query_threshold: float = 0.1) -> TodoGateway:
    """
    Construct the gateway for a connection string without connecting.

    Accepts 'memory://', 'postgresql://...' URLs or libpq 'host=... dbname=...'
    strings, 'sqlite:///path' URLs, or a bare SQLite path.
    """
    db_type = detect_database_type(database_url)
    if db_type == "memory":
        return InMemoryGateway()
    if db_type == "postgresql":
        # psycopg2 is an optional extra
        from .postgresql_storage import PostgreSQLGateway
        return PostgreSQLGateway(database_url.strip(), slow_query_threshold=slow_query_threshold)

    path = database_url.strip()
    if path.lower().startswith("sqlite:///"):
        path = path[len("sqlite:///"):]
    elif path.lower().startswith("sqlite://"):
        path = path[len("sqlite://"):] or ":memory:"
    return SQLiteGateway(path, slow_query_threshold=slow_query_threshold)


__all__ = [
    'TodoGateway',
    'MUTABLE_FIELDS',
    'InMemoryGateway',
    'SQLiteGateway',
    'detect_database_type',
    'open_gateway',
]
