"""
PostgreSQL implementation of the todo gateway.

Requires psycopg2 (install the 'postgresql' extra).
"""
from typing import Any, Dict, List, Tuple

import psycopg2
from psycopg2.extras import RealDictCursor

from todocore.models import TodoStatus
from todocore.storage.interface import TABLE_NAME
from todocore.storage.sql_gateway import SQLGateway

_STATUS_CHECK = ", ".join(f"'{status}'" for status in TodoStatus.values())


class PostgreSQLGateway(SQLGateway):
    """PostgreSQL-based todo storage.

    Args:
        dsn: libpq connection string or postgresql:// URL
        slow_query_threshold: Queries slower than this (seconds) log a warning
    """

    db_system = "postgresql"
    placeholder = "%s"
    driver_error = psycopg2.Error
    id_max = 2**31 - 1

    def __init__(self, dsn: str, slow_query_threshold: float = 0.1, connect_timeout: int = 5):
        super().__init__(dsn, slow_query_threshold=slow_query_threshold)
        self.connect_timeout = connect_timeout

    def _connect(self):
        return psycopg2.connect(
            self.database_url,
            connect_timeout=self.connect_timeout,
            cursor_factory=RealDictCursor,
        )

    def _row_to_dict(self, cursor, row) -> Dict[str, Any]:
        return dict(row)

    def _schema_statements(self) -> List[str]:
        return [f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                id SERIAL PRIMARY KEY,
                task TEXT NOT NULL CHECK(length(task) > 0),
                description TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT '{TodoStatus.INIT.value}'
                    CHECK(status IN ({_STATUS_CHECK})),
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """]

    def _execute_insert(self, cursor, query: str, params: Tuple) -> int:
        query = query.rstrip().rstrip(';') + " RETURNING id"
        self._execute_with_logging(cursor, "insert", query, params)
        result = cursor.fetchone()
        if result is None:
            return None
        return result["id"]
