"""
SQLite implementation of the todo gateway.
"""
import os
import sqlite3
from typing import Any, Dict, List, Tuple

from todocore.models import TodoStatus
from todocore.storage.interface import TABLE_NAME
from todocore.storage.sql_gateway import SQLGateway

_STATUS_CHECK = ", ".join(f"'{status}'" for status in TodoStatus.values())


class SQLiteGateway(SQLGateway):
    """SQLite-based todo storage.

    Args:
        db_path: Filesystem path, or ':memory:' for a private in-process database
        slow_query_threshold: Queries slower than this (seconds) log a warning
    """

    db_system = "sqlite"
    placeholder = "?"
    driver_error = sqlite3.Error

    def __init__(self, db_path: str, slow_query_threshold: float = 0.1):
        super().__init__(db_path, slow_query_threshold=slow_query_threshold)
        self.db_path = db_path

    def _ensure_db_directory(self):
        """Ensure database directory exists."""
        if self.db_path == ":memory:":
            return
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    def _connect(self):
        try:
            self._ensure_db_directory()
        except OSError as e:
            raise sqlite3.OperationalError(f"unable to create directory for {self.db_path}: {e}")
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _row_to_dict(self, cursor, row) -> Dict[str, Any]:
        return dict(row)

    def _schema_statements(self) -> List[str]:
        return [f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                task TEXT NOT NULL CHECK(length(task) > 0),
                description TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT '{TodoStatus.INIT.value}'
                    CHECK(status IN ({_STATUS_CHECK})),
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """]

    def _execute_insert(self, cursor, query: str, params: Tuple) -> int:
        self._execute_with_logging(cursor, "insert", query, params)
        return cursor.lastrowid
