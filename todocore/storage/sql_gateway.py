"""
Shared SQL implementation of the todo gateway.

Engine subclasses supply the connection, the driver's error class, the
schema DDL and the INSERT id strategy; queries are written with '?'
placeholders and normalized per engine.
"""
import logging
import threading
import time
from abc import abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from opentelemetry import trace

from todocore.exceptions import DatabaseError, StorageUnavailableError, TodoNotFoundError
from todocore.storage.interface import TABLE_NAME, TodoGateway, prepare_insert, prepare_patch
from todocore.tracing import add_span_attribute, trace_span

logger = logging.getLogger(__name__)


class SQLGateway(TodoGateway):
    """Base class for DB-API backed gateways.

    Holds one connection for the gateway's lifetime. A lock serializes
    transactions on it so concurrent callers never share a transaction.
    """

    db_system = "sql"
    placeholder = "?"
    driver_error: Type[Exception] = Exception
    # Largest value the engine's id column can hold
    id_max = 2**63 - 1

    def __init__(self, database_url: str, slow_query_threshold: float = 0.1):
        self.database_url = database_url
        self.slow_query_threshold = slow_query_threshold
        self._conn = None
        self._closed = False
        self._lock = threading.Lock()

    # Engine hooks

    @abstractmethod
    def _connect(self):
        """Open a new DB-API connection."""
        pass

    @abstractmethod
    def _schema_statements(self) -> List[str]:
        """DDL creating the todos table if it does not exist."""
        pass

    @abstractmethod
    def _execute_insert(self, cursor, query: str, params: Tuple) -> int:
        """Execute an INSERT and return the generated id."""
        pass

    def _row_to_dict(self, cursor, row) -> Dict[str, Any]:
        columns = [col[0] for col in cursor.description]
        return dict(zip(columns, row))

    # Connection handling

    def _get_connection(self):
        if self._closed:
            raise StorageUnavailableError("Gateway has been closed", database_url=self.database_url)
        if self._conn is None:
            try:
                self._conn = self._connect()
            except self.driver_error as e:
                logger.error(f"Cannot reach {self.db_system} database: {e}", exc_info=True)
                raise StorageUnavailableError(
                    f"Cannot reach {self.db_system} database: {e}",
                    database_url=self.database_url,
                    original_error=e,
                )
            logger.info(f"Opened {self.db_system} connection")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str):
        """Run a block inside one committed-or-rolled-back transaction."""
        with self._lock:
            conn = self._get_connection()
            cursor = None
            try:
                cursor = conn.cursor()
                yield cursor
                conn.commit()
            except self.driver_error as e:
                self._rollback(conn)
                logger.error(f"Database error during {operation}: {e}", exc_info=True)
                raise DatabaseError(
                    f"Database error during {operation}: {e}",
                    operation=operation,
                    original_error=e,
                )
            except Exception:
                self._rollback(conn)
                raise
            finally:
                if cursor is not None:
                    try:
                        cursor.close()
                    except self.driver_error:
                        logger.debug("Cursor close failed", exc_info=True)

    def _rollback(self, conn) -> None:
        """Roll back, dropping the cached connection if it is no longer usable.

        The next call reconnects through _get_connection().
        """
        try:
            conn.rollback()
        except self.driver_error as e:
            logger.warning(f"Rollback failed, discarding {self.db_system} connection: {e}")
            try:
                conn.close()
            except self.driver_error:
                logger.debug("Closing broken connection failed", exc_info=True)
            self._conn = None

    def _check_id(self, todo_id: int) -> None:
        """Ids the id column cannot hold can never match a row."""
        if todo_id < 1 or todo_id > self.id_max:
            raise TodoNotFoundError(todo_id)

    def _normalize_sql(self, query: str) -> str:
        if self.placeholder == "?":
            return query
        return query.replace("?", self.placeholder)

    def _execute_with_logging(self, cursor, operation: str, query: str, params: Optional[Tuple] = None):
        """
        Execute a query with performance logging and tracing.

        Args:
            cursor: Database cursor
            operation: Short operation name (select, insert, ...)
            query: SQL query string with '?' placeholders
            params: Query parameters
        """
        query = self._normalize_sql(query)
        start_time = time.time()
        with trace_span(
            f"db.{operation}",
            attributes={
                "db.system": self.db_system,
                "db.operation": operation,
                "db.sql.table": TABLE_NAME,
            },
            kind=trace.SpanKind.CLIENT
        ):
            if params is None:
                cursor.execute(query)
            else:
                cursor.execute(query, params)
            duration = time.time() - start_time
            add_span_attribute("db.duration_ms", duration * 1000)

        query_preview = " ".join(query.split())[:200]
        if duration >= self.slow_query_threshold:
            logger.warning(
                f"Slow query: {duration:.4f}s - {query_preview}",
                extra={"duration": duration, "params_count": len(params) if params else 0}
            )
        else:
            logger.debug(f"Query executed in {duration:.4f}s: {query_preview}")
        return cursor

    # TodoGateway

    def initialize(self) -> None:
        """Create the todos table if needed. Idempotent."""
        try:
            with self._transaction("initialize") as cursor:
                for statement in self._schema_statements():
                    self._execute_with_logging(cursor, "create", statement)
        except DatabaseError as e:
            if isinstance(e, StorageUnavailableError):
                raise
            raise StorageUnavailableError(
                f"Could not initialize {self.db_system} schema: {e.message}",
                database_url=self.database_url,
                original_error=e.original_error,
            )
        logger.info(f"{self.db_system} schema ready")

    def insert(self, record: Mapping[str, Any]) -> int:
        fields = prepare_insert(record)
        columns = ", ".join(fields)
        placeholders = ", ".join("?" for _ in fields)
        with self._transaction("insert") as cursor:
            todo_id = self._execute_insert(
                cursor,
                f"INSERT INTO {TABLE_NAME} ({columns}) VALUES ({placeholders})",
                tuple(fields.values()),
            )
        if todo_id is None:
            raise DatabaseError("Insert did not return a generated id", operation="insert")
        logger.debug(f"Inserted todo {todo_id}")
        return int(todo_id)

    def find_by_id(self, todo_id: int) -> Dict[str, Any]:
        self._check_id(todo_id)
        with self._transaction("select") as cursor:
            self._execute_with_logging(
                cursor, "select", f"SELECT * FROM {TABLE_NAME} WHERE id = ?", (todo_id,)
            )
            row = cursor.fetchone()
            record = self._row_to_dict(cursor, row) if row is not None else None
        if record is None:
            raise TodoNotFoundError(todo_id)
        return record

    def find_all(self) -> List[Dict[str, Any]]:
        with self._transaction("select") as cursor:
            self._execute_with_logging(cursor, "select", f"SELECT * FROM {TABLE_NAME} ORDER BY id")
            return [self._row_to_dict(cursor, row) for row in cursor.fetchall()]

    def update(self, todo_id: int, patch: Mapping[str, Any]) -> None:
        fields = prepare_patch(patch)
        self._check_id(todo_id)
        assignments = ", ".join(f"{column} = ?" for column in fields)
        with self._transaction("update") as cursor:
            self._execute_with_logging(
                cursor,
                "update",
                f"UPDATE {TABLE_NAME} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                tuple(fields.values()) + (todo_id,),
            )
            if cursor.rowcount == 0:
                raise TodoNotFoundError(todo_id)

    def delete(self, todo_id: int) -> None:
        self._check_id(todo_id)
        with self._transaction("delete") as cursor:
            self._execute_with_logging(cursor, "delete", f"DELETE FROM {TABLE_NAME} WHERE id = ?", (todo_id,))
            if cursor.rowcount == 0:
                raise TodoNotFoundError(todo_id)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info(f"Closed {self.db_system} connection")
            self._closed = True
