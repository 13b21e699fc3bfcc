"""
In-memory implementation of the todo gateway.

Used as a test double and for throwaway runs. Nothing survives close().
"""
import copy
import logging
import threading
from datetime import datetime, UTC
from typing import Any, Dict, List, Mapping

from todocore.exceptions import StorageUnavailableError, TodoNotFoundError
from todocore.storage.interface import TodoGateway, prepare_insert, prepare_patch

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class InMemoryGateway(TodoGateway):
    """Dict-backed todo storage. IDs are never reused after delete."""

    def __init__(self):
        self._records: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1
        self._closed = False
        self._lock = threading.Lock()

    def _check_open(self):
        if self._closed:
            raise StorageUnavailableError("Gateway has been closed", database_url="memory://")

    def initialize(self) -> None:
        with self._lock:
            self._check_open()
            logger.debug("In-memory todo store ready")

    def insert(self, record: Mapping[str, Any]) -> int:
        fields = prepare_insert(record)
        with self._lock:
            self._check_open()
            todo_id = self._next_id
            self._next_id += 1
            timestamp = _now()
            self._records[todo_id] = {
                "id": todo_id,
                **fields,
                "created_at": timestamp,
                "updated_at": timestamp,
            }
        logger.debug(f"Inserted todo {todo_id}")
        return todo_id

    def find_by_id(self, todo_id: int) -> Dict[str, Any]:
        with self._lock:
            self._check_open()
            record = self._records.get(todo_id)
            if record is None:
                raise TodoNotFoundError(todo_id)
            return copy.deepcopy(record)

    def find_all(self) -> List[Dict[str, Any]]:
        with self._lock:
            self._check_open()
            return [copy.deepcopy(self._records[todo_id]) for todo_id in sorted(self._records)]

    def update(self, todo_id: int, patch: Mapping[str, Any]) -> None:
        fields = prepare_patch(patch)
        with self._lock:
            self._check_open()
            record = self._records.get(todo_id)
            if record is None:
                raise TodoNotFoundError(todo_id)
            record.update(fields)
            record["updated_at"] = _now()

    def delete(self, todo_id: int) -> None:
        with self._lock:
            self._check_open()
            if self._records.pop(todo_id, None) is None:
                raise TodoNotFoundError(todo_id)

    def close(self) -> None:
        with self._lock:
            self._records.clear()
            self._closed = True
