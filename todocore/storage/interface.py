"""
Storage interface - defines the contract for all todo storage backends.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from todocore.exceptions import ValidationError
from todocore.models import TodoStatus, parse_status

TABLE_NAME = "todos"

# Columns a caller may write; id and timestamps belong to the store.
MUTABLE_FIELDS = ("task", "description", "status")


def _normalize_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    normalized = {}
    for key, value in fields.items():
        if key not in MUTABLE_FIELDS:
            raise ValidationError(
                f"Unknown or read-only field '{key}'. Writable fields: {', '.join(MUTABLE_FIELDS)}",
                field=key,
            )
        if key == "status":
            try:
                value = parse_status(value).value
            except ValueError as e:
                raise ValidationError(str(e), field="status", value=value, original_error=e)
        elif key == "description" and value is None:
            value = ""
        elif not isinstance(value, str):
            raise ValidationError(f"Field '{key}' must be a string", field=key, value=value)
        normalized[key] = value
    return normalized


def prepare_insert(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Normalize a record for insertion.

    Any client-supplied id or timestamp is dropped; status defaults to INIT
    and description to ''.

    Raises:
        ValidationError: On unknown fields, a bad status, or a missing task
    """
    fields = {k: v for k, v in record.items() if k not in ("id", "created_at", "updated_at")}
    fields = _normalize_fields(fields)
    if not fields.get("task", "").strip():
        raise ValidationError("Record requires a non-empty 'task'", field="task")
    fields.setdefault("description", "")
    fields.setdefault("status", TodoStatus.INIT.value)
    return fields


def prepare_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Normalize a partial update.

    Raises:
        ValidationError: If the patch is empty or touches id, timestamps or
            unknown columns
    """
    if not patch:
        raise ValidationError("Update patch cannot be empty")
    fields = _normalize_fields(patch)
    if "task" in fields and not fields["task"].strip():
        raise ValidationError("task cannot be empty", field="task")
    return fields


class TodoGateway(ABC):
    """Abstract interface for todo persistence.

    Records cross this boundary as plain dicts keyed by column name. Each
    call is atomic for the one record it touches. Gateways are context
    managers; leaving the block releases the engine handle.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Ensure the todos table exists. Idempotent."""
        pass

    @abstractmethod
    def insert(self, record: Mapping[str, Any]) -> int:
        """Persist a new record and return its generated ID."""
        pass

    @abstractmethod
    def find_by_id(self, todo_id: int) -> Dict[str, Any]:
        """Get a record by ID, raising TodoNotFoundError if absent."""
        pass

    @abstractmethod
    def find_all(self) -> List[Dict[str, Any]]:
        """List every record ordered by ID."""
        pass

    @abstractmethod
    def update(self, todo_id: int, patch: Mapping[str, Any]) -> None:
        """Apply a partial change to a record."""
        pass

    @abstractmethod
    def delete(self, todo_id: int) -> None:
        """Remove a record, raising TodoNotFoundError if absent."""
        pass

    def close(self) -> None:
        """Release the engine handle."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
