"""
Todo service - business logic for todo operations.
This layer contains no transport dependencies; adapters call it directly.
"""
import logging
from typing import Any, List, Union

from pydantic import ValidationError as PydanticValidationError

from todocore.exceptions import DatabaseError, TodoNotFoundError, ValidationError
from todocore.models import Todo, TodoCreate, TodoStatus, TodoStatusUpdate
from todocore.storage import TodoGateway

logger = logging.getLogger(__name__)


def _first_error(exc: PydanticValidationError) -> ValidationError:
    """Convert a pydantic failure into a ValidationError naming the field."""
    error = exc.errors()[0]
    field = ".".join(str(loc) for loc in error.get("loc", ())) or None
    message = error.get("msg", str(exc))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return ValidationError(message, field=field, value=error.get("input"), original_error=exc)


def _validate_id(todo_id: Any) -> int:
    if isinstance(todo_id, bool) or not isinstance(todo_id, int) or todo_id <= 0:
        raise ValidationError("todo_id must be a positive integer", field="todo_id", value=todo_id)
    return todo_id


class TodoService:
    """Service for todo business logic.

    Holds no state between calls beyond the injected gateway.
    """

    def __init__(self, gateway: TodoGateway):
        """Initialize todo service with its storage gateway."""
        self.gateway = gateway

    def create_todo(self, task: str, description: str = "") -> Todo:
        """
        Create a new todo in the INIT state.

        Args:
            task: Short task summary, must not be blank
            description: Optional longer description

        Returns:
            The todo as persisted, re-read from storage

        Raises:
            ValidationError: If task is empty
            DatabaseError: If the write fails or the new record cannot be read back
        """
        try:
            todo_data = TodoCreate(task=task, description=description)
        except PydanticValidationError as e:
            raise _first_error(e)

        todo_id = self.gateway.insert({
            "task": todo_data.task,
            "description": todo_data.description,
            "status": TodoStatus.INIT.value,
        })

        try:
            created = self.gateway.find_by_id(todo_id)
        except TodoNotFoundError as e:
            logger.error(f"Todo {todo_id} was created but could not be retrieved")
            raise DatabaseError(
                f"Todo {todo_id} was created but could not be retrieved",
                operation="insert",
                original_error=e,
            )

        logger.info(f"Created todo {todo_id}: {todo_data.task}")
        return Todo.from_record(created)

    def fetch_todos(self) -> List[Todo]:
        """Get every todo. An empty store yields an empty list."""
        return [Todo.from_record(record) for record in self.gateway.find_all()]

    def fetch_todo(self, todo_id: int) -> Todo:
        """Get a todo by ID, raising TodoNotFoundError if absent."""
        todo_id = _validate_id(todo_id)
        return Todo.from_record(self.gateway.find_by_id(todo_id))

    def update_status(self, todo_id: int, status: Union[str, TodoStatus]) -> Todo:
        """
        Set a todo's status.

        Any enumerated status may be set from any other; there is no
        transition table.

        Raises:
            ValidationError: If status is not one of INIT, IN_PROGRESS, DONE.
                Nothing is written in that case.
            TodoNotFoundError: If no todo has this ID
        """
        todo_id = _validate_id(todo_id)
        try:
            update = TodoStatusUpdate(status=status)
        except PydanticValidationError as e:
            raise _first_error(e)

        self.gateway.update(todo_id, {"status": update.status.value})
        logger.info(f"Todo {todo_id} status set to {update.status.value}")
        return Todo.from_record(self.gateway.find_by_id(todo_id))

    def delete_todo(self, todo_id: int) -> None:
        """Delete a todo, raising TodoNotFoundError if absent."""
        todo_id = _validate_id(todo_id)
        self.gateway.delete(todo_id)
        logger.info(f"Deleted todo {todo_id}")
