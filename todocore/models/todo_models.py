"""
Pydantic models for todo records and the inputs that create or change them.
"""
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator


class TodoStatus(str, Enum):
    """Todo status enumeration."""
    INIT = "INIT"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def values(cls):
        return [status.value for status in cls]


def parse_status(value: Union[str, TodoStatus]) -> TodoStatus:
    """
    Resolve a status given as enum member or string.

    Strings must equal one of the enum values exactly.

    Raises:
        ValueError: If the value is not one of the enumerated statuses
    """
    if isinstance(value, TodoStatus):
        return value
    if isinstance(value, str):
        if value in TodoStatus.values():
            return TodoStatus(value)
    raise ValueError(
        f"Invalid status '{value}'. Must be one of: {', '.join(TodoStatus.values())}"
    )


class TodoCreate(BaseModel):
    """Input model for creating a todo."""
    task: str = Field(..., description="Short task summary", min_length=1)
    description: str = Field("", description="Optional longer description")

    @field_validator('task')
    @classmethod
    def validate_task(cls, v: str) -> str:
        """Validate that task is not empty or only whitespace."""
        if not v or not v.strip():
            raise ValueError("task cannot be empty or contain only whitespace")
        return v.strip()

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v: Optional[str]) -> str:
        return "" if v is None else v


class TodoStatusUpdate(BaseModel):
    """Input model for changing a todo's status."""
    status: TodoStatus

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v: Any) -> TodoStatus:
        return parse_status(v)


class Todo(BaseModel):
    """A stored todo record."""
    id: int
    task: str
    description: str = ""
    status: TodoStatus = TodoStatus.INIT
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator('created_at', 'updated_at', mode='before')
    @classmethod
    def timestamp_to_str(cls, v: Any) -> Optional[str]:
        # PostgreSQL hands back datetime objects, SQLite hands back strings
        if v is None or isinstance(v, str):
            return v
        return v.isoformat()

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Todo":
        """Build a Todo from a gateway record."""
        return cls.model_validate(dict(record))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        return self.model_dump(mode="json")
