"""
Pydantic models for todo records and request validation.
"""
from .todo_models import Todo, TodoCreate, TodoStatus, TodoStatusUpdate, parse_status

__all__ = [
    "Todo",
    "TodoCreate",
    "TodoStatus",
    "TodoStatusUpdate",
    "parse_status",
]
