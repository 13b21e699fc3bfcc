"""
Service layer for business logic.
Services contain no transport dependencies and can be used by any adapter.
"""
from .todo_service import TodoService

__all__ = [
    "TodoService",
]
