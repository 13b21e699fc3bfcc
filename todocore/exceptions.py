"""
Exception hierarchy for todocore.

Every failure raised by the service or a storage gateway is a ServiceError
subclass, so adapters can tell a failure apart from an empty result and
map it onto their own transport.
"""
from typing import Any, Dict, Optional

from todocore.logging_setup import get_request_id


class ServiceError(Exception):
    """Base class for all todocore errors."""

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or get_request_id() or None
        self.context = dict(context) if context else {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the error, omitting unset fields."""
        result: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        if self.context:
            result["context"] = self.context
        if self.original_error is not None:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error),
            }
        return result

    def __str__(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """Bad input shape or value. Never retried."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ):
        context = dict(kwargs.pop("context", None) or {})
        if field is not None:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)
        super().__init__(message, context=context, **kwargs)
        self.field = field
        self.value = value


class NotFoundError(ServiceError):
    """No record exists with the given identifier."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        message: Optional[str] = None,
        **kwargs: Any,
    ):
        resource_id = str(resource_id)
        context = dict(kwargs.pop("context", None) or {})
        context["resource_type"] = resource_type
        context["resource_id"] = resource_id
        if message is None:
            message = f"{resource_type} with ID '{resource_id}' not found"
        super().__init__(message, context=context, **kwargs)
        self.resource_type = resource_type
        self.resource_id = resource_id


class TodoNotFoundError(NotFoundError):
    """Raised when a todo id does not exist in the store."""

    def __init__(self, todo_id: Any, **kwargs: Any):
        super().__init__("Todo", todo_id, **kwargs)
        self.todo_id = todo_id


class DatabaseError(ServiceError):
    """Read or write failure after the store was reachable."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs: Any):
        context = dict(kwargs.pop("context", None) or {})
        if operation is not None:
            context["operation"] = operation
        super().__init__(message, context=context, **kwargs)
        self.operation = operation


class StorageUnavailableError(DatabaseError):
    """The backing store could not be reached or its schema not created."""

    def __init__(self, message: str, database_url: Optional[str] = None, **kwargs: Any):
        context = dict(kwargs.pop("context", None) or {})
        if database_url is not None:
            context["database_url"] = database_url
        kwargs.setdefault("operation", "connect")
        super().__init__(message, context=context, **kwargs)
        self.database_url = database_url


# Short names for the four error kinds.
InvalidArgument = ValidationError
NotFound = NotFoundError
StorageError = DatabaseError
StorageUnavailable = StorageUnavailableError
