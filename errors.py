from typing import Any, List, Optional


class TaskServiceError(Exception):
    """Base class for failures surfaced to API callers"""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[dict]] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(TaskServiceError):
    """Malformed, missing or out-of-range input"""
    status_code = 400
    message = "Validation failed"

    def __init__(self, details: List[dict], message: Optional[str] = None):
        super().__init__(message, details)

    @classmethod
    def single(cls, field: str, message: str, value: Any = None) -> "ValidationError":
        return cls([{"field": field, "message": message, "value": value}])


class NoChangesError(TaskServiceError):
    """Update request that names no mutable field"""
    status_code = 400
    message = "No valid fields provided for update"


class AlreadyExistsError(TaskServiceError):
    status_code = 400
    message = "Task with this ID already exists"


class NotFoundError(TaskServiceError):
    status_code = 404
    message = "Task not found"


class InfrastructureError(TaskServiceError):
    """Unclassified storage failure; the cause stays in the server log"""
    status_code = 500
