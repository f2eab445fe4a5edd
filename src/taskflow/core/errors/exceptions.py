"""Domain exceptions for the application.

Task and account errors raised by services are converted to RFC 7807
Problem Details responses by the exception handlers. The admission gates
use the same classes to classify their own failures.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Tasks owned by another user are reported through this error too, so
    callers cannot probe for foreign ids.

    Example:
        raise NotFoundError("Task not found", resource="task", resource_id=str(task_id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data."""

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class BadRequestError(AppException):
    """Raised for general client errors.

    Example:
        raise BadRequestError("task title is empty", error_code="task_title_empty")
    """

    message = "Bad request"
    error_code = "bad_request"
    status_code = 400


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid."""

    message = "unauthorized"
    error_code = "unauthorized"
    status_code = 401


class ServiceUnavailableError(AppException):
    """Raised when a required backing service is unavailable.

    Example:
        raise ServiceUnavailableError("Rate limit store unreachable")
    """

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503
