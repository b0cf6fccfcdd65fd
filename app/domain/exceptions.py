"""Domain exceptions for the approvals application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class ApprovalsException(Exception):
    """Base exception for all approvals application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ApprovalsException):
    """Raised when input validation fails (e.g. duplicate stage order)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class BadRequestException(ApprovalsException):
    """Raised when an operation is not allowed in the current state.

    Covers inactive workflows, workflows without stages, a second pending
    request for the same entity and decisions on non-pending records.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "BAD_REQUEST", details)


class ForbiddenException(ApprovalsException):
    """Raised when the actor is not allowed to act on a stage execution."""

    def __init__(
        self,
        message: str = "You are not authorized to approve this request",
        **details: Any,
    ) -> None:
        super().__init__(message, "FORBIDDEN", details)


class AuthenticationException(ApprovalsException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(ApprovalsException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'approval_workflow', 'approval_request').
            resource_id: The ID (or code) that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(ApprovalsException):
    """Raised when creating a resource whose unique key already exists."""

    def __init__(self, resource_type: str, key: str, value: str) -> None:
        super().__init__(
            f"{resource_type} with {key} '{value}' already exists",
            "CONFLICT",
            {"resource_type": resource_type, key: value},
        )


class SqlNotConfiguredException(ApprovalsException):
    """Raised when an operation requires Postgres but the backend is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
