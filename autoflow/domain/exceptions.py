"""Domain exceptions for the autoflow application.

Defines domain-level exceptions that represent business rule violations
and infrastructure failures the engine must surface. Presentation layer
maps them to HTTP responses in exception handlers.

Business failures inside a run (missing credential, provider error) are
recorded on the execution as data; only StoreUnavailableException is
meant to escape the execution engine.
"""

from typing import Any


class AutoflowException(Exception):
    """Base exception for all autoflow application errors.

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
        """Return the JSON body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AutoflowException):
    """Raised when input validation fails (e.g. invalid action config)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(AutoflowException):
    """Raised when authentication fails (e.g. invalid token or signature)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(AutoflowException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'workflow_execution').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidEventException(AutoflowException):
    """Raised when an inbound event is malformed or cannot be tied to a user."""

    def __init__(self, reason: str, field: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if field:
            details["field"] = field
        super().__init__(f"Invalid event: {reason}", "INVALID_EVENT", details)


class DuplicateEventException(AutoflowException):
    """Raised when an inbound event id was already seen inside the dedup window."""

    def __init__(self, app: str, event_id: str) -> None:
        super().__init__(
            f"Duplicate event {event_id} from {app}",
            "DUPLICATE_EVENT",
            {"app": app, "event_id": event_id},
        )


class WorkflowHasNoActionsException(AutoflowException):
    """Raised when a workflow would be created, enabled or run with zero actions."""

    def __init__(self, workflow_id: str | None = None) -> None:
        details = {"workflow_id": workflow_id} if workflow_id else {}
        super().__init__(
            "A workflow needs at least one action",
            "WORKFLOW_HAS_NO_ACTIONS",
            details,
        )


class CredentialNotConnectedException(AutoflowException):
    """Raised when the user has no connected credential for an app."""

    def __init__(self, user_id: str, app: str) -> None:
        super().__init__(
            f"{app} is not connected for this user",
            "NOT_CONNECTED",
            {"user_id": user_id, "app": app},
        )
        self.app = app


class ActionExecutionException(AutoflowException):
    """Raised by an action executor when the provider call fails or times out."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(
            message,
            "ACTION_EXECUTION_ERROR",
            {"provider": provider},
        )
        self.provider = provider


class StoreUnavailableException(AutoflowException):
    """Raised when the execution store (database) cannot be reached.

    Infrastructure-level: propagated to callers, never recorded as a result.
    ``execution_id`` is set when the failure happened after the execution
    row was already persisted.
    """

    def __init__(self, operation: str, reason: str | None = None) -> None:
        details: dict[str, Any] = {"operation": operation}
        if reason:
            details["reason"] = reason
        super().__init__(
            "Execution store is unavailable",
            "STORE_UNAVAILABLE",
            details,
        )
        self.execution_id: str | None = None
