from typing import Any, Optional


class AppException(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Any] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class NotFoundException(AppException):
    """Exception raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
            details=details,
        )


class ValidationException(AppException):
    """Exception raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: Optional[Any] = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class ConflictException(AppException):
    """Exception raised when a unique resource already exists (e.g. duplicate email)."""

    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(
            code="CONFLICT",
            message=message,
            status_code=409,
            details=details,
        )


class DatabaseException(AppException):
    """Exception raised for database-related errors."""

    def __init__(
        self,
        message: str = "Database error occurred",
        details: Optional[Any] = None,
        code: str = "DATABASE_ERROR",
        status_code: int = 500,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details,
        )


class StoreUnavailableException(DatabaseException):
    """The subscription store could not be read or written.

    Raised out of a workflow run; the host marks the run failed.
    """

    def __init__(self, message: str = "Subscription store unavailable", details: Optional[Any] = None):
        super().__init__(
            message=message,
            details=details,
            code="STORE_UNAVAILABLE",
            status_code=503,
        )


class UnauthorizedException(AppException):
    """Exception raised when authentication or authorization fails."""

    def __init__(self, message: str = "Unauthorized access", details: Optional[Any] = None):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
            details=details,
        )


class ForbiddenException(AppException):
    """Exception raised when an authenticated user may not touch a resource."""

    def __init__(self, message: str = "Forbidden", details: Optional[Any] = None):
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
            details=details,
        )


class WorkflowTriggerException(AppException):
    """A workflow run could not be started."""

    def __init__(self, message: str = "Failed to start workflow run", details: Optional[Any] = None):
        super().__init__(
            code="WORKFLOW_TRIGGER_FAILED",
            message=message,
            status_code=502,
            details=details,
        )


class NotificationDeliveryFailure(AppException):
    """A reminder could not be handed to the notification channel."""

    def __init__(self, message: str = "Notification delivery failed", details: Optional[Any] = None):
        super().__init__(
            code="NOTIFICATION_DELIVERY_FAILED",
            message=message,
            status_code=502,
            details=details,
        )
