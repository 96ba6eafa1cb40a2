"""Domain exceptions for the Office Management application.

Defines domain-level exceptions that represent business rule violations
and tenant resolution failures. These exceptions are independent of
infrastructure concerns. Presentation layer maps them to HTTP responses
in exception handlers.
"""

from typing import Any


class OfficeException(Exception):
    """Base exception for all Office Management application errors.

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
        """Serialize for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(OfficeException):
    """Raised when input validation fails (e.g. invalid date range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(OfficeException):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with the resource type and identifier.

        Args:
            resource_type: Kind of resource (e.g. 'employee', 'invoice').
            resource_id: Identifier that was looked up.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(OfficeException):
    """Raised when a create or update would duplicate a unique value."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "CONFLICT", details)


class BusinessRuleException(OfficeException):
    """Raised when an operation is not allowed in the current state.

    Examples: checking out twice, approving a non-pending leave request,
    voiding a paid invoice.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "BUSINESS_RULE_VIOLATION", details)


class TenantRequiredException(OfficeException):
    """Raised when a tenant-scoped request carries no tenant slug header."""

    def __init__(self, header_name: str = "X-Tenant-Slug") -> None:
        super().__init__(
            f"Missing required header: {header_name}",
            "TENANT_REQUIRED",
            {"header": header_name},
        )


class TenantNotFoundException(OfficeException):
    """Raised when a tenant slug or id is not in the registry."""

    def __init__(self, identifier: str) -> None:
        """Initialize with the missing tenant identifier.

        Args:
            identifier: Tenant slug or id that was not found.
        """
        super().__init__(
            f"Tenant not found: {identifier}",
            "TENANT_NOT_FOUND",
            {"tenant": identifier},
        )


class TenantSuspendedException(OfficeException):
    """Raised when a tenant exists but is suspended or terminated."""

    def __init__(self, slug: str, status: str) -> None:
        """Initialize with tenant slug and its blocking status.

        Args:
            slug: Tenant slug.
            status: Current tenant status (SUSPENDED or TERMINATED).
        """
        super().__init__(
            f"Tenant '{slug}' is {status.lower()}",
            "TENANT_SUSPENDED",
            {"tenant": slug, "status": status},
        )


class TenantContextMissingException(OfficeException):
    """Raised when tenant-scoped code runs outside a tenant context."""

    def __init__(self) -> None:
        super().__init__(
            "Tenant context is not set for this request or task",
            "TENANT_CONTEXT_MISSING",
        )


class DatabaseConnectionException(OfficeException):
    """Raised when a tenant database cannot be reached or created."""

    def __init__(self, database: str, reason: str) -> None:
        """Initialize with database name and failure reason.

        Args:
            database: Database name that failed.
            reason: Driver or server error message.
        """
        super().__init__(
            f"Could not connect to database '{database}': {reason}",
            "DATABASE_CONNECTION_ERROR",
            {"database": database},
        )


class EventBusException(OfficeException):
    """Raised when a message cannot be sent, published or received."""

    def __init__(self, message: str, destination: str | None = None) -> None:
        details = {"destination": destination} if destination else {}
        super().__init__(message, "EVENT_BUS_ERROR", details)


class EventBusModeException(OfficeException):
    """Raised when an operation is not supported by the active event bus mode."""

    def __init__(self, operation: str, mode: str) -> None:
        super().__init__(
            f"'{operation}' is not supported in {mode} mode",
            "EVENT_BUS_MODE_UNSUPPORTED",
            {"operation": operation, "mode": mode},
        )
