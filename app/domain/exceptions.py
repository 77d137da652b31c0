"""Domain exceptions for the document management service.

Every failure that leaves the document services is one of these kinds.
They are independent of infrastructure concerns (no botocore or SQLAlchemy
types); presentation layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class DmsException(Exception):
    """Base exception for all document management service errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

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

    def to_dict(self, *, include_details: bool = True) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if include_details and self.details:
            body["details"] = self.details
        return body


class ValidationException(DmsException):
    """Raised when an upload or request is rejected before any I/O."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(DmsException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'document', 'application').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class StorageKeyConflictException(DmsException):
    """Raised when a document record already owns the storage key."""

    def __init__(self, storage_key: str) -> None:
        super().__init__(
            "A document already exists at the generated storage key",
            "STORAGE_KEY_CONFLICT",
            {"storage_key": storage_key},
        )


class StorageException(DmsException):
    """Base exception for blob store failures (unreachable, rejected, erroring).

    Concrete errors live in app.infrastructure.exceptions and carry the
    backend status/code in details for logging.
    """


class PersistenceException(DmsException):
    """Raised when the metadata store fails in a way not otherwise classified."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize with the failed repository operation and its reason.

        Args:
            operation: Repository operation (e.g. 'create_document').
            reason: Backend error description; logged, never sent to clients.
        """
        super().__init__(
            f"Metadata store failed during {operation}",
            "PERSISTENCE_ERROR",
            {"operation": operation, "reason": reason},
        )


class SqlNotConfiguredException(DmsException):
    """Raised when an operation requires the SQL database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
