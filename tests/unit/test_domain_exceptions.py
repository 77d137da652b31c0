"""Tests for domain and storage exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    DmsException,
    PersistenceException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    StorageException,
    StorageKeyConflictException,
    ValidationException,
)
from app.infrastructure.exceptions import (
    StorageDeleteError,
    StorageNotFoundError,
    StoragePermissionError,
    StoragePresignError,
    StorageUploadError,
)


def test_dms_exception_default_error_code() -> None:
    """Base DmsException uses class name as error_code when not provided."""
    exc = DmsException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "DmsException"
    assert exc.details == {}


def test_dms_exception_to_dict() -> None:
    """to_dict includes details unless asked not to."""
    exc = DmsException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {
        "error": "CUSTOM",
        "message": "Oops",
        "details": {"key": "value"},
    }
    assert exc.to_dict(include_details=False) == {"error": "CUSTOM", "message": "Oops"}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("File cannot be empty", field="file")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "file"}
    assert ValidationException("Invalid").details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("document", "D1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "document not found: D1"
    assert exc.details == {"resource_type": "document", "resource_id": "D1"}


def test_storage_key_conflict_exception() -> None:
    exc = StorageKeyConflictException("applications/A1/D1.pdf")
    assert exc.error_code == "STORAGE_KEY_CONFLICT"
    assert exc.details == {"storage_key": "applications/A1/D1.pdf"}


def test_persistence_exception_keeps_reason_in_details() -> None:
    """PersistenceException records the operation and backend reason for logs."""
    exc = PersistenceException("create_document", "connection reset")
    assert exc.error_code == "PERSISTENCE_ERROR"
    assert "create_document" in exc.message
    assert "connection reset" not in exc.message
    assert exc.details == {"operation": "create_document", "reason": "connection reset"}


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert exc.error_code == "SERVICE_UNAVAILABLE"


def test_storage_errors_are_storage_exceptions() -> None:
    """Every backend error is a StorageException carrying its code."""
    errors = [
        (StorageUploadError("k", "boom"), "STORAGE_UPLOAD_ERROR"),
        (StorageDeleteError("k", "boom"), "STORAGE_DELETE_ERROR"),
        (StoragePresignError("k", "boom"), "STORAGE_PRESIGN_ERROR"),
        (StorageNotFoundError("k"), "STORAGE_NOT_FOUND"),
        (StoragePermissionError("k", "put"), "STORAGE_PERMISSION_ERROR"),
    ]
    for exc, code in errors:
        assert isinstance(exc, StorageException)
        assert exc.error_code == code
        assert exc.details["storage_key"] == "k"


def test_storage_error_backend_codes_in_details() -> None:
    """Backend code and status only appear when known."""
    exc = StorageUploadError(
        "applications/A1/D1.pdf", "Slow Down", backend_code="SlowDown", status_code=503
    )
    assert exc.details == {
        "storage_key": "applications/A1/D1.pdf",
        "reason": "Slow Down",
        "backend_code": "SlowDown",
        "status_code": 503,
    }
    assert "backend_code" not in StorageDeleteError("k", "boom").details
