"""Infrastructure exceptions for blob storage operations.

Storage errors extend StorageException (domain) so the document services and
the presentation layer handle every backend the same way. Backend status and
error codes travel in details for logging.
"""

from typing import Any

from app.domain.exceptions import StorageException


def _backend_details(
    storage_key: str,
    reason: str,
    backend_code: str | None,
    status_code: int | None,
) -> dict[str, Any]:
    details: dict[str, Any] = {"storage_key": storage_key, "reason": reason}
    if backend_code is not None:
        details["backend_code"] = backend_code
    if status_code is not None:
        details["status_code"] = status_code
    return details


class StorageUploadError(StorageException):
    """Blob write failed."""

    def __init__(
        self,
        storage_key: str,
        reason: str,
        *,
        backend_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            f"Failed to upload file: {storage_key}",
            "STORAGE_UPLOAD_ERROR",
            _backend_details(storage_key, reason, backend_code, status_code),
        )


class StorageDeleteError(StorageException):
    """Blob deletion failed."""

    def __init__(
        self,
        storage_key: str,
        reason: str,
        *,
        backend_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            f"Failed to delete file: {storage_key}",
            "STORAGE_DELETE_ERROR",
            _backend_details(storage_key, reason, backend_code, status_code),
        )


class StoragePresignError(StorageException):
    """Presigned download URL could not be issued."""

    def __init__(
        self,
        storage_key: str,
        reason: str,
        *,
        backend_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            f"Failed to issue download URL: {storage_key}",
            "STORAGE_PRESIGN_ERROR",
            _backend_details(storage_key, reason, backend_code, status_code),
        )


class StorageReadError(StorageException):
    """Blob metadata lookup failed for a reason other than a missing key."""

    def __init__(
        self,
        storage_key: str,
        reason: str,
        *,
        backend_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            f"Failed to read file metadata: {storage_key}",
            "STORAGE_READ_ERROR",
            _backend_details(storage_key, reason, backend_code, status_code),
        )


class StorageNotFoundError(StorageException):
    """Blob not found (local download route only; delete treats missing as success)."""

    def __init__(self, storage_key: str) -> None:
        super().__init__(
            f"File not found: {storage_key}",
            "STORAGE_NOT_FOUND",
            {"storage_key": storage_key},
        )


class StoragePermissionError(StorageException):
    """Key resolves outside the storage root or a signature check failed."""

    def __init__(self, storage_key: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {storage_key}",
            "STORAGE_PERMISSION_ERROR",
            {"storage_key": storage_key, "operation": operation},
        )
