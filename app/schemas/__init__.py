"""Pydantic request/response schemas for the API."""

from app.schemas.document import (
    DocumentDownloadUrlResponse,
    DocumentResponse,
    DocumentUpdate,
    DocumentUploadResponse,
)
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

__all__ = [
    "DocumentDownloadUrlResponse",
    "DocumentResponse",
    "DocumentUpdate",
    "DocumentUploadResponse",
    "HealthResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
]
