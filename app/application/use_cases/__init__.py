"""Application use cases: one entry point per workflow."""

from app.application.use_cases.documents import (
    DocumentCommandService,
    DocumentQueryService,
    DocumentUploadService,
)

__all__ = [
    "DocumentCommandService",
    "DocumentQueryService",
    "DocumentUploadService",
]
