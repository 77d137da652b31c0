"""Document use cases: upload (write), query (read), and commands (update/delete)."""

from app.application.use_cases.documents.document_operations import (
    DocumentCommandService,
    DocumentQueryService,
    DocumentUploadService,
    build_storage_key,
)

__all__ = [
    "DocumentCommandService",
    "DocumentQueryService",
    "DocumentUploadService",
    "build_storage_key",
]
