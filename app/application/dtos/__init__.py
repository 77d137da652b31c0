"""Application DTOs (no ORM dependency)."""

from app.application.dtos.document import (
    DocumentCreate,
    DocumentResult,
    DocumentView,
    DownloadLink,
    UploadPolicy,
    UploadResult,
)

__all__ = [
    "DocumentCreate",
    "DocumentResult",
    "DocumentView",
    "DownloadLink",
    "UploadPolicy",
    "UploadResult",
]
