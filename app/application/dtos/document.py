"""DTOs for document use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class DocumentCreate:
    """Input for creating a document record (write-model). Upload service builds this; repo persists and returns DocumentResult."""

    id: str
    application_id: str | None
    storage_bucket: str
    storage_key: str
    original_filename: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True)
class DocumentResult:
    """Document read-model: the full persisted record, including storage location."""

    id: str
    application_id: str | None
    storage_bucket: str
    storage_key: str
    original_filename: str
    content_type: str
    size_bytes: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DocumentView:
    """External view of a document. Storage bucket and key are never exposed."""

    id: str
    application_id: str | None
    original_filename: str
    content_type: str
    size_bytes: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_result(cls, doc: DocumentResult) -> "DocumentView":
        return cls(
            id=doc.id,
            application_id=doc.application_id,
            original_filename=doc.original_filename,
            content_type=doc.content_type,
            size_bytes=doc.size_bytes,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )


@dataclass(frozen=True)
class DownloadLink:
    """Presigned download URL and its lifetime."""

    url: str
    expires_in_seconds: int


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a completed upload sequence."""

    document_id: str
    message: str
    download_url: str
    expires_in_seconds: int


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied to uploads before any I/O happens."""

    max_size_bytes: int
    allowed_content_types: frozenset[str]
    download_url_ttl: timedelta

    @property
    def download_url_ttl_seconds(self) -> int:
        return int(self.download_url_ttl.total_seconds())
