"""Document API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DocumentUploadResponse(BaseModel):
    """Response for POST upload (document created)."""

    model_config = ConfigDict(from_attributes=True)

    document_id: str
    message: str
    download_url: str
    expires_in_seconds: int


class DocumentDownloadUrlResponse(BaseModel):
    """Response for GET .../download-url."""

    model_config = ConfigDict(from_attributes=True)

    url: str
    expires_in_seconds: int


class DocumentResponse(BaseModel):
    """Document metadata. Storage location is never included."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    application_id: str | None = None
    original_filename: str
    content_type: str
    size_bytes: int
    created_at: datetime
    updated_at: datetime


class DocumentUpdate(BaseModel):
    """Request body for PUT document: the new association (null clears it)."""

    application_id: str | None = Field(default=None, max_length=64)
