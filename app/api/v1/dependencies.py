"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the blob store and the document
services. Routes depend only on these dependencies, never on infrastructure
directly. Read operations use get_db; writes use get_db_transactional so the
record change commits only when the whole sequence succeeds.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.document import UploadPolicy
from app.application.interfaces.storage import IBlobStore
from app.application.use_cases.documents import (
    DocumentCommandService,
    DocumentQueryService,
    DocumentUploadService,
)
from app.core.config import get_settings
from app.infrastructure.external.storage import StorageFactory
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import DocumentRepository


def get_blob_store(request: Request) -> IBlobStore:
    """Blob store shared by the process (created at startup, or lazily on first use)."""
    store = getattr(request.app.state, "blob_store", None)
    if store is None:
        store = StorageFactory.create_blob_store()
        request.app.state.blob_store = store
    return store


def get_upload_policy() -> UploadPolicy:
    """Upload limits and URL lifetime from settings."""
    settings = get_settings()
    return UploadPolicy(
        max_size_bytes=settings.max_upload_size,
        allowed_content_types=settings.allowed_content_type_set,
        download_url_ttl=settings.download_url_ttl,
    )


async def get_document_upload_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    blob_store: Annotated[IBlobStore, Depends(get_blob_store)],
    policy: Annotated[UploadPolicy, Depends(get_upload_policy)],
) -> DocumentUploadService:
    """Build DocumentUploadService (blob store + document repo on the write transaction)."""
    return DocumentUploadService(
        blob_store=blob_store,
        document_repo=DocumentRepository(db),
        policy=policy,
    )


async def get_document_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    blob_store: Annotated[IBlobStore, Depends(get_blob_store)],
    policy: Annotated[UploadPolicy, Depends(get_upload_policy)],
) -> DocumentQueryService:
    """Build DocumentQueryService for metadata, download URLs, and listing."""
    return DocumentQueryService(
        blob_store=blob_store,
        document_repo=DocumentRepository(db),
        policy=policy,
    )


async def get_document_command_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    blob_store: Annotated[IBlobStore, Depends(get_blob_store)],
) -> DocumentCommandService:
    """Build DocumentCommandService for association updates and deletes."""
    return DocumentCommandService(
        blob_store=blob_store,
        document_repo=DocumentRepository(db),
    )
