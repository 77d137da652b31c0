"""Document API: thin routes delegating to the document upload, query and command services."""

import os
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile

from app.api.v1.dependencies import (
    get_document_command_service,
    get_document_query_service,
    get_document_upload_service,
)
from app.application.use_cases.documents import (
    DocumentCommandService,
    DocumentQueryService,
    DocumentUploadService,
)
from app.core.limiter import limit_upload, limit_writes
from app.schemas.document import (
    DocumentDownloadUrlResponse,
    DocumentResponse,
    DocumentUpdate,
    DocumentUploadResponse,
)

router = APIRouter()


def _upload_size(file: UploadFile) -> int:
    """Size of the spooled upload; measured from the stream when the parser did not record it."""
    if file.size is not None:
        return file.size
    stream = file.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


@router.post(
    "/applications/{application_id}/documents",
    response_model=DocumentUploadResponse,
    status_code=201,
)
@limit_upload
async def upload_document(
    request: Request,
    application_id: str,
    file: Annotated[UploadFile, File(...)],
    upload_svc: Annotated[DocumentUploadService, Depends(get_document_upload_service)],
):
    """Upload a document for an application (blob + record) and return a download URL."""
    result = await upload_svc.upload_document(
        file_data=file.file,
        size_bytes=_upload_size(file),
        filename=file.filename,
        content_type=file.content_type,
        application_id=application_id,
    )
    return DocumentUploadResponse.model_validate(result)


@router.get(
    "/applications/{application_id}/documents",
    response_model=list[DocumentResponse],
)
async def list_application_documents(
    application_id: str,
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
):
    """List documents associated with an application (metadata only)."""
    docs = await query_svc.list_documents(application_id)
    return [DocumentResponse.model_validate(d) for d in docs]


@router.get(
    "/applications/{application_id}/download-url",
    response_model=DocumentDownloadUrlResponse,
)
async def get_application_download_url(
    application_id: str,
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
):
    """Temporary download URL for the application's first document."""
    link = await query_svc.get_download_url_for_application(application_id)
    return DocumentDownloadUrlResponse.model_validate(link)


@router.get(
    "/documents/{document_id}/download-url",
    response_model=DocumentDownloadUrlResponse,
)
async def get_document_download_url(
    document_id: str,
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
):
    """Temporary download URL for a document. Defined before /{document_id} for route precedence."""
    link = await query_svc.get_download_url(document_id)
    return DocumentDownloadUrlResponse.model_validate(link)


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    query_svc: Annotated[DocumentQueryService, Depends(get_document_query_service)],
):
    """Get document metadata by id."""
    view = await query_svc.get_document_metadata(document_id)
    return DocumentResponse.model_validate(view)


@router.put("/documents/{document_id}", response_model=DocumentResponse)
@limit_writes
async def update_document(
    request: Request,
    document_id: str,
    body: DocumentUpdate,
    command_svc: Annotated[
        DocumentCommandService, Depends(get_document_command_service)
    ],
):
    """Re-associate a document with another application."""
    view = await command_svc.update_application(document_id, body.application_id)
    return DocumentResponse.model_validate(view)


@router.delete("/documents/{document_id}", status_code=204)
@limit_writes
async def delete_document(
    request: Request,
    document_id: str,
    command_svc: Annotated[
        DocumentCommandService, Depends(get_document_command_service)
    ],
) -> None:
    """Delete the blob, then the record."""
    await command_svc.delete_document(document_id)
