"""Signed download route for the local blob store.

S3 presigned URLs point at the bucket directly; this route only serves URLs
issued by LocalBlobStore, and only while their signature is valid.
"""

import mimetypes
from pathlib import PurePosixPath
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from app.api.v1.dependencies import get_blob_store
from app.application.interfaces.storage import IBlobStore
from app.infrastructure.exceptions import StorageNotFoundError
from app.infrastructure.external.storage.local_storage import LocalBlobStore

router = APIRouter()


@router.get("/download")
async def download_blob(
    blob_store: Annotated[IBlobStore, Depends(get_blob_store)],
    key: Annotated[str, Query(min_length=1, max_length=1024)],
    expires: Annotated[int, Query()],
    signature: Annotated[str, Query(min_length=1, max_length=128)],
) -> StreamingResponse:
    """Stream the blob at key if the signature matches and has not expired."""
    if not isinstance(blob_store, LocalBlobStore):
        raise HTTPException(status_code=404, detail="Not found")
    if not blob_store.verify_download_signature(key, expires, signature):
        raise HTTPException(status_code=403, detail="Invalid or expired download link")
    if not await blob_store.exists(key):
        raise StorageNotFoundError(key)
    filename = PurePosixPath(key).name
    media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return StreamingResponse(
        blob_store.open_stream(key),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
