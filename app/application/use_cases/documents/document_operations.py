"""Document operations: upload (write), query (read), and commands (update/delete).

The metadata repository and the blob store share no transaction. Consistency
between them is kept by ordering: uploads write the blob first and delete it
again if the record cannot be persisted; deletes remove the blob first and the
record second, so a failure never leaves an untracked blob behind. Each
sequence commits its record change itself, so a rejected commit is handled
like any other persistence failure before the caller sees a result.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import BinaryIO

from app.application.dtos.document import (
    DocumentCreate,
    DocumentResult,
    DocumentView,
    DownloadLink,
    UploadPolicy,
    UploadResult,
)
from app.application.interfaces.repositories import IDocumentRepository
from app.application.interfaces.storage import IBlobStore
from app.domain.enums import DeleteStage, UploadStage
from app.domain.exceptions import (
    DmsException,
    PersistenceException,
    ResourceNotFoundException,
    StorageException,
    StorageKeyConflictException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.utils.generators import generate_cuid
from app.shared.utils.sanitization import sanitize_filename, validate_identifier

logger = get_logger(__name__)

UPLOAD_SUCCESS_MESSAGE = "File uploaded successfully"


def _rewind_if_seekable(file_data: BinaryIO) -> None:
    """Reset file position to start if stream is seekable."""
    if getattr(file_data, "seekable", lambda: False)():
        file_data.seek(0)


def _file_extension(filename: str) -> str:
    """Return the last extension including the dot (".pdf"), or "" when there is none."""
    _, ext = os.path.splitext(filename)
    return ext.lower()


def build_storage_key(application_id: str, document_id: str, filename: str) -> str:
    """Derive the object key from the association and document ids.

    The original filename contributes only its extension, so keys stay
    traceable to their application without exposing user-supplied names.
    """
    return f"applications/{application_id}/{document_id}{_file_extension(filename)}"


def _require_identifier(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationException(f"An {field} must be provided", field=field)
    try:
        return validate_identifier(value.strip())
    except ValueError as e:
        raise ValidationException(f"Invalid {field}: {e}", field=field) from e


def _log_storage_failure(action: str, exc: StorageException) -> None:
    logger.error(
        "Blob store %s failed: code=%s key=%s backend_code=%s status=%s reason=%s",
        action,
        exc.error_code,
        exc.details.get("storage_key"),
        exc.details.get("backend_code"),
        exc.details.get("status_code"),
        exc.details.get("reason"),
    )


class DocumentUploadService:
    """Single responsibility: store the blob, then the record, keeping both consistent."""

    def __init__(
        self,
        blob_store: IBlobStore,
        document_repo: IDocumentRepository,
        policy: UploadPolicy,
        id_generator: Callable[[], str] = generate_cuid,
    ) -> None:
        self.blob_store = blob_store
        self.document_repo = document_repo
        self.policy = policy
        self.id_generator = id_generator

    def validate_upload(
        self,
        size_bytes: int,
        filename: str | None,
        content_type: str | None,
        application_id: str | None,
    ) -> tuple[str, str, str]:
        """Check the upload against the policy. Returns (application_id, filename, content_type).

        Raises ValidationException; never touches storage or the database.
        """
        app_id = _require_identifier(application_id, "application_id")
        if size_bytes <= 0:
            raise ValidationException("File cannot be empty", field="file")
        if size_bytes > self.policy.max_size_bytes:
            raise ValidationException(
                f"File size exceeds maximum allowed size of {self.policy.max_size_bytes} bytes",
                field="file",
            )
        normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
        if normalized_type not in self.policy.allowed_content_types:
            allowed = ", ".join(sorted(self.policy.allowed_content_types))
            raise ValidationException(
                f"File type not allowed. Supported types: {allowed}",
                field="content_type",
            )
        if filename is None or not filename.strip():
            raise ValidationException("File must have a valid filename", field="filename")
        try:
            safe_name = sanitize_filename(filename)
        except ValueError as e:
            raise ValidationException(str(e), field="filename") from e
        return app_id, safe_name, normalized_type

    async def upload_document(
        self,
        file_data: BinaryIO,
        size_bytes: int,
        filename: str | None,
        content_type: str | None,
        application_id: str | None,
    ) -> UploadResult:
        """Upload file to the blob store, persist its record, and return a download URL.

        Raises:
            ValidationException: Rejected before any I/O.
            StorageKeyConflictException: The derived key is already owned by a record.
            StorageException: Blob write or URL issuance failed.
            PersistenceException: Record could not be saved (blob was cleaned up).
        """
        stage = UploadStage.VALIDATING
        app_id, safe_name, mime_type = self.validate_upload(
            size_bytes, filename, content_type, application_id
        )

        document_id = self.id_generator()
        storage_key = build_storage_key(app_id, document_id, safe_name)
        logger.info(
            "Starting document upload: application=%s document=%s key=%s size=%d",
            app_id,
            document_id,
            storage_key,
            size_bytes,
        )

        if await self.document_repo.get_by_storage_key(storage_key) is not None:
            logger.error(
                "Generated storage key already in use; refusing to overwrite: %s",
                storage_key,
            )
            raise StorageKeyConflictException(storage_key)

        stage = UploadStage.STORING_BLOB
        _rewind_if_seekable(file_data)
        try:
            await self.blob_store.put(storage_key, size_bytes, file_data, mime_type)
        except StorageException as e:
            _log_storage_failure("put", e)
            e.details.setdefault("stage", stage.value)
            raise

        stage = UploadStage.PERSISTING_METADATA
        record = DocumentCreate(
            id=document_id,
            application_id=app_id,
            storage_bucket=self.blob_store.bucket,
            storage_key=storage_key,
            original_filename=safe_name,
            content_type=mime_type,
            size_bytes=size_bytes,
        )
        try:
            saved = await self.document_repo.create_document(record)
            await self.document_repo.commit()
        except StorageKeyConflictException:
            # The blob at this key belongs to the record that won the race.
            logger.error(
                "Storage key claimed concurrently; keeping blob for existing record: %s",
                storage_key,
            )
            raise
        except DmsException as e:
            logger.error(
                "Persisting document %s failed (%s); removing blob %s",
                document_id,
                e.error_code,
                storage_key,
            )
            await self._discard_blob(storage_key)
            e.details.setdefault("stage", stage.value)
            raise
        except Exception as e:
            logger.exception(
                "Unexpected error persisting document %s; removing blob %s",
                document_id,
                storage_key,
            )
            await self._discard_blob(storage_key)
            raise PersistenceException("create_document", str(e)) from e

        stage = UploadStage.ISSUING_URL
        try:
            url = await self.blob_store.presign_download(
                storage_key, self.policy.download_url_ttl
            )
        except StorageException as e:
            _log_storage_failure("presign", e)
            await self._roll_back_upload(saved)
            e.details.setdefault("stage", stage.value)
            raise

        stage = UploadStage.DONE
        logger.info(
            "Document upload %s: document=%s key=%s", stage.value, saved.id, storage_key
        )
        return UploadResult(
            document_id=saved.id,
            message=UPLOAD_SUCCESS_MESSAGE,
            download_url=url,
            expires_in_seconds=self.policy.download_url_ttl_seconds,
        )

    async def _discard_blob(self, storage_key: str) -> None:
        """Best-effort compensating delete. Failure is logged; the caller's error stands."""
        logger.warning(
            "Upload %s: deleting blob %s", UploadStage.ROLLING_BACK.value, storage_key
        )
        try:
            await self.blob_store.delete(storage_key)
        except Exception:
            logger.exception(
                "Failed to clean up blob after failed upload; orphaned blob at %s",
                storage_key,
            )

    async def _roll_back_upload(self, saved: DocumentResult) -> None:
        """Undo a persisted upload whose URL could not be issued."""
        try:
            await self.document_repo.delete_document(saved.id)
            await self.document_repo.commit()
        except Exception:
            logger.exception(
                "Failed to remove record %s during upload rollback", saved.id
            )
        await self._discard_blob(saved.storage_key)


class DocumentQueryService:
    """Single responsibility: document metadata, download URLs, and listing."""

    def __init__(
        self,
        blob_store: IBlobStore,
        document_repo: IDocumentRepository,
        policy: UploadPolicy,
    ) -> None:
        self.blob_store = blob_store
        self.document_repo = document_repo
        self.policy = policy

    async def _get_or_raise(self, document_id: str) -> DocumentResult:
        doc = await self.document_repo.get_by_id(document_id)
        if not doc:
            raise ResourceNotFoundException("document", document_id)
        return doc

    async def _presign(self, doc: DocumentResult) -> DownloadLink:
        try:
            url = await self.blob_store.presign_download(
                doc.storage_key, self.policy.download_url_ttl
            )
        except StorageException as e:
            _log_storage_failure("presign", e)
            raise
        return DownloadLink(
            url=url, expires_in_seconds=self.policy.download_url_ttl_seconds
        )

    async def get_download_url(self, document_id: str) -> DownloadLink:
        """Return a presigned URL for the document; the blob itself is not checked."""
        logger.info("Generating download URL for document: %s", document_id)
        doc = await self._get_or_raise(document_id)
        return await self._presign(doc)

    async def get_download_url_for_application(
        self, application_id: str
    ) -> DownloadLink:
        """Return a presigned URL for the first document of the application."""
        logger.info("Generating download URL for application: %s", application_id)
        docs = await self.document_repo.get_by_application_id(application_id)
        if not docs:
            raise ResourceNotFoundException("application document", application_id)
        return await self._presign(docs[0])

    async def get_document_metadata(self, document_id: str) -> DocumentView:
        """Return document metadata; raise ResourceNotFoundException if not found."""
        return DocumentView.from_result(await self._get_or_raise(document_id))

    async def list_documents(self, application_id: str) -> list[DocumentView]:
        """Return all documents for the application (metadata only)."""
        docs = await self.document_repo.get_by_application_id(application_id)
        return [DocumentView.from_result(d) for d in docs]


class DocumentCommandService:
    """Single responsibility: change the association and delete documents."""

    def __init__(
        self,
        blob_store: IBlobStore,
        document_repo: IDocumentRepository,
    ) -> None:
        self.blob_store = blob_store
        self.document_repo = document_repo

    async def update_application(
        self, document_id: str, application_id: str | None
    ) -> DocumentView:
        """Re-associate a document with another application. No blob interaction."""
        new_app_id = (
            _require_identifier(application_id, "application_id")
            if application_id is not None
            else None
        )
        logger.info(
            "Updating document %s association to application %s",
            document_id,
            new_app_id,
        )
        updated = await self.document_repo.update_application_id(document_id, new_app_id)
        if not updated:
            raise ResourceNotFoundException("document", document_id)
        await self.document_repo.commit()
        return DocumentView.from_result(updated)

    async def delete_document(self, document_id: str) -> None:
        """Delete the blob, then the record.

        If the blob delete fails the record is left untouched and the call can
        be retried from the same state.
        """
        doc = await self.document_repo.get_by_id(document_id)
        if not doc:
            raise ResourceNotFoundException("document", document_id)
        logger.info(
            "Deleting document %s (%s): key=%s",
            document_id,
            DeleteStage.FOUND.value,
            doc.storage_key,
        )

        try:
            await self.blob_store.delete(doc.storage_key)
        except StorageException as e:
            _log_storage_failure("delete", e)
            e.details.setdefault("stage", DeleteStage.FOUND.value)
            raise
        logger.info("Deleting document %s: %s", document_id, DeleteStage.BLOB_DELETED.value)

        await self.document_repo.delete_document(doc.id)
        await self.document_repo.commit()
        logger.info(
            "Deleting document %s: %s", document_id, DeleteStage.METADATA_DELETED.value
        )
