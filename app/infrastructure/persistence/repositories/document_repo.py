"""Document repository. Returns application DTOs; never leaks ORM objects."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.document import DocumentCreate, DocumentResult
from app.domain.exceptions import PersistenceException, StorageKeyConflictException
from app.infrastructure.persistence.models.document import Document
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

T = TypeVar("T")


def _create_to_document(d: DocumentCreate) -> Document:
    """Map DocumentCreate (write-model) to ORM Document for persistence."""
    now = utc_now()
    return Document(
        id=d.id,
        application_id=d.application_id,
        storage_bucket=d.storage_bucket,
        storage_key=d.storage_key,
        original_filename=d.original_filename,
        content_type=d.content_type,
        size_bytes=d.size_bytes,
        created_at=now,
        updated_at=now,
    )


def _document_to_result(d: Document) -> DocumentResult:
    """Map ORM Document to application DocumentResult."""
    return DocumentResult(
        id=d.id,
        application_id=d.application_id,
        storage_bucket=d.storage_bucket,
        storage_key=d.storage_key,
        original_filename=d.original_filename,
        content_type=d.content_type,
        size_bytes=d.size_bytes,
        created_at=ensure_utc(d.created_at),
        updated_at=ensure_utc(d.updated_at),
    )


def _is_storage_key_violation(e: IntegrityError) -> bool:
    return "storage_key" in str(e.orig)


class DocumentRepository(BaseRepository[Document]):
    """Document repository. create_document() accepts DocumentCreate; reads return DocumentResult.

    Unique-key violations on storage_key become StorageKeyConflictException;
    every other database error becomes PersistenceException.
    """

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Document)

    async def _run(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except IntegrityError as e:
            logger.error("Integrity error during %s: %s", operation, e.orig)
            raise PersistenceException(operation, str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, e)
            raise PersistenceException(operation, str(e)) from e

    async def _get_orm_by_id(self, document_id: str) -> Document | None:
        result = await self.db.execute(
            select(Document).where(Document.id == document_id)
        )
        return result.scalar_one_or_none()

    async def create_document(self, document: DocumentCreate) -> DocumentResult:
        """Create document from write-model DTO; return read-model."""
        orm = _create_to_document(document)
        try:
            created = await super().create(orm)
        except IntegrityError as e:
            if _is_storage_key_violation(e):
                logger.error(
                    "Storage key already claimed by another document: %s",
                    document.storage_key,
                )
                raise StorageKeyConflictException(document.storage_key) from e
            logger.error("Integrity error creating document %s: %s", document.id, e.orig)
            raise PersistenceException("create_document", str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating document %s: %s", document.id, e)
            raise PersistenceException("create_document", str(e)) from e
        return _document_to_result(created)

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        row = await self._run("get_by_id", lambda: self._get_orm_by_id(document_id))
        return _document_to_result(row) if row else None

    async def get_by_application_id(self, application_id: str) -> list[DocumentResult]:
        """Return documents for the application, oldest first."""

        async def _query() -> list[Document]:
            result = await self.db.execute(
                select(Document)
                .where(Document.application_id == application_id)
                .order_by(Document.created_at.asc(), Document.id.asc())
            )
            return list(result.scalars().all())

        rows = await self._run("get_by_application_id", _query)
        return [_document_to_result(d) for d in rows]

    async def get_by_storage_key(self, storage_key: str) -> DocumentResult | None:
        async def _query() -> Document | None:
            result = await self.db.execute(
                select(Document).where(Document.storage_key == storage_key)
            )
            return result.scalar_one_or_none()

        row = await self._run("get_by_storage_key", _query)
        return _document_to_result(row) if row else None

    async def update_application_id(
        self, document_id: str, application_id: str | None
    ) -> DocumentResult | None:
        """Overwrite the association and refresh updated_at; None if not found."""

        async def _update() -> Document | None:
            orm = await self._get_orm_by_id(document_id)
            if orm is None:
                return None
            orm.application_id = application_id
            orm.updated_at = utc_now()
            return await super(DocumentRepository, self).update(orm)

        updated = await self._run("update_application_id", _update)
        return _document_to_result(updated) if updated else None

    async def delete_document(self, document_id: str) -> bool:
        """Delete the record; return False if it did not exist."""

        async def _delete() -> bool:
            orm = await self._get_orm_by_id(document_id)
            if orm is None:
                return False
            await super(DocumentRepository, self).delete(orm)
            return True

        return await self._run("delete_document", _delete)

    async def commit(self) -> None:
        """Commit the session's transaction. Failures become PersistenceException."""
        await self._run("commit", self.db.commit)
        logger.debug("Document transaction committed")

    async def _on_after_create(self, obj: Document) -> None:
        logger.debug("Document record created: id=%s key=%s", obj.id, obj.storage_key)

    async def _on_before_delete(self, obj: Document) -> None:
        logger.debug("Deleting document record: id=%s key=%s", obj.id, obj.storage_key)
