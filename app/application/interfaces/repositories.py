"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.document import DocumentCreate, DocumentResult


class IDocumentRepository(Protocol):
    """Protocol for document metadata repository (DIP).

    Implementations raise StorageKeyConflictException when storage_key is
    already taken and PersistenceException for any other store failure.
    """

    async def create_document(self, document: DocumentCreate) -> DocumentResult:
        """Create document from write-model DTO; return created read-model."""

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        """Return document by ID."""

    async def get_by_application_id(
        self, application_id: str
    ) -> list[DocumentResult]:
        """Return all documents associated with the application, oldest first."""

    async def get_by_storage_key(self, storage_key: str) -> DocumentResult | None:
        """Return the document stored at storage_key (collision detection)."""

    async def update_application_id(
        self, document_id: str, application_id: str | None
    ) -> DocumentResult | None:
        """Overwrite the association and refresh updated_at; None if not found."""

    async def delete_document(self, document_id: str) -> bool:
        """Delete the record; return False if it did not exist."""

    async def commit(self) -> None:
        """Make the writes of the current sequence durable.

        Called by the document services as the last step of a write
        sequence; raises PersistenceException if the store rejects it.
        """
