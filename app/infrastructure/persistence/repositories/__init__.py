"""Persistence repositories: SQLAlchemy implementations of application ports."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.document_repo import (
    DocumentRepository,
)

__all__ = [
    "BaseRepository",
    "DocumentRepository",
]
