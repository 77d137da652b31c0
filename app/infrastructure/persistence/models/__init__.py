"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.document import Document
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin

__all__ = [
    "CuidMixin",
    "Document",
    "TimestampMixin",
]
