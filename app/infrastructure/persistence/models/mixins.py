"""SQLAlchemy mixins for common model patterns.

Values are assigned by the application, never by ORM defaults or the
database: ids come from the upload service, timestamps from the repository.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class CuidMixin:
    """Mixin for models keyed by a caller-assigned CUID."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String(64), primary_key=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), nullable=False)
