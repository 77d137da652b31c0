"""Document ORM model. Metadata for one stored blob."""

from sqlalchemy import BigInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Document(CuidMixin, TimestampMixin, Base):
    """Document entity. Table: document. storage_key is unique across all rows."""

    __tablename__ = "document"

    application_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )
    storage_bucket: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("storage_key", name="uq_document_storage_key"),
    )
