"""SQLAlchemy ORM model for schemaless documents grouped into collections."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from circuit_backend.infrastructure.database.base import Base


class DocumentModel(Base):
    """ORM model — maps to the 'documents' table.

    Timestamps live in dedicated columns; every other field is kept in
    ``data`` exactly as the caller supplied it.
    """

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_documents_collection_created", "collection", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<DocumentModel(collection='{self.collection}', id={self.id})>"
