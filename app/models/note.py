"""
Note model - a user's note, owned by the Google subject id that created it.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    SQLAlchemy ORM model for the 'notes' table.

    `owner` is the Google `sub` of the author. It is always taken from the
    validated session, never from request bodies.
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # owner: Google subject id (opaque, up to 255 chars)
    owner: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # updated_at: refreshed on every UPDATE through the ORM
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Serves "newest notes of this owner" for both listing and the ask context
    __table_args__ = (Index("ix_notes_owner_created_at", "owner", "created_at"),)

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, owner='{self.owner}')>"
