"""
User session model - server-side record of an issued session token.

Only written when SESSION_BACKEND=database. The token's `jti` claim is the
primary key, so validation is a single lookup.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class UserSession(Base):
    """
    SQLAlchemy ORM model for the 'user_sessions' table.

    Rows are never deleted by logout; they are flagged as revoked so the
    audit trail survives.
    """

    __tablename__ = "user_sessions"

    # id: equals the token's jti claim
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    subject: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<UserSession(id={self.id}, subject='{self.subject}', revoked={self.revoked})>"
