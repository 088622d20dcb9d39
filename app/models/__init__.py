"""ORM models. Importing this package registers every table on Base.metadata."""

from app.models.note import Note
from app.models.session import UserSession

__all__ = ["Note", "UserSession"]
