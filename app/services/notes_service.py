"""
Notes service - owner-scoped CRUD over the notes table.

Every query filters by `owner`. Callers pass the subject id from the
validated session; nothing here trusts request fields for ownership.
"""

import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.note import Note, utcnow

logger = logging.getLogger("companion.notes")

NoteId = Union[str, uuid.UUID]


def escape_like(text: str) -> str:
    """Make `text` match literally inside a LIKE pattern (escape char: backslash)."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class NoteNotFound(NotFoundError):
    error = "note_not_found"
    message = "Note not found"


class NotesService:
    """
    Notes store gateway.

    Example:
        notes = NotesService(db, page_size=50)
        note = notes.create("google-sub-1", title="Groceries", body="milk")
        latest = notes.list("google-sub-1")
    """

    def __init__(self, db: Session, page_size: int = 50):
        self.db = db
        self.page_size = page_size

    def create(self, owner: str, title: Optional[str] = None, body: Optional[str] = None) -> Note:
        note = Note(owner=owner, title=title or "", body=body or "")
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        logger.info(f"Created note {note.id} for owner={owner}")
        return note

    def list(self, owner: str, query: Optional[str] = None) -> List[Note]:
        """
        Newest-first notes of `owner`, at most `page_size` of them.

        Args:
            owner: Subject id of the caller
            query: Optional case-insensitive substring matched literally on title or body
        """
        stmt = select(Note).where(Note.owner == owner)

        if query and query.strip():
            pattern = f"%{escape_like(query.strip())}%"
            stmt = stmt.where(
                or_(
                    Note.title.ilike(pattern, escape="\\"),
                    Note.body.ilike(pattern, escape="\\"),
                )
            )

        stmt = stmt.order_by(Note.created_at.desc()).limit(self.page_size)
        return list(self.db.scalars(stmt))

    def recent(self, owner: str, limit: int) -> List[Note]:
        """Newest `limit` notes of `owner` (used to build ask context)."""
        stmt = (
            select(Note)
            .where(Note.owner == owner)
            .order_by(Note.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def get(self, owner: str, note_id: NoteId) -> Note:
        note = self._find(owner, note_id)
        if note is None:
            raise NoteNotFound()
        return note

    def update(
        self,
        owner: str,
        note_id: NoteId,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> Note:
        """
        Merge the provided fields into an existing note.

        Fields left as None are not touched. A note owned by someone else is
        reported exactly like a missing one.
        """
        note = self.get(owner, note_id)

        if title is not None:
            note.title = title
        if body is not None:
            note.body = body

        # onupdate only fires for dirty rows; an empty update still refreshes the stamp
        note.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(note)
        logger.info(f"Updated note {note.id} for owner={owner}")
        return note

    def delete(self, owner: str, note_id: NoteId) -> bool:
        """
        Delete a note. Idempotent.

        Returns:
            True if a row was removed, False if there was nothing to delete
        """
        note = self._find(owner, note_id)
        if note is None:
            return False

        self.db.delete(note)
        self.db.commit()
        logger.info(f"Deleted note {note_id} for owner={owner}")
        return True

    def _find(self, owner: str, note_id: NoteId) -> Optional[Note]:
        # Ids that are not UUIDs were never issued here, so they match nothing
        try:
            key = note_id if isinstance(note_id, uuid.UUID) else uuid.UUID(str(note_id))
        except ValueError:
            return None

        stmt = select(Note).where(Note.id == key, Note.owner == owner)
        return self.db.scalars(stmt).first()
