"""
Notes router - CRUD over the signed-in user's notes.

Endpoints:
- GET    /api/notes        → newest first, optional ?q= filter
- POST   /api/notes        → create
- PUT    /api/notes/{id}   → partial update
- DELETE /api/notes/{id}   → idempotent delete

The owner is always the session's subject id. The legacy `owner` field is
still accepted but must match it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.errors import ForbiddenError
from app.deps import get_current_user, get_notes_service
from app.schemas.common import OkResponse
from app.schemas.note import NoteCreate, NoteOut, NoteUpdate
from app.services.notes_service import NotesService
from app.services.session_service import SessionUser

router = APIRouter(prefix="/api/notes", tags=["notes"])


def resolve_owner(user: SessionUser, requested: Optional[str]) -> str:
    """
    Owner for this request: always the session subject.

    Raises:
        403 owner_mismatch: the client named somebody else
    """
    if requested and requested != user.subject:
        raise ForbiddenError("Cannot access another user's notes", error="owner_mismatch")
    return user.subject


@router.get("", response_model=list[NoteOut])
def list_notes(
    owner: Optional[str] = Query(None, description="Must equal the signed-in user if sent"),
    q: Optional[str] = Query(None, description="Case-insensitive text filter"),
    user: SessionUser = Depends(get_current_user),
    notes: NotesService = Depends(get_notes_service),
):
    """List the caller's notes, most recently created first (one page)."""
    return notes.list(resolve_owner(user, owner), query=q)


@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def create_note(
    payload: NoteCreate,
    user: SessionUser = Depends(get_current_user),
    notes: NotesService = Depends(get_notes_service),
):
    return notes.create(resolve_owner(user, payload.owner), title=payload.title, body=payload.body)


@router.put("/{note_id}", response_model=NoteOut)
def update_note(
    note_id: str,
    payload: NoteUpdate,
    user: SessionUser = Depends(get_current_user),
    notes: NotesService = Depends(get_notes_service),
):
    """
    Update title and/or body of a note.

    Raises:
        404 note_not_found: no such note for this user
    """
    return notes.update(user.subject, note_id, title=payload.title, body=payload.body)


@router.delete("/{note_id}", response_model=OkResponse)
def delete_note(
    note_id: str,
    user: SessionUser = Depends(get_current_user),
    notes: NotesService = Depends(get_notes_service),
):
    """Delete a note. Deleting a missing note also returns {"ok": true}."""
    notes.delete(user.subject, note_id)
    return OkResponse()
