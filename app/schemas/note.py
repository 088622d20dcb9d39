"""
Note schemas - request/response formats for the notes endpoints.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class NoteCreate(CamelModel):
    """
    Schema for POST /api/notes.

    `owner` is accepted for older clients; when sent it must equal the
    signed-in user's subject id.

    Example request body:
    {"title": "Rome trip", "body": "Book the Vatican tour"}
    """
    owner: Optional[str] = None
    title: Optional[str] = Field(None, max_length=500)
    body: Optional[str] = None


class NoteUpdate(CamelModel):
    """
    Schema for PUT /api/notes/{id}.

    Partial update: fields left out (or null) keep their current value.
    """
    title: Optional[str] = Field(None, max_length=500)
    body: Optional[str] = None


class NoteOut(CamelModel):
    """
    Example response:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "owner": "109876543210",
        "title": "Rome trip",
        "body": "Book the Vatican tour",
        "createdAt": "2025-12-02T10:30:00Z",
        "updatedAt": "2025-12-02T10:30:00Z"
    }
    """
    id: uuid.UUID
    owner: str
    title: str
    body: str
    created_at: datetime
    updated_at: datetime
