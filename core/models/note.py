# =============================================================================
# core/models/note.py - Note Schemas
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    """
    Schema for creating a note.

    Example:
        {"content": "Call the bank about the mortgage on Friday"}
    """
    content: str = Field(..., min_length=1, max_length=20000, description="Note text")


class NoteUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)


class NoteResponse(BaseModel):
    id: UUID
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
