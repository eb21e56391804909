"""
NoteDesk Backend — Note Request/Response Schemas
==================================================

What:  Pydantic models defining the note procedures' input and output.
How:   Routers validate raw RPC input against the *Input models and
       serialize repository rows through NoteResponse.

Owner fields are deliberately absent from every input model: unknown
keys such as `user_id` are dropped during validation, so the owner can
only come from the verified session.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


TITLE_MAX_LENGTH = 200


# ══════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════


class NoteIdInput(BaseModel):
    """Input of note.get and note.delete."""
    id: uuid.UUID = Field(description="Note identifier (UUID)")


class NoteCreateInput(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH, description="Note title")
    content: str = Field(default="", description="Body text; empty when omitted")


class NoteUpdateInput(BaseModel):
    """
    Partial update: only the fields present are written.

    A field may be omitted but not sent as null; the defaults below are
    never validated, so they only stand for "absent".
    """
    id: uuid.UUID = Field(description="Note identifier (UUID)")
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = Field(default=None)

    @field_validator("title", "content", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    def changes(self) -> dict:
        """The mutable fields the client actually sent."""
        return self.model_dump(exclude={"id"}, exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    success: bool = True
