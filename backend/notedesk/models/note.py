"""
NoteDesk Backend — Note SQLAlchemy Model
==========================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteRepository for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key, generated on insert
    - user_id: owner, FK to profiles.id; every query filters on it
    - title: 1–200 chars (length enforced by the input schema, width by the column)
    - content: free text, empty string when omitted
    - created_at / updated_at: UTC, timezone-aware

    Composite index (user_id, created_at DESC) serves the one list query:
    "this user's notes, newest first".
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notedesk.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A short text note owned by exactly one user.

    Lifecycle:
        1. Created by its owner (content defaults to "")
        2. Updated in place; id, user_id and created_at never change
        3. Hard-deleted by its owner (no tombstone)
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user; the authorization filter on every query",
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_notes_user_id_created_at", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
