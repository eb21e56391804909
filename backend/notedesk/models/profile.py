"""
NoteDesk Backend — Profile SQLAlchemy Model
=============================================

What:  ORM model representing the `profiles` table.
Who:   Used by ProfileRepository and by Alembic.

Rows are provisioned out-of-band when the auth provider creates an
account (a database trigger on the provider's users table); this
codebase only reads and updates them, never inserts or deletes.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notedesk.database import Base
from notedesk.models.note import utcnow


class Profile(Base):
    """One row per authenticated user; `id` is the auth provider's user id."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    # Mirrors the provider account; shown read-only on the profile page
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    name: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # IANA zone name, e.g. "Europe/Paris"
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")

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

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, name='{self.name}', timezone='{self.timezone}')>"
