"""
NoteDesk Backend — Note Repository
====================================

What:  Owner-scoped CRUD over the `notes` table.
How:   Every statement filters on `user_id == self.user.id`; the owner is
       bound at construction from the verified session and no method
       accepts an owner argument.
Who:   Constructed per request by the note router procedures.

Not-found semantics:
    get / update   → NotFoundError when the id is absent OR owned by another
                     user (one error for both, no ownership leak)
    delete         → always {"success": True}; deleting a missing row is a no-op
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notedesk.exceptions import DatabaseError, NotFoundError
from notedesk.models.note import Note, utcnow
from notedesk.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

# Columns a caller may change; everything else is owned by this layer
UPDATABLE_FIELDS = frozenset({"title", "content"})


class NoteRepository:
    """CRUD for the authenticated user's notes."""

    def __init__(self, session: AsyncSession, user: AuthUser):
        self.session = session
        self.user = user

    async def list(self) -> List[Note]:
        """All of the owner's notes, newest first. Empty list when none."""
        try:
            result = await self.session.execute(
                select(Note)
                .where(Note.user_id == self.user.id)
                .order_by(desc(Note.created_at))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for %s: %s", self.user.id, str(e))
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"operation": "note.list", "error_type": type(e).__name__},
            )

    async def get(self, note_id: uuid.UUID) -> Note:
        try:
            result = await self.session.execute(
                select(Note).where(Note.id == note_id, Note.user_id == self.user.id)
            )
            note = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"operation": "note.get", "note_id": str(note_id)},
            )

        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def create(self, title: str, content: Optional[str] = None) -> Note:
        """
        Insert a note for the owner.

        Title length is enforced by NoteCreateInput before this is called;
        `content` falls back to an empty string.
        """
        now = utcnow()
        note = Note(
            id=uuid.uuid4(),
            user_id=self.user.id,
            title=title,
            content=content or "",
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(note)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating note for %s: %s", self.user.id, str(e))
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"operation": "note.create", "error_type": type(e).__name__},
            )

        logger.info("Note %s created", note.id)
        return note

    async def update(self, note_id: uuid.UUID, fields: Dict[str, Any]) -> Note:
        """
        Apply a partial update and stamp `updated_at`.

        Fields outside UPDATABLE_FIELDS are ignored, so id, owner and
        created_at survive whatever the caller passes.
        """
        note = await self.get(note_id)

        for name, value in fields.items():
            if name in UPDATABLE_FIELDS and value is not None:
                setattr(note, name, value)
        note.updated_at = utcnow()

        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"operation": "note.update", "note_id": str(note_id)},
            )
        return note

    async def delete(self, note_id: uuid.UUID) -> Dict[str, bool]:
        try:
            result = await self.session.execute(
                delete(Note).where(Note.id == note_id, Note.user_id == self.user.id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"operation": "note.delete", "note_id": str(note_id)},
            )

        if result.rowcount:
            logger.info("Note %s deleted", note_id)
        return {"success": True}
