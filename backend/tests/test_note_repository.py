"""
NoteDesk Backend — Note Repository Tests
==========================================

What:  Owner-scoped CRUD over the notes table.
How:   Real SQL against in-memory SQLite; error paths use a mock session.

What we test:
    ✅ Create fills owner, id, timestamps and defaults content to ""
    ✅ List is per-owner and newest first
    ✅ Another user's note is indistinguishable from a missing one
    ✅ Partial updates leave unsent fields alone
    ✅ Delete is idempotent and never touches other owners' rows
    ✅ Driver failures surface as DatabaseError
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from notedesk.exceptions import DatabaseError, NotFoundError
from notedesk.repositories import NoteRepository
from notedesk.schemas.auth import AuthUser


class TestNoteCreate:

    @pytest.mark.asyncio
    async def test_create_sets_owner_and_defaults(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)

        note = await repo.create(title="Groceries")

        assert note.id is not None
        assert note.user_id == user_a.id
        assert note.title == "Groceries"
        assert note.content == ""
        assert note.created_at is not None
        assert note.updated_at is not None

    @pytest.mark.asyncio
    async def test_default_content_survives_read_back(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        created = await repo.create(title="t")
        db_session.expunge_all()

        fetched = await repo.get(created.id)

        assert fetched is not created
        assert fetched.content == ""

    @pytest.mark.asyncio
    async def test_create_keeps_content(self, db_session, user_a):
        note = await NoteRepository(db_session, user_a).create(title="T", content="eggs, milk")
        assert note.content == "eggs, milk"


class TestNoteList:

    @pytest.mark.asyncio
    async def test_empty_list(self, db_session, user_a):
        assert await NoteRepository(db_session, user_a).list() == []

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        first = await repo.create(title="first")
        second = await repo.create(title="second")
        third = await repo.create(title="third")

        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first.created_at = base
        second.created_at = base + timedelta(hours=1)
        third.created_at = base + timedelta(hours=2)
        await db_session.flush()

        notes = await repo.list()
        assert [n.title for n in notes] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_only_owners_notes(self, db_session, user_a, user_b):
        await NoteRepository(db_session, user_a).create(title="mine")
        await NoteRepository(db_session, user_b).create(title="theirs")

        notes = await NoteRepository(db_session, user_a).list()

        assert [n.title for n in notes] == ["mine"]
        assert all(n.user_id == user_a.id for n in notes)


class TestNoteGet:

    @pytest.mark.asyncio
    async def test_get_own_note(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        created = await repo.create(title="hello")

        fetched = await repo.get(created.id)
        assert fetched.id == created.id

    @pytest.mark.asyncio
    async def test_missing_note_raises_not_found(self, db_session, user_a):
        with pytest.raises(NotFoundError):
            await NoteRepository(db_session, user_a).get(uuid4())

    @pytest.mark.asyncio
    async def test_foreign_note_looks_missing(self, db_session, user_a, user_b):
        """Same error kind and shape for foreign and absent rows."""
        note = await NoteRepository(db_session, user_a).create(title="private")
        repo_b = NoteRepository(db_session, user_b)

        with pytest.raises(NotFoundError) as foreign:
            await repo_b.get(note.id)
        with pytest.raises(NotFoundError) as absent:
            await repo_b.get(uuid4())

        assert foreign.value.code == absent.value.code
        assert foreign.value.context["resource"] == absent.value.context["resource"]


class TestNoteUpdate:

    @pytest.mark.asyncio
    async def test_title_only_keeps_content(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        note = await repo.create(title="old", content="body")

        updated = await repo.update(note.id, {"title": "new"})

        assert updated.title == "new"
        assert updated.content == "body"

    @pytest.mark.asyncio
    async def test_content_only_keeps_title(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        note = await repo.create(title="keep", content="old")

        updated = await repo.update(note.id, {"content": "new"})

        assert updated.title == "keep"
        assert updated.content == "new"

    @pytest.mark.asyncio
    async def test_immutable_fields_ignored(self, db_session, user_a, user_b):
        repo = NoteRepository(db_session, user_a)
        note = await repo.create(title="t")
        original_id = note.id
        original_created = note.created_at

        updated = await repo.update(
            note.id,
            {"user_id": user_b.id, "id": uuid4(), "created_at": datetime(2000, 1, 1)},
        )

        assert updated.id == original_id
        assert updated.user_id == user_a.id
        assert updated.created_at == original_created

    @pytest.mark.asyncio
    async def test_foreign_note_not_updated(self, db_session, user_a, user_b):
        note = await NoteRepository(db_session, user_a).create(title="a's note")

        with pytest.raises(NotFoundError):
            await NoteRepository(db_session, user_b).update(note.id, {"title": "hijacked"})

        assert note.title == "a's note"


class TestNoteDelete:

    @pytest.mark.asyncio
    async def test_delete_then_get_not_found(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        note = await repo.create(title="bye")

        assert await repo.delete(note.id) == {"success": True}
        with pytest.raises(NotFoundError):
            await repo.get(note.id)

    @pytest.mark.asyncio
    async def test_delete_twice_succeeds(self, db_session, user_a):
        repo = NoteRepository(db_session, user_a)
        note = await repo.create(title="bye")

        assert await repo.delete(note.id) == {"success": True}
        assert await repo.delete(note.id) == {"success": True}

    @pytest.mark.asyncio
    async def test_foreign_delete_is_noop(self, db_session, user_a, user_b):
        note = await NoteRepository(db_session, user_a).create(title="survivor")

        result = await NoteRepository(db_session, user_b).delete(note.id)

        assert result == {"success": True}
        still_there = await NoteRepository(db_session, user_a).get(note.id)
        assert still_there.title == "survivor"


class TestNoteRepositoryErrors:

    def setup_method(self):
        self.user = AuthUser(id=uuid4(), email="x@example.com")

    @pytest.mark.asyncio
    async def test_list_wraps_driver_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection lost")

        with pytest.raises(DatabaseError) as exc_info:
            await NoteRepository(mock_db_session, self.user).list()

        assert exc_info.value.context["operation"] == "note.list"
        assert "connection lost" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_create_wraps_flush_error(self, mock_db_session):
        mock_db_session.flush.side_effect = SQLAlchemyError("constraint")

        with pytest.raises(DatabaseError):
            await NoteRepository(mock_db_session, self.user).create(title="t")

    @pytest.mark.asyncio
    async def test_delete_wraps_driver_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("timeout")

        with pytest.raises(DatabaseError):
            await NoteRepository(mock_db_session, self.user).delete(uuid4())
