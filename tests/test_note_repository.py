"""
Noter Backend: Note Repository Tests
======================================

What:  Tests for NoteRepository insert, list and get-by-id.
How:   Against the in-memory SQLite store from conftest; error wrapping with
       a mocked Database.

What we test:
    ✅ A created note can be read back unchanged
    ✅ Listing is newest-first and empty when there are no notes
    ✅ Unknown ids raise NotFoundError
    ✅ Store failures are wrapped in DatabaseError with the operation name
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from noter.exceptions import DatabaseError, ErrorKind, NotFoundError
from noter.models.note import Note
from noter.repositories.note_repository import NoteRepository


def _note_at(title: str, created_at: datetime) -> Note:
    return Note(id=uuid.uuid4(), title=title, created_at=created_at, updated_at=created_at)


class TestNoteModel:

    def test_new_note_has_matching_timestamps(self):
        note = Note.new("groceries")

        assert isinstance(note.id, uuid.UUID)
        assert note.title == "groceries"
        assert note.created_at == note.updated_at
        assert note.created_at.tzinfo is not None

    def test_new_notes_get_distinct_ids(self):
        assert Note.new("a").id != Note.new("a").id


class TestCreateAndGet:

    def setup_method(self):
        self.note = Note.new("Read the paper")

    @pytest.mark.asyncio
    async def test_create_then_get(self, database):
        repo = NoteRepository(database)

        await repo.create_note(self.note)
        fetched = await repo.get_note_by_id(self.note.id)

        assert fetched.id == self.note.id
        assert fetched.title == "Read the paper"
        assert fetched.created_at == fetched.updated_at

    @pytest.mark.asyncio
    async def test_get_unknown_id_raises_not_found(self, database):
        repo = NoteRepository(database)

        with pytest.raises(NotFoundError) as exc_info:
            await repo.get_note_by_id(uuid.uuid4())

        assert exc_info.value.is_not_found

    @pytest.mark.asyncio
    async def test_duplicate_id_is_a_database_error(self, database):
        repo = NoteRepository(database)
        await repo.create_note(self.note)

        duplicate = Note(
            id=self.note.id,
            title="again",
            created_at=self.note.created_at,
            updated_at=self.note.updated_at,
        )
        with pytest.raises(DatabaseError) as exc_info:
            await repo.create_note(duplicate)

        assert exc_info.value.operation == "create note"
        assert not exc_info.value.is_not_found


class TestGetAllNotes:

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, database):
        notes = await NoteRepository(database).get_all_notes()
        assert notes == []

    @pytest.mark.asyncio
    async def test_newest_first(self, database):
        repo = NoteRepository(database)
        base = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
        for offset, title in enumerate(["A", "B", "C"]):
            await repo.create_note(_note_at(title, base + timedelta(minutes=offset)))

        notes = await repo.get_all_notes()

        assert [n.title for n in notes] == ["C", "B", "A"]


class TestErrorWrapping:

    def setup_method(self):
        self.database = MagicMock()
        self.repo = NoteRepository(self.database)

    @pytest.mark.asyncio
    async def test_list_failure_is_wrapped(self):
        self.database.session.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            await self.repo.get_all_notes()

        err = exc_info.value
        assert err.kind is ErrorKind.QUERY
        assert err.operation == "list notes"
        assert "connection reset" in str(err)

    @pytest.mark.asyncio
    async def test_get_failure_is_wrapped(self):
        self.database.session.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            await self.repo.get_note_by_id(uuid.uuid4())

        assert exc_info.value.operation == "get note"
        assert not exc_info.value.is_not_found

    @pytest.mark.asyncio
    async def test_transaction_error_keeps_its_kind(self):
        self.database.with_transaction = AsyncMock(
            side_effect=DatabaseError(
                message="error committing transaction",
                kind=ErrorKind.TRANSACTION,
                operation="commit",
            )
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.repo.create_note(Note.new("x"))

        assert exc_info.value.kind is ErrorKind.TRANSACTION
        assert exc_info.value.operation == "create note"
