"""
Noter Backend: Note Repository
================================

What:  Maps the Note entity to SQL: insert, list newest-first, fetch by id.
How:   Uses the injected Database handle. Writes run inside
       Database.with_transaction; reads use a short-lived session.
Who:   Called by the /notes route handlers through get_note_repository.

Error Handling Strategy:
    Store failures are wrapped in DatabaseError(kind=QUERY) naming the
    operation that failed. A missing row becomes NotFoundError. The
    repository does not decide HTTP statuses; the routes do.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import Depends
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from noter.database import Database, get_database
from noter.exceptions import DatabaseError, ErrorKind, NoterError, NotFoundError
from noter.models.note import Note

logger = logging.getLogger(__name__)


class NoteRepository:
    """
    Persistence operations for notes.

    Stateless apart from the shared Database handle, so one instance per
    request is cheap.
    """

    def __init__(self, database: Database):
        self._db = database

    async def create_note(self, note: Note) -> None:
        """
        Insert a fully built note (id and timestamps already assigned).

        Raises:
            DatabaseError: The insert or its commit failed.
        """

        async def _insert(session: AsyncSession) -> None:
            session.add(note)
            await session.flush()

        try:
            await self._db.with_transaction(_insert)
        except NoterError as e:
            raise DatabaseError(
                message="failed to create note",
                kind=e.kind,
                operation="create note",
                cause=e,
                context={"note_id": str(note.id)},
            ) from e
        except Exception as e:
            raise DatabaseError(
                message="failed to create note",
                kind=ErrorKind.QUERY,
                operation="create note",
                cause=e,
                context={"note_id": str(note.id)},
            ) from e

        logger.info("Note created: %s", note.id)

    async def get_all_notes(self) -> List[Note]:
        """
        All notes ordered by created_at descending (newest first).

        Query plan:
            SELECT id, title, created_at, updated_at FROM notes
            ORDER BY created_at DESC
            → idx_notes_created_at

        Returns an empty list when the table is empty.
        """
        try:
            async with self._db.session() as session:
                result = await session.execute(
                    select(Note).order_by(desc(Note.created_at))
                )
                return list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing notes: %s", str(e))
            raise DatabaseError(
                message="failed to get notes",
                kind=ErrorKind.QUERY,
                operation="list notes",
                cause=e,
            ) from e

    async def get_note_by_id(self, note_id: UUID) -> Note:
        """
        Fetch one note by primary key.

        Raises:
            NotFoundError: No row has this id.
            DatabaseError: The query failed.
        """
        try:
            async with self._db.session() as session:
                result = await session.execute(
                    select(Note).where(Note.id == note_id)
                )
                note = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="failed to get note by ID",
                kind=ErrorKind.QUERY,
                operation="get note",
                cause=e,
                context={"note_id": str(note_id)},
            ) from e

        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note


def get_note_repository(database: Database = Depends(get_database)) -> NoteRepository:
    """FastAPI dependency; tests replace it through app.dependency_overrides."""
    return NoteRepository(database)
