"""
Noter Backend: Note SQLAlchemy Model
======================================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; Alembic's env.py reads its
       metadata, and the initial migration creates the same table.
Who:   Built by the create-note route, persisted and read by NoteRepository.

Table Design:
    - id:          UUID primary key, generated in Python at creation
    - title:       TEXT, non-empty (CHECK constraint), no length cap
    - created_at:  timezone-aware, set at creation
    - updated_at:  equal to created_at; no update operation exists

    Index on created_at DESC serves the newest-first listing.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from noter.database import Base


class Note(Base):
    """
    A note in the database.

    Lifecycle:
        1. Note.new(title) assigns id and a single "now" for both timestamps
        2. Inserted by NoteRepository.create_note
        3. Read back by list / get-by-id; never updated or deleted
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("title <> ''", name="ck_notes_title_not_empty"),
        Index("idx_notes_created_at", created_at.desc()),
    )

    @classmethod
    def new(cls, title: str) -> "Note":
        """Build an unsaved note with a fresh id and matching timestamps."""
        now = datetime.now(timezone.utc)
        return cls(id=uuid.uuid4(), title=title, created_at=now, updated_at=now)

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, created_at='{self.created_at}')>"
