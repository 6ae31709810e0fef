"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2025-01-15 00:00:00.000000+00:00

What:  Creates the `notes` table.
How:   Portable column types (UUID, TIMESTAMP WITH TIME ZONE on PostgreSQL),
       so the same revision also builds the SQLite schema used in tests.

Rollback: downgrade() drops the table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the notes table with its constraints and the recency index."""
    op.create_table(
        "notes",

        # Generated by the application at creation time
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),

        sa.Column("title", sa.Text(), nullable=False),

        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        # Equal to created_at; notes are never updated
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("title <> ''", name="ck_notes_title_not_empty"),
    )

    # GET /notes lists newest first
    op.create_index(
        "idx_notes_created_at",
        "notes",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
