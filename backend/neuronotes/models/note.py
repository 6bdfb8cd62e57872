"""
NeuroNotes Backend: Note SQLAlchemy Model
=========================================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by NoteService for CRUD operations.

Table Design:
    - id: opaque UUID string, generated by the persistence layer
    - title: non-empty, at most 255 characters (enforced in the schema layer)
    - content: free text, empty allowed
    - created_at / updated_at: UTC, timezone-aware
    - user_id: owning account; every query filters on it

    Composite index (user_id, created_at DESC) serves the only list query:
    "this user's notes, newest first".
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from neuronotes.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A user-owned title/content record.

    Lifecycle:
        1. Created by POST /api/notes (or the new-note page)
        2. Title/content replaced in place by PUT /api/notes/{id}
        3. Removed by DELETE /api/notes/{id}
        Deleting the owning user cascades to their notes.

    Query Patterns:
        - List: WHERE user_id = :uid ORDER BY created_at DESC
        - Get:  WHERE id = :id AND user_id = :uid
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_notes_user_created_at", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
