"""
NeuroNotes Backend: Note Service
================================

What:  CRUD business logic for notes, scoped to the owning user.
How:   Every query filters on user_id; a note owned by someone else is
       indistinguishable from a missing one (NotFoundError).
Who:   Note API routes and the page handlers.

Operations:
    list_notes   SELECT ... WHERE user_id = :uid ORDER BY created_at DESC
    create_note  INSERT, flush for id/timestamps
    get_note     SELECT ... WHERE id = :id AND user_id = :uid
    update_note  get_note + replace title/content
    delete_note  get_note + DELETE

Transactions are committed by get_db_session once the request succeeds;
this layer only flushes.
"""

import logging
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from neuronotes.exceptions import DatabaseError, NotFoundError
from neuronotes.models.note import Note
from neuronotes.schemas.note import NoteCreate, NoteResponse, NoteUpdate

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        NotFoundError propagates as-is (→ 404). Any SQLAlchemy error is logged
        with its details and re-raised as a DatabaseError carrying a generic
        message (→ 500).
    """

    async def _get_owned(self, db: AsyncSession, user_id: str, note_id: str) -> Note:
        result = await db.execute(
            select(Note).where(Note.id == note_id, Note.user_id == user_id)
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    async def list_notes(self, db: AsyncSession, user_id: str) -> List[NoteResponse]:
        """
        All notes owned by `user_id`, newest first.
        """
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(desc(Note.created_at))
            )
            notes = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch notes",
                context={"error_type": type(e).__name__},
            )
        return [NoteResponse.model_validate(note) for note in notes]

    async def create_note(
        self, db: AsyncSession, user_id: str, data: NoteCreate
    ) -> NoteResponse:
        """
        Persist a new note for `user_id`.

        Raises:
            DatabaseError: Insert failed (→ 500)
        """
        try:
            note = Note(title=data.title, content=data.content or "", user_id=user_id)
            db.add(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create note",
                context={"error_type": type(e).__name__},
            )
        logger.info("Note created: %s (user=%s)", note.id, user_id)
        return NoteResponse.model_validate(note)

    async def get_note(self, db: AsyncSession, user_id: str, note_id: str) -> NoteResponse:
        """
        Raises:
            NotFoundError: No such note for this user (→ 404)
            DatabaseError: Query failed (→ 500)
        """
        try:
            note = await self._get_owned(db, user_id, note_id)
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )
        return NoteResponse.model_validate(note)

    async def update_note(
        self, db: AsyncSession, user_id: str, note_id: str, data: NoteUpdate
    ) -> NoteResponse:
        """
        Replace the title of an owned note, and its content when given.

        Raises:
            NotFoundError: No such note for this user (→ 404)
            DatabaseError: Update failed (→ 500)
        """
        try:
            note = await self._get_owned(db, user_id, note_id)
            note.title = data.title
            if data.content is not None:
                note.content = data.content
            await db.flush()
            await db.refresh(note)  # pick up updated_at
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Failed to update note",
                context={"note_id": note_id},
            )
        logger.info("Note updated: %s", note_id)
        return NoteResponse.model_validate(note)

    async def delete_note(self, db: AsyncSession, user_id: str, note_id: str) -> None:
        """
        Raises:
            NotFoundError: No such note for this user (→ 404)
            DatabaseError: Delete failed (→ 500)
        """
        try:
            note = await self._get_owned(db, user_id, note_id)
            await db.delete(note)
            await db.flush()
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Failed to delete note",
                context={"note_id": note_id},
            )
        logger.info("Note deleted: %s", note_id)


note_service = NoteService()
