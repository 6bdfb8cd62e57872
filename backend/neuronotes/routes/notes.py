"""
NeuroNotes Backend: Notes Route Handlers
========================================

What:  REST endpoints for the signed-in user's notes.
How:   Router-level session guard; each handler delegates to NoteService
       with the session's user id, so ownership is enforced on every call.
Who:   API clients holding a bearer token, and the browser via the session cookie.

Endpoints:
    GET    /api/notes          list, newest first (X-Total-Count header)
    POST   /api/notes          create → 201
    GET    /api/notes/{id}     read one
    PUT    /api/notes/{id}     replace title, and content when sent
    DELETE /api/notes/{id}     delete → {"success": true}
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from neuronotes.database import get_db_session
from neuronotes.dependencies import require_session
from neuronotes.schemas.auth import SessionUser
from neuronotes.schemas.note import (
    DeleteResponse,
    ErrorResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from neuronotes.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notes",
    tags=["Notes"],
    dependencies=[Depends(require_session)],
    responses={
        401: {"description": "No valid session", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=List[NoteResponse],
    summary="List the user's notes",
)
async def list_notes(
    response: Response,
    user: SessionUser = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    """
    All notes owned by the session user, ordered by created_at descending.
    No pagination.
    """
    notes = await note_service.list_notes(db, user.id)
    response.headers["X-Total-Count"] = str(len(notes))
    response.headers["Cache-Control"] = "private, no-cache"
    return notes


@router.post(
    "",
    response_model=NoteResponse,
    status_code=201,
    responses={400: {"description": "Missing or invalid title", "model": ErrorResponse}},
    summary="Create a note",
)
async def create_note(
    body: NoteCreate,
    user: SessionUser = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.create_note(db, user.id, body)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Get a single note",
)
async def get_note(
    note_id: str,
    user: SessionUser = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    """A note owned by someone else is reported as not found."""
    return await note_service.get_note(db, user.id, note_id)


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Missing or invalid title", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Update a note; omitted content is kept",
)
async def update_note(
    note_id: str,
    body: NoteUpdate,
    user: SessionUser = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.update_note(db, user.id, note_id, body)


@router.delete(
    "/{note_id}",
    response_model=DeleteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    user: SessionUser = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    await note_service.delete_note(db, user.id, note_id)
    return DeleteResponse(success=True)
