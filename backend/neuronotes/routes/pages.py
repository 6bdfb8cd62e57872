"""
NeuroNotes Backend: Page Handlers
=================================

What:  Server-rendered HTML pages (Jinja2) for the browser.
How:   Each handler builds its per-view state (views/state.py), calls the
       same services as the JSON API, and renders a template. Form posts
       answer with a 303 redirect on success and re-render the form with a
       message on failure.
Who:   Browsers. Authentication is the access token kept in the signed
       session cookie after logging in on /login.

Pages:
    /                     home: notes, AI generator, chat
    /login, /signup       account forms
    /logout               clear the session
    /note/new             create form
    /note/{id}            detail
    /note/{id}/edit       edit form
    /note/{id}/delete     delete confirmation
    /ai/generate          run the generator over the user's notes
    /ai/chat              send a chat message
    /ai/chat/clear        forget the chat transcript
"""

import logging
import re
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from neuronotes.database import get_db_session
from neuronotes.dependencies import SESSION_TOKEN_KEY, get_ai_service, get_optional_session
from neuronotes.exceptions import (
    AuthenticationError,
    DuplicateUserError,
    LLMServiceError,
    NeuroNotesError,
    NotFoundError,
)
from neuronotes.schemas.ai import GenerateRequest
from neuronotes.schemas.auth import SessionUser, SignupRequest
from neuronotes.schemas.note import NoteCreate, NoteUpdate
from neuronotes.services.ai_service import AIService
from neuronotes.services.auth_service import auth_service
from neuronotes.services.note_service import note_service
from neuronotes.views.state import (
    GENERATE_FAILURE_RESULT,
    GENERIC_ERROR,
    AuthFormState,
    ChatTranscript,
    DeleteConfirmState,
    GeneratorState,
    NoteFormState,
    NoteListState,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

LOGIN_FAILED = "Invalid credentials. Please try again."
EMAIL_TAKEN = "This email is already registered."
INVALID_EMAIL = "Please enter a valid email address."
WEAK_PASSWORD = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
SIGNUP_FAILED = "An error occurred during registration. Please try again."


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _to_login() -> RedirectResponse:
    return _redirect("/login")


def _first_error(exc: PydanticValidationError) -> str:
    message = exc.errors()[0].get("msg", GENERIC_ERROR)
    return message.removeprefix("Value error, ")


def _not_found(request: Request, user: SessionUser) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "not_found.html", {"user": user}, status_code=404
    )


async def _render_home(
    request: Request,
    db: AsyncSession,
    user: SessionUser,
    generator: Optional[GeneratorState] = None,
    status_code: int = 200,
) -> HTMLResponse:
    notes = await note_service.list_notes(db, user.id)
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "user": user,
            "note_list": NoteListState(notes=notes),
            "generator": generator or GeneratorState(),
            "chat": ChatTranscript.load(request.session),
        },
        status_code=status_code,
    )


# ── Home ──────────────────────────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()
    return await _render_home(request, db, user)


# ── Accounts ──────────────────────────────────────────────────────────────

@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    user: Optional[SessionUser] = Depends(get_optional_session),
):
    if user is not None:
        return _redirect("/")
    return templates.TemplateResponse(request, "login.html", {"form": AuthFormState()})


@router.post("/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db_session),
):
    form = AuthFormState(email=email, password=password)
    try:
        token = await auth_service.login(db, form.email, form.password)
    except AuthenticationError:
        form.error = LOGIN_FAILED
        return templates.TemplateResponse(
            request, "login.html", {"form": form.for_render()}, status_code=401
        )

    request.session[SESSION_TOKEN_KEY] = token.access_token
    return _redirect("/")


@router.get("/signup", response_class=HTMLResponse)
async def signup_page(request: Request):
    return templates.TemplateResponse(request, "signup.html", {"form": AuthFormState()})


@router.post("/signup", response_class=HTMLResponse)
async def signup_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db_session),
):
    form = AuthFormState(name=name, email=email, password=password)

    if not EMAIL_PATTERN.match(form.email):
        form.error = INVALID_EMAIL
    elif len(form.password) < MIN_PASSWORD_LENGTH:
        form.error = WEAK_PASSWORD
    else:
        try:
            body = SignupRequest(name=form.name, email=form.email, password=form.password)
            await auth_service.signup(db, body)
        except PydanticValidationError as e:
            form.error = _first_error(e)
        except DuplicateUserError:
            form.error = EMAIL_TAKEN
        except NeuroNotesError as e:
            logger.error("Signup page failed: %s", e.message)
            form.error = SIGNUP_FAILED

    if form.error:
        return templates.TemplateResponse(
            request, "signup.html", {"form": form.for_render()}, status_code=400
        )
    return _to_login()


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return _to_login()


# ── Notes ─────────────────────────────────────────────────────────────────

@router.get("/note/new", response_class=HTMLResponse)
async def new_note_page(
    request: Request,
    user: Optional[SessionUser] = Depends(get_optional_session),
):
    if user is None:
        return _to_login()
    return templates.TemplateResponse(
        request, "note_form.html", {"user": user, "form": NoteFormState(), "note_id": None}
    )


@router.post("/note/new", response_class=HTMLResponse)
async def new_note_submit(
    request: Request,
    title: str = Form(""),
    content: str = Form(""),
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()

    form = NoteFormState(title=title, content=content)
    try:
        note = await note_service.create_note(db, user.id, NoteCreate(title=title, content=content))
    except PydanticValidationError as e:
        form.error = _first_error(e)
    except NeuroNotesError as e:
        logger.error("Create note page failed: %s", e.message)
        form.error = GENERIC_ERROR
    else:
        return _redirect(f"/note/{note.id}")

    return templates.TemplateResponse(
        request,
        "note_form.html",
        {"user": user, "form": form, "note_id": None},
        status_code=400,
    )


@router.get("/note/{note_id}", response_class=HTMLResponse)
async def note_detail(
    request: Request,
    note_id: str,
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()
    try:
        note = await note_service.get_note(db, user.id, note_id)
    except NotFoundError:
        return _not_found(request, user)
    return templates.TemplateResponse(request, "note_detail.html", {"user": user, "note": note})


@router.get("/note/{note_id}/edit", response_class=HTMLResponse)
async def edit_note_page(
    request: Request,
    note_id: str,
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()
    try:
        note = await note_service.get_note(db, user.id, note_id)
    except NotFoundError:
        return _not_found(request, user)
    return templates.TemplateResponse(
        request,
        "note_form.html",
        {"user": user, "form": NoteFormState.from_note(note), "note_id": note.id},
    )


@router.post("/note/{note_id}/edit", response_class=HTMLResponse)
async def edit_note_submit(
    request: Request,
    note_id: str,
    title: str = Form(""),
    content: str = Form(""),
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()

    form = NoteFormState(title=title, content=content)
    try:
        await note_service.update_note(db, user.id, note_id, NoteUpdate(title=title, content=content))
    except PydanticValidationError as e:
        form.error = _first_error(e)
    except NotFoundError:
        return _not_found(request, user)
    except NeuroNotesError as e:
        logger.error("Edit note page failed: %s", e.message)
        form.error = GENERIC_ERROR
    else:
        return _redirect(f"/note/{note_id}")

    return templates.TemplateResponse(
        request,
        "note_form.html",
        {"user": user, "form": form, "note_id": note_id},
        status_code=400,
    )


@router.get("/note/{note_id}/delete", response_class=HTMLResponse)
async def delete_note_page(
    request: Request,
    note_id: str,
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()
    try:
        note = await note_service.get_note(db, user.id, note_id)
    except NotFoundError:
        return _not_found(request, user)
    return templates.TemplateResponse(
        request, "note_delete.html", {"user": user, "confirm": DeleteConfirmState(note=note)}
    )


@router.post("/note/{note_id}/delete")
async def delete_note_submit(
    request: Request,
    note_id: str,
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
):
    if user is None:
        return _to_login()
    try:
        await note_service.delete_note(db, user.id, note_id)
    except NotFoundError:
        return _not_found(request, user)
    return _redirect("/")


# ── AI ────────────────────────────────────────────────────────────────────

@router.post("/ai/generate", response_class=HTMLResponse)
async def generate_submit(
    request: Request,
    prompt: str = Form(""),
    user: Optional[SessionUser] = Depends(get_optional_session),
    db: AsyncSession = Depends(get_db_session),
    ai: AIService = Depends(get_ai_service),
):
    if user is None:
        return _to_login()

    generator = GeneratorState(prompt=prompt)
    if generator.ready:
        notes = await note_service.list_notes(db, user.id)
        try:
            body = GenerateRequest(
                prompt=prompt, context=NoteListState(notes=notes).generator_context()
            )
            generator.result = await ai.generate(body.prompt, body.context)
        except (PydanticValidationError, LLMServiceError):
            # PydanticValidationError: no notes, so an empty context
            generator.error = GENERATE_FAILURE_RESULT
    return await _render_home(request, db, user, generator=generator)


@router.post("/ai/chat")
async def chat_submit(
    request: Request,
    message: str = Form(""),
    user: Optional[SessionUser] = Depends(get_optional_session),
    ai: AIService = Depends(get_ai_service),
):
    if user is None:
        return _to_login()

    if message.strip():
        transcript = ChatTranscript.load(request.session)
        try:
            reply = await ai.chat(transcript.with_user_message(message))
        except LLMServiceError:
            transcript.record_failure(message)
        else:
            transcript.record_exchange(message, reply)
        transcript.save(request.session)
    return _redirect("/")


@router.post("/ai/chat/clear")
async def chat_clear(
    request: Request,
    user: Optional[SessionUser] = Depends(get_optional_session),
):
    if user is None:
        return _to_login()
    ChatTranscript.clear(request.session)
    return _redirect("/")
