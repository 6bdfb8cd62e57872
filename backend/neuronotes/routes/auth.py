"""
NeuroNotes Backend: Authentication Route Handlers
=================================================

What:  Account creation, token login and session lookup over JSON.

Endpoints:
    POST /api/signup         → 201 {"success": true, "user": {...}} (no hash)
    POST /api/auth/login     → {"access_token", "token_type", "expires_in", "user"}
    GET  /api/auth/session   → {"user": {id, email, name}} or null
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from neuronotes.database import get_db_session
from neuronotes.dependencies import get_optional_session
from neuronotes.schemas.auth import (
    LoginRequest,
    SessionResponse,
    SessionUser,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from neuronotes.schemas.note import ErrorResponse
from neuronotes.services.auth_service import auth_service

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=201,
    responses={
        400: {"description": "Missing fields or email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SignupResponse:
    return await auth_service.signup(db, body)


@router.post(
    "/auth/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Exchange credentials for an access token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.login(db, body.email, body.password)


@router.get(
    "/auth/session",
    response_model=Optional[SessionResponse],
    summary="Current session",
)
async def get_session(
    user: Optional[SessionUser] = Depends(get_optional_session),
) -> Optional[SessionResponse]:
    """Returns null rather than 401 when nobody is signed in."""
    if user is None:
        return None
    return SessionResponse(user=user)
