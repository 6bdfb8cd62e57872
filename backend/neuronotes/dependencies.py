"""
NeuroNotes Backend: Request Dependencies
========================================

What:  FastAPI dependencies shared by the API routes and the pages.

Session resolution:
    1. `Authorization: Bearer <token>` header, if present
    2. Otherwise the access token stored in the signed session cookie
       (set by the login page)
    An invalid or expired token resolves to no session.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from neuronotes.exceptions import AuthenticationError
from neuronotes.schemas.auth import SessionUser
from neuronotes.security import decode_access_token
from neuronotes.services.ai_service import AIService
from neuronotes.services.gemini_service import gemini_service
from neuronotes.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# Key under which the page login stores the access token
SESSION_TOKEN_KEY = "access_token"

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[SessionUser]:
    if credentials is not None:
        return decode_access_token(credentials.credentials)

    token = request.session.get(SESSION_TOKEN_KEY)
    if not token:
        return None

    user = decode_access_token(token)
    if user is None:
        logger.debug("Dropping expired session token")
        request.session.pop(SESSION_TOKEN_KEY, None)
    return user


async def require_session(
    user: Optional[SessionUser] = Depends(get_optional_session),
) -> SessionUser:
    """
    Session guard for protected routes.

    Raises:
        AuthenticationError: No valid session (→ 401 "Unauthorized")
    """
    if user is None:
        raise AuthenticationError()
    return user


def get_llm_service() -> LLMService:
    """The text-generation provider. Overridden in tests."""
    return gemini_service


def get_ai_service(llm: LLMService = Depends(get_llm_service)) -> AIService:
    return AIService(llm)
