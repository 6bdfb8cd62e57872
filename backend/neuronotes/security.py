"""
NeuroNotes Backend: Password Hashing & Access Tokens
====================================================

What:  bcrypt password hashing (passlib) and signed JWT access tokens (python-jose).
Who:   AuthService (signup, login) and the session guard in dependencies.py.

Token format:
    HS256 JWT signed with settings.secret_key
    Claims: sub (user id), email, name, exp

bcrypt hashing is CPU-bound; async callers run it through
starlette.concurrency.run_in_threadpool.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from neuronotes.config import settings
from neuronotes.schemas.auth import SessionUser, TokenPayload

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Hash a plain password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plain password against a stored hash.

    Returns False (never raises) for malformed or foreign hash strings.
    """
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(
    user_id: str,
    email: str,
    name: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed access token for a user.

    Args:
        user_id: Becomes the `sub` claim.
        email, name: Copied into the token so session lookup needs no query.
        expires_delta: Lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": user_id, "email": email, "name": name, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[SessionUser]:
    """
    Verify a token and rebuild the session identity from its claims.

    Returns None for expired, tampered, or malformed tokens.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        claims = TokenPayload(**payload)
    except (JWTError, PydanticValidationError) as e:
        logger.debug("Rejected access token: %s", type(e).__name__)
        return None
    return SessionUser(id=claims.sub, email=claims.email, name=claims.name)
