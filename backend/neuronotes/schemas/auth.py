"""
NeuroNotes Backend: Authentication Schemas
==========================================

What:  Request/response models for signup, login and session lookup.
Who:   routes/auth.py, the session guard in dependencies.py, AuthService.

The password hash never appears in any response model here.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

# bcrypt only uses the first 72 bytes of a secret
PASSWORD_MAX_LENGTH = 72


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class SignupRequest(BaseModel):
    """Body of POST /api/signup."""
    name: str = Field(description="Display name")
    email: EmailStr
    password: str = Field(description="Plain-text password (hashed before storage)")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        if len(v) > PASSWORD_MAX_LENGTH:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters")
        return v


class LoginRequest(BaseModel):
    """Body of POST /api/auth/login."""
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class UserPublic(BaseModel):
    """A user record with the password hash redacted."""
    id: str
    name: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SignupResponse(BaseModel):
    success: bool = True
    user: UserPublic


class SessionUser(BaseModel):
    """
    What:  The identity bound to an authenticated request.
    How:   Rebuilt from the claims of a verified access token.
    """
    id: str
    email: str
    name: str


class SessionResponse(BaseModel):
    """Body of GET /api/auth/session when a session exists."""
    user: SessionUser


class TokenResponse(BaseModel):
    """Body of a successful POST /api/auth/login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: SessionUser


class TokenPayload(BaseModel):
    """Claims carried inside an access token."""
    sub: str
    email: str
    name: str
    exp: Optional[int] = None
