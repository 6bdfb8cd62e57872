"""
NeuroNotes Backend: Note Request/Response Schemas
=================================================

What:  Pydantic models defining the note API contract.
How:   FastAPI validates request bodies against these models and serializes
       responses through them. Validation failures become 400 responses.
Who:   Note routes, page handlers and NoteService.

Schemas are kept separate from the SQLAlchemy models so the API controls
exactly which fields are exposed (e.g. never a user's password hash).
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TITLE_MAX_LENGTH = 255


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    What:  Body of POST /api/notes and of the new-note form.

    Rules:
        title:   required; must contain a non-whitespace character; stored as sent
        content: optional; missing or null becomes an empty string
    """
    title: Optional[str] = Field(
        default=None, validate_default=True, description="Note title (non-empty)"
    )
    content: Optional[str] = Field(default="", description="Note body, may be empty")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
        return v

    @field_validator("content")
    @classmethod
    def default_content(cls, v: Optional[str]) -> str:
        return v or ""


class NoteUpdate(NoteCreate):
    """
    Body of PUT /api/notes/{id} and of the edit form.

    title is required as on create. content is replaced when sent; omitted
    or null keeps the stored body.
    """
    content: Optional[str] = Field(default=None, description="New body; omit to keep the current one")

    @field_validator("content")
    @classmethod
    def default_content(cls, v: Optional[str]) -> Optional[str]:
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note.
    Who:   Returned by create, read-one, update and (as items) list.
    """
    id: str = Field(description="Opaque note identifier")
    title: str
    content: str
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last update time (UTC ISO 8601)")
    user_id: str = Field(description="Owning user identifier")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive datetimes; every stored timestamp is UTC
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class DeleteResponse(BaseModel):
    """Acknowledgement returned by DELETE /api/notes/{id}."""
    success: bool = True


# ══════════════════════════════════════════════════════════════════════════
# Shared Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for every API error.

    Example:
        {
            "error": "not_found",
            "message": "Note with ID '...' was not found",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    llm: str = Field(description="Text-generation API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
