"""
NeuroNotes Backend: AI Proxy Schemas
====================================

What:  Request/response models for POST /api/ai/chat and POST /api/ai/generate.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ChatMessage(BaseModel):
    """
    One turn of a chat transcript.

    role: "user" for the person typing; anything else is rendered as the AI.
    """
    role: str = Field(description="'user' or 'ai'")
    content: str


class ChatRequest(BaseModel):
    """
    Body of POST /api/ai/chat.

    `context` is accepted for compatibility with existing clients; it is not
    part of the prompt.
    """
    messages: Optional[List[ChatMessage]] = Field(
        default=None, validate_default=True, description="Ordered chat transcript"
    )
    context: Optional[str] = None

    @field_validator("messages")
    @classmethod
    def validate_messages(cls, v: Optional[List[ChatMessage]]) -> List[ChatMessage]:
        if not v:
            raise ValueError("Invalid request: messages array is required")
        return v


class GenerateRequest(BaseModel):
    """Body of POST /api/ai/generate."""
    prompt: Optional[str] = Field(
        default=None, validate_default=True,
        description="Instruction, e.g. 'Summarize these notes'",
    )
    context: Optional[str] = Field(
        default=None, validate_default=True,
        description="Caller-assembled text, usually the user's notes",
    )
    max_tokens: Optional[int] = Field(
        default=None, ge=1, le=4096,
        description="Token ceiling; server default when omitted",
    )

    @field_validator("prompt", "context")
    @classmethod
    def validate_non_empty(cls, v: Optional[str]) -> str:
        if not v or not v.strip():
            raise ValueError("Invalid request: prompt and context must be non-empty strings")
        return v


class AIResult(BaseModel):
    """Successful AI proxy response."""
    result: str
