"""
NeuroNotes Backend: AI Proxy Route Handlers
===========================================

What:  Pass-through text generation for the chat panel and the note generator.
How:   Validate the body, delegate to AIService, wrap the text as {"result"}.
Who:   The home page's scripts and any API client.

Endpoints:
    POST /api/ai/chat       {messages: [{role, content}], context?} → {result}
    POST /api/ai/generate   {prompt, context, max_tokens?}          → {result}

Both endpoints are rate-limited per client IP by RateLimitMiddleware.
Upstream failures surface as 500 with a generic message.
"""

import logging

from fastapi import APIRouter, Depends

from neuronotes.dependencies import get_ai_service
from neuronotes.schemas.ai import AIResult, ChatRequest, GenerateRequest
from neuronotes.schemas.note import ErrorResponse
from neuronotes.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai",
    tags=["AI"],
    responses={
        400: {"description": "Invalid request body", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Upstream generation failed", "model": ErrorResponse},
    },
)


@router.post("/chat", response_model=AIResult, summary="Continue a chat transcript")
async def chat(
    body: ChatRequest,
    ai: AIService = Depends(get_ai_service),
) -> AIResult:
    logger.info("Chat request: %d messages", len(body.messages))
    reply = await ai.chat(body.messages)
    return AIResult(result=reply)


@router.post("/generate", response_model=AIResult, summary="Generate text from context")
async def generate(
    body: GenerateRequest,
    ai: AIService = Depends(get_ai_service),
) -> AIResult:
    """
    Runs `prompt` over `context`. The reply carries a truncation disclaimer
    when the output hit the token ceiling.
    """
    logger.info(
        "Generate request: prompt=%d chars, context=%d chars, max_tokens=%s",
        len(body.prompt), len(body.context), body.max_tokens,
    )
    text = await ai.generate(body.prompt, body.context, body.max_tokens)
    return AIResult(result=text)
