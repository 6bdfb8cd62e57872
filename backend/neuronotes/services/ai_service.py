"""
NeuroNotes Backend: AI Proxy Service
====================================

What:  Builds prompts for chat and generation, forwards them to the configured
       LLMService, and post-processes the first completion.
Who:   routes/ai.py and the home page's chat and generator forms.

Prompt shapes:
    chat:      "User: hi\\nAI: hello\\nUser: ideas?\\nAI:"
    generate:  "Context: {context}\\n\\nTask: {prompt}"

Post-processing:
    1. Trim the completion
    2. Decide whether it was cut off (see is_truncated)
    3. If so, append the endpoint's disclaimer

Truncation modes (settings.ai_truncation_mode):
    finish_reason  Use the provider's stop signal; fall back to the regex
                   heuristic when the provider reports none.
    heuristic      Regex heuristic only. It flags text ending in a word, a
                   period, or whitespace, which includes most complete
                   sentences.
"""

import logging
import re
from typing import Iterable, Optional

from neuronotes.config import settings
from neuronotes.exceptions import LLMServiceError
from neuronotes.schemas.ai import ChatMessage
from neuronotes.services.llm_base import Generation, LLMService

logger = logging.getLogger(__name__)

CHAT_TRUNCATION_NOTICE = "... (Response truncated due to token limit)"
GENERATE_TRUNCATION_NOTICE = (
    "... Limit reached. The response has been truncated due to the maximum token limit."
)

CHAT_FAILURE_MESSAGE = "Failed to generate chat response"
GENERATE_FAILURE_MESSAGE = "Failed to generate text"

# Any match flags the text as truncated
TRUNCATION_PATTERNS = (
    re.compile(r"\b\w+$"),   # ends mid-word
    re.compile(r"\.$"),      # ends with a single period
    re.compile(r"\s$"),      # ends with whitespace or newline
)


def detect_truncation(text: str) -> bool:
    """Regex guess at whether `text` was cut off by the token limit."""
    return any(pattern.search(text) for pattern in TRUNCATION_PATTERNS)


def is_truncated(generation: Generation, raw_text: str, mode: Optional[str] = None) -> bool:
    """
    Decide whether a completion hit the token ceiling.

    Args:
        generation: Provider result (finish_reason may be None).
        raw_text:   Text the heuristic inspects.
        mode:       "finish_reason" or "heuristic"; defaults to settings.
    """
    mode = mode or settings.ai_truncation_mode
    if mode == "finish_reason" and generation.finish_reason is not None:
        return generation.hit_token_limit
    return detect_truncation(raw_text)


def build_chat_prompt(messages: Iterable[ChatMessage]) -> str:
    lines = [
        f"{'User' if message.role == 'user' else 'AI'}: {message.content}"
        for message in messages
    ]
    return "\n".join(lines) + "\nAI:"


def build_generate_prompt(prompt: str, context: str) -> str:
    return f"Context: {context}\n\nTask: {prompt}"


def build_notes_context(contents: Iterable[str]) -> str:
    """Joins note bodies with blank lines, the context shape the generator sends."""
    return "\n\n".join(contents)


class AIService:
    """
    Stateless AI proxy operations over an injected LLMService.

    Error Handling Strategy:
        Every upstream failure, whatever its type, is logged and re-raised as
        LLMServiceError with the endpoint's generic message (→ 500).
        No retries.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def _complete(self, prompt: str, max_tokens: int, failure_message: str) -> Generation:
        try:
            return await self.llm.generate(
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=settings.ai_temperature,
            )
        except LLMServiceError as e:
            logger.error("AI upstream error: %s | Context: %s", e.message, e.context)
            raise LLMServiceError(message=failure_message, context=e.context) from e
        except Exception as e:
            logger.error("Unexpected AI upstream error: %s", str(e), exc_info=True)
            raise LLMServiceError(
                message=failure_message,
                context={"error_type": type(e).__name__},
            ) from e

    async def chat(self, messages: Iterable[ChatMessage]) -> str:
        """
        Continue a chat transcript.

        Returns:
            The trimmed reply, with CHAT_TRUNCATION_NOTICE appended when truncated.
        """
        prompt = build_chat_prompt(messages)
        generation = await self._complete(prompt, settings.ai_max_tokens, CHAT_FAILURE_MESSAGE)

        reply = generation.text.strip()
        # The chat heuristic inspects the trimmed reply
        if is_truncated(generation, reply):
            return f"{reply}{CHAT_TRUNCATION_NOTICE}"
        return reply

    async def generate(self, prompt: str, context: str, max_tokens: Optional[int] = None) -> str:
        """
        Run an instruction over caller-supplied context (usually the user's notes).

        Returns:
            The trimmed text, with GENERATE_TRUNCATION_NOTICE appended when truncated.
        """
        full_prompt = build_generate_prompt(prompt, context)
        generation = await self._complete(
            full_prompt,
            max_tokens or settings.ai_max_tokens,
            GENERATE_FAILURE_MESSAGE,
        )

        text = generation.text.strip()
        # The generate heuristic inspects the untrimmed text
        if is_truncated(generation, generation.text):
            return f"{text}{GENERATE_TRUNCATION_NOTICE}"
        return text
