"""
NeuroNotes Backend: Google Gemini Text Generation
=================================================

What:  LLMService implementation backed by the Gemini API (google-generativeai).
How:   One generate_content_async call per request with a GenerationConfig
       carrying the token ceiling and temperature. The first candidate's text
       and finish reason are returned as a Generation.
Who:   Instantiated once at import; used by AIService via get_llm_service().

Failure policy:
    No retry. Any SDK exception, a blocked prompt, or an empty candidate list
    is logged and raised as LLMServiceError.
"""

import logging
import time
import uuid
from typing import Any, List, Optional

import google.generativeai as genai
from starlette.concurrency import run_in_threadpool

from neuronotes.config import settings
from neuronotes.exceptions import LLMServiceError
from neuronotes.services.llm_base import Generation, LLMService

logger = logging.getLogger(__name__)


def _finish_reason_name(candidate: Any) -> Optional[str]:
    """Normalizes the SDK's finish_reason enum/int/str to an upper-case name."""
    reason = getattr(candidate, "finish_reason", None)
    if reason is None:
        return None
    name = getattr(reason, "name", None)
    if isinstance(name, str):
        return name.upper()
    if isinstance(reason, str):
        return reason.upper()
    return str(reason)


def _list_model_names() -> List[str]:
    # Blocking SDK call; the returned iterator pages over the network too
    return [m.name for m in genai.list_models()]


def _candidate_text(candidate: Any) -> str:
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(getattr(part, "text", "") or "" for part in parts)


class GeminiService(LLMService):
    """
    Google Gemini implementation of LLMService.

    Architecture:
        - Singleton created at import
        - Configures the SDK with the API key (when one is set)
        - Holds one GenerativeModel reused across requests
    """

    def __init__(self):
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)

        logger.info(
            "GeminiService initialized with model=%s, timeout=%ds",
            settings.gemini_model,
            settings.ai_request_timeout,
        )

    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> Generation:
        """
        Send one prompt to Gemini.

        Flow:
            1. Build GenerationConfig(max_output_tokens, temperature)
            2. Await generate_content_async with the configured timeout
            3. Take the first candidate's text and finish reason

        Raises:
            LLMServiceError: Any SDK error, or a response with no candidates
        """
        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        logger.info(
            "[%s] Gemini generate: prompt=%d chars, max_tokens=%d, temperature=%.2f",
            call_id, len(prompt), max_tokens, temperature,
        )

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                ),
                request_options={"timeout": settings.ai_request_timeout},
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id, duration_ms, str(e),
                exc_info=True,
            )
            raise LLMServiceError(
                message="Text generation request failed",
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        candidates = list(getattr(response, "candidates", None) or [])
        if not candidates:
            feedback = getattr(response, "prompt_feedback", None)
            logger.warning("[%s] Gemini returned no candidates: %s", call_id, feedback)
            raise LLMServiceError(
                message="Text generation returned no result",
                context={"call_id": call_id},
            )

        candidate = candidates[0]
        generation = Generation(
            text=_candidate_text(candidate),
            finish_reason=_finish_reason_name(candidate),
        )

        logger.info(
            "[%s] Gemini completed in %.0fms: %d chars, finish_reason=%s",
            call_id, duration_ms, len(generation.text), generation.finish_reason,
        )
        return generation

    async def health_check(self) -> bool:
        """
        Lists available models to verify the key and connectivity.

        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            model_names = await run_in_threadpool(_list_model_names)
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False

        target = f"models/{settings.gemini_model}"
        if target not in model_names:
            logger.warning("Configured model %s not found in available models", target)
        return True


# Singleton holding the configured model
gemini_service = GeminiService()
