"""
NeuroNotes Backend: AI Proxy Service Tests
==========================================

What:  Prompt assembly, truncation detection and AIService post-processing,
       with a fake LLMService in place of Gemini.

What we test:
    ✅ Chat and generate prompt shapes
    ✅ Regex heuristic, including complete sentences it misreads as truncated
    ✅ finish_reason mode trusts the provider, falls back when absent
    ✅ Disclaimers, trimming, token ceilings
    ✅ Every upstream failure becomes LLMServiceError with the endpoint message
"""

import pytest

from neuronotes.config import settings
from neuronotes.exceptions import LLMServiceError
from neuronotes.schemas.ai import ChatMessage
from neuronotes.services.ai_service import (
    CHAT_TRUNCATION_NOTICE,
    GENERATE_TRUNCATION_NOTICE,
    AIService,
    build_chat_prompt,
    build_generate_prompt,
    build_notes_context,
    detect_truncation,
    is_truncated,
)
from neuronotes.services.llm_base import Generation


class TestPrompts:

    def test_chat_prompt(self):
        messages = [
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="ai", content="hello"),
            ChatMessage(role="user", content="ideas?"),
        ]
        assert build_chat_prompt(messages) == "User: hi\nAI: hello\nUser: ideas?\nAI:"

    def test_chat_prompt_unknown_role_renders_as_ai(self):
        prompt = build_chat_prompt([ChatMessage(role="assistant", content="ok")])
        assert prompt == "AI: ok\nAI:"

    def test_generate_prompt(self):
        assert (
            build_generate_prompt("List three tags", "Buy milk. Call mom.")
            == "Context: Buy milk. Call mom.\n\nTask: List three tags"
        )

    def test_notes_context_joins_with_blank_lines(self):
        assert build_notes_context(["Buy milk.", "Call mom."]) == "Buy milk.\n\nCall mom."


class TestTruncationHeuristic:

    @pytest.mark.parametrize("text", ["The meeting is at noon.", "and then we", "trailing space "])
    def test_flags(self, text):
        assert detect_truncation(text) is True

    @pytest.mark.parametrize("text", ["Done!", "Is it?", "(see above)", ""])
    def test_does_not_flag(self, text):
        assert detect_truncation(text) is False

    def test_complete_sentence_is_flagged(self):
        # Known false positive of the regex heuristic; kept as-is
        assert is_truncated(Generation("The meeting is at noon."), "The meeting is at noon.", "heuristic")

    def test_finish_reason_mode_trusts_provider(self):
        stopped = Generation("The meeting is at noon.", finish_reason="STOP")
        cut = Generation("The meeting is at", finish_reason="MAX_TOKENS")

        assert is_truncated(stopped, stopped.text, "finish_reason") is False
        assert is_truncated(cut, cut.text, "finish_reason") is True

    def test_finish_reason_mode_falls_back_without_reason(self):
        generation = Generation("cut off mid", finish_reason=None)
        assert is_truncated(generation, generation.text, "finish_reason") is True


class TestAIService:

    @pytest.mark.asyncio
    async def test_generate_returns_trimmed_text(self, fake_llm):
        fake_llm.text = "  groceries, family, errands!  \n"
        fake_llm.finish_reason = "STOP"

        result = await AIService(fake_llm).generate("List three tags", "Buy milk. Call mom.")

        assert result == "groceries, family, errands!"
        call = fake_llm.calls[0]
        assert call["prompt"] == "Context: Buy milk. Call mom.\n\nTask: List three tags"
        assert call["max_tokens"] == settings.ai_max_tokens
        assert call["temperature"] == settings.ai_temperature

    @pytest.mark.asyncio
    async def test_generate_forwards_max_tokens(self, fake_llm):
        await AIService(fake_llm).generate("p", "c", max_tokens=50)
        assert fake_llm.calls[0]["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_generate_appends_notice_at_token_limit(self, fake_llm):
        fake_llm.text = "Tags: groceries, fam"
        fake_llm.finish_reason = "MAX_TOKENS"

        result = await AIService(fake_llm).generate("p", "c")

        assert result == "Tags: groceries, fam" + GENERATE_TRUNCATION_NOTICE

    @pytest.mark.asyncio
    async def test_generate_heuristic_mode(self, fake_llm, monkeypatch):
        monkeypatch.setattr(settings, "ai_truncation_mode", "heuristic")
        fake_llm.text = "The meeting is at noon."
        fake_llm.finish_reason = "STOP"

        result = await AIService(fake_llm).generate("p", "c")

        assert result.endswith(GENERATE_TRUNCATION_NOTICE)

    @pytest.mark.asyncio
    async def test_chat_reply(self, fake_llm):
        fake_llm.text = " Try a daily journal! "
        messages = [ChatMessage(role="user", content="Ideas?")]

        reply = await AIService(fake_llm).chat(messages)

        assert reply == "Try a daily journal!"
        assert fake_llm.calls[0]["prompt"] == "User: Ideas?\nAI:"

    @pytest.mark.asyncio
    async def test_chat_appends_notice_at_token_limit(self, fake_llm):
        fake_llm.text = "Here is a long answer that"
        fake_llm.finish_reason = "MAX_TOKENS"

        reply = await AIService(fake_llm).chat([ChatMessage(role="user", content="Go")])

        assert reply == "Here is a long answer that" + CHAT_TRUNCATION_NOTICE

    @pytest.mark.asyncio
    async def test_chat_upstream_error(self, fake_llm):
        fake_llm.error = LLMServiceError(message="Text generation request failed")

        with pytest.raises(LLMServiceError) as exc_info:
            await AIService(fake_llm).chat([ChatMessage(role="user", content="hi")])

        assert exc_info.value.message == "Failed to generate chat response"

    @pytest.mark.asyncio
    async def test_generate_unexpected_error_is_wrapped(self, fake_llm):
        fake_llm.error = RuntimeError("socket closed")

        with pytest.raises(LLMServiceError) as exc_info:
            await AIService(fake_llm).generate("p", "c")

        assert exc_info.value.message == "Failed to generate text"
        assert exc_info.value.context["error_type"] == "RuntimeError"
        assert len(fake_llm.calls) == 1
