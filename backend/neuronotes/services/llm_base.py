"""
NeuroNotes Backend: Abstract Text-Generation Interface
======================================================

What:  The contract every hosted text-generation provider implements.
How:   Concrete providers inherit from LLMService and implement generate()
       and health_check(). AIService only talks to this interface.
Who:   GeminiService implements it; the test suite provides a fake.

Contract:
    generate(prompt, max_tokens, temperature) → Generation(text, finish_reason)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

# Normalized finish reason meaning "stopped at the token ceiling"
FINISH_REASON_MAX_TOKENS = "MAX_TOKENS"


@dataclass(frozen=True)
class Generation:
    """
    First completion returned by a provider.

    Attributes:
        text:          Generated text, untrimmed.
        finish_reason: Provider stop signal upper-cased (e.g. "STOP",
                       "MAX_TOKENS"), or None when the provider gives none.
    """
    text: str
    finish_reason: Optional[str] = None

    @property
    def hit_token_limit(self) -> bool:
        return self.finish_reason == FINISH_REASON_MAX_TOKENS


class LLMService(ABC):
    """
    Abstract interface for hosted text generation.

    Implementations:
        - Wrap every provider error in LLMServiceError
        - Make exactly one upstream call per generate() (no retry)
    """

    @abstractmethod
    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> Generation:
        """
        Generate a single completion for a flattened prompt.

        Args:
            prompt:       Complete prompt text.
            max_tokens:   Output token ceiling.
            temperature:  Sampling temperature.

        Returns:
            Generation for the first candidate.

        Raises:
            LLMServiceError: Provider error, timeout, or no candidate returned.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Lightweight reachability test (no generation quota consumed).

        Returns: True if the provider is reachable, False otherwise.
        """
        ...
