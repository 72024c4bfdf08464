"""LLM provider factory."""

from chatrelay.core.config import settings
from chatrelay.services.llm.base import BaseLLMProvider


def get_llm_provider() -> BaseLLMProvider:
    """Factory function that returns the configured LLM provider."""
    if settings.llm_provider == "gemini":
        from chatrelay.services.llm.gemini import GeminiProvider
        return GeminiProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
