"""Abstract LLM provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LLMResponse:
    content: str
    model: str


class BaseLLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str) -> LLMResponse:
        """Send a single text prompt and wait for the complete response.

        Implementations raise InferenceError on any upstream failure.
        """
        ...
