"""Google Gemini LLM provider."""

import logging

import httpx
from google import genai
from google.genai import errors

from chatrelay.core.config import settings
from chatrelay.core.errors import InferenceError
from chatrelay.services.llm.base import BaseLLMProvider, LLMResponse

logger = logging.getLogger(__name__)


class GeminiProvider(BaseLLMProvider):
    def __init__(self, api_key: str | None = None, model: str | None = None):
        api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.default_model
        # Startup must not fail on a missing key; the first call reports it instead.
        self.client = genai.Client(api_key=api_key) if api_key else None
        if self.client is None:
            logger.warning("GEMINI_API_KEY not configured")

    async def generate(self, prompt: str) -> LLMResponse:
        if self.client is None:
            raise InferenceError("GEMINI_API_KEY is not configured")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
            )
        except (errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Gemini request failed: {e}")
            raise InferenceError(str(e)) from e

        if response.text is None:
            raise InferenceError("Gemini returned an empty response")
        return LLMResponse(content=response.text, model=self.model)
