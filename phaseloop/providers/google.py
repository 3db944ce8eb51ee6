"""
Google Gemini provider implementation.

Uses the google-genai SDK's async client, with JSON mode for structured copy.
"""

from google import genai
from google.genai import types

from .base import LLMProvider, LLMResponse


class GoogleProvider(LLMProvider):
    """Google Gemini provider."""

    MODEL_ALIASES = {
        "flash": "gemini-2.5-flash",
        "pro": "gemini-2.5-pro",
        "gemini-flash": "gemini-2.5-flash",
        "gemini-pro": "gemini-2.5-pro",
    }

    def __init__(self, api_key: str, default_model: str = "gemini-2.5-flash"):
        super().__init__(default_model)
        self.client = genai.Client(api_key=api_key)

    @property
    def name(self) -> str:
        return "google"

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> LLMResponse:
        resolved_model = self._resolve_model(model) if model else self._default_model

        config_kwargs = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if system_prompt:
            config_kwargs["system_instruction"] = system_prompt
        if json_mode:
            config_kwargs["response_mime_type"] = "application/json"

        response = await self.client.aio.models.generate_content(
            model=resolved_model,
            contents=prompt,
            config=types.GenerateContentConfig(**config_kwargs),
        )

        input_tokens = 0
        output_tokens = 0
        if getattr(response, "usage_metadata", None):
            input_tokens = response.usage_metadata.prompt_token_count or 0
            output_tokens = response.usage_metadata.candidates_token_count or 0

        # response.text is None when the candidate was blocked or empty
        return LLMResponse(
            text=response.text or "",
            model=resolved_model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
