"""
OpenAI provider implementation.

Supports GPT models with JSON mode for structured outputs.
"""

from openai import AsyncOpenAI

from .base import LLMProvider, LLMResponse


class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider."""

    MODEL_ALIASES = {
        "mini": "gpt-4o-mini",
        "gpt4": "gpt-4o",
        "gpt4-mini": "gpt-4o-mini",
    }

    def __init__(
        self,
        api_key: str,
        default_model: str = "gpt-4o-mini",
        organization: str | None = None,
    ):
        super().__init__(default_model)
        self.client = AsyncOpenAI(api_key=api_key, organization=organization)

    @property
    def name(self) -> str:
        return "openai"

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

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": resolved_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(**kwargs)

        usage = response.usage
        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=resolved_model,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
