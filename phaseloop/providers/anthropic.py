"""
Anthropic Claude provider implementation.

Claude has no native JSON mode; the curator's prompt asks for JSON instead.
"""

import anthropic

from .base import LLMProvider, LLMResponse


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider."""

    MODEL_ALIASES = {
        "haiku": "claude-haiku-4-5",
        "sonnet": "claude-sonnet-4-5",
    }

    def __init__(self, api_key: str, default_model: str = "claude-haiku-4-5"):
        super().__init__(default_model)
        self.client = anthropic.AsyncAnthropic(api_key=api_key)

    @property
    def name(self) -> str:
        return "anthropic"

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

        kwargs = {
            "model": resolved_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        response = await self.client.messages.create(**kwargs)

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        return LLMResponse(
            text=text,
            model=resolved_model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
