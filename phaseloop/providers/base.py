"""
Base LLM provider interface.

Defines the async interface the curator uses to ask any provider for copy.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Implementations wrap one vendor SDK's async client. They raise whatever
    the SDK raises; callers decide how to degrade.
    """

    # Alias -> full model id
    MODEL_ALIASES: dict[str, str] = {}

    def __init__(self, default_model: str):
        self._default_model = self._resolve_model(default_model)

    def _resolve_model(self, model: str) -> str:
        """Resolve model alias to full model ID."""
        return self.MODEL_ALIASES.get(model, model)

    @property
    def default_model(self) -> str:
        return self._default_model

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'google', 'anthropic', 'openai')."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a completion from the model.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt for context
            model: Specific model to use (defaults to provider's default)
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            json_mode: Request JSON-formatted response where the vendor supports it

        Returns:
            LLMResponse with the generated text and token usage
        """
        pass
