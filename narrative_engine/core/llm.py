"""
Generative collaborator abstraction for multi-LLM support.

The engine only ever sees raw text: structured parsing happens in
narrative_engine.generation.parser so every provider is treated alike.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol

from narrative_engine.core.errors import GenerationError


@dataclass(frozen=True)
class GenerationOptions:
    """Bounded options for a single collaborator call."""

    model: str
    system_prompt: Optional[str] = None
    temperature: float = 0.7
    max_output_tokens: int = 2000

    def __post_init__(self):
        """Validate option values."""
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature should be between 0.0 and 2.0")
        if self.max_output_tokens < 1:
            raise ValueError("max_output_tokens must be at least 1")


class LLMProvider(Protocol):
    """Protocol defining the interface for generative collaborators."""

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """
        Generate raw text for a prompt.

        Args:
            prompt: User prompt
            options: Model, system prompt and sampling bounds

        Returns:
            The generated text

        Raises:
            GenerationError: On timeout, quota exhaustion or transport faults
        """
        ...


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    provider_name = "base"

    def __init__(self, model_name: str, api_key: Optional[str] = None):
        """
        Initialize the LLM provider.

        Args:
            model_name: Default model, used when options.model is empty
            api_key: API key for authentication (if required)
        """
        self.model_name = model_name
        self.api_key = api_key

    @abstractmethod
    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate raw text from the LLM."""
        pass

    def _model_for(self, options: GenerationOptions) -> str:
        return options.model or self.model_name

    def _require_text(self, text: Optional[str]) -> str:
        if not text or not text.strip():
            raise GenerationError(
                f"{self.provider_name} returned an empty response",
                reason=GenerationError.EMPTY_RESPONSE,
                provider=self.provider_name,
            )
        return text


def _resolve_api_key(api_key: Optional[str], env_var: str, provider: str) -> str:
    api_key = api_key or os.getenv(env_var)
    if not api_key:
        raise ValueError(
            f"{provider} API key is required. "
            f"Set {env_var} environment variable or pass api_key parameter."
        )
    return api_key


class OpenAIProvider(BaseLLMProvider):
    """OpenAI API provider implementation."""

    provider_name = "openai"

    def __init__(self, model_name: str = "gpt-4.1", api_key: Optional[str] = None):
        """
        Initialize OpenAI provider.

        Args:
            model_name: OpenAI model name (e.g., "gpt-4.1", "gpt-4o")
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)

        Raises:
            ValueError: If API key is not provided
        """
        super().__init__(model_name, _resolve_api_key(api_key, "OPENAI_API_KEY", "OpenAI"))
        import openai

        self._errors = openai
        self.client = openai.AsyncOpenAI(api_key=self.api_key)

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate text using the chat completions API."""
        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self._model_for(options),
                messages=messages,
                temperature=options.temperature,
                max_tokens=options.max_output_tokens,
            )
        except self._errors.RateLimitError as e:
            raise GenerationError(str(e), GenerationError.RATE_LIMIT, self.provider_name) from e
        except self._errors.APITimeoutError as e:
            raise GenerationError(str(e), GenerationError.TIMEOUT, self.provider_name) from e
        except self._errors.APIError as e:
            raise GenerationError(str(e), GenerationError.TRANSPORT, self.provider_name) from e

        content = response.choices[0].message.content if response.choices else None
        return self._require_text(content)


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude API provider implementation."""

    provider_name = "anthropic"

    def __init__(self, model_name: str = "claude-sonnet-4-5", api_key: Optional[str] = None):
        """
        Initialize Anthropic provider.

        Args:
            model_name: Anthropic model name
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)

        Raises:
            ValueError: If API key is not provided
        """
        super().__init__(model_name, _resolve_api_key(api_key, "ANTHROPIC_API_KEY", "Anthropic"))
        import anthropic

        self._errors = anthropic
        self.client = anthropic.AsyncAnthropic(api_key=self.api_key)

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate text using the messages API."""
        request = {
            "model": self._model_for(options),
            "max_tokens": options.max_output_tokens,
            "temperature": options.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if options.system_prompt:
            request["system"] = options.system_prompt

        try:
            response = await self.client.messages.create(**request)
        except self._errors.RateLimitError as e:
            raise GenerationError(str(e), GenerationError.RATE_LIMIT, self.provider_name) from e
        except self._errors.APITimeoutError as e:
            raise GenerationError(str(e), GenerationError.TIMEOUT, self.provider_name) from e
        except self._errors.APIError as e:
            raise GenerationError(str(e), GenerationError.TRANSPORT, self.provider_name) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return self._require_text(text)


class GeminiProvider(BaseLLMProvider):
    """Google Gemini API provider implementation (google-genai SDK)."""

    provider_name = "gemini"

    def __init__(self, model_name: str = "gemini-2.5-pro", api_key: Optional[str] = None):
        """
        Initialize Gemini provider.

        Args:
            model_name: Gemini model name (e.g., "gemini-2.5-pro", "gemini-2.5-flash")
            api_key: Google API key (defaults to GEMINI_API_KEY env var)

        Raises:
            ValueError: If API key is not provided
        """
        super().__init__(model_name, _resolve_api_key(api_key, "GEMINI_API_KEY", "Google"))
        from google import genai
        from google.genai import errors, types

        self._errors = errors
        self._types = types
        self.client = genai.Client(api_key=self.api_key)

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate text using the async models API."""
        config = self._types.GenerateContentConfig(
            system_instruction=options.system_prompt,
            temperature=options.temperature,
            max_output_tokens=options.max_output_tokens,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self._model_for(options),
                contents=prompt,
                config=config,
            )
        except self._errors.APIError as e:
            reason = GenerationError.RATE_LIMIT if getattr(e, "code", None) == 429 else GenerationError.TRANSPORT
            raise GenerationError(str(e), reason, self.provider_name) from e

        return self._require_text(response.text)


def create_provider_from_model(model: str, api_key: Optional[str] = None) -> BaseLLMProvider:
    """
    Automatically create the appropriate LLM provider based on model name.

    Args:
        model: Model name (e.g., "gpt-4.1", "claude-sonnet-4-5", "gemini-2.5-pro")
        api_key: Optional API key (if not provided, uses environment variables)

    Returns:
        Appropriate provider instance

    Raises:
        ValueError: If model name doesn't match any known provider pattern
    """
    model_lower = model.lower()

    # OpenAI models: gpt-*, o1-*, o3-*
    if model_lower.startswith(("gpt-", "o1-", "o3-")):
        return OpenAIProvider(model_name=model, api_key=api_key)

    # Anthropic models: claude-*
    elif model_lower.startswith("claude-"):
        return AnthropicProvider(model_name=model, api_key=api_key)

    # Gemini models: gemini-*
    elif model_lower.startswith("gemini-"):
        return GeminiProvider(model_name=model, api_key=api_key)

    else:
        raise ValueError(
            f"Unknown model: {model}. "
            "Supported model prefixes: 'gpt-', 'o1-', 'o3-' (OpenAI), 'claude-' (Anthropic), 'gemini-' (Google)"
        )
