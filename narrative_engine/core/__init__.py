"""
Core infrastructure for the Narrative Engine.

Shared enums, settings, errors and generative collaborator providers.
"""

from narrative_engine.core.config import (
    AnalyzerSettings,
    GeneratorSettings,
    ValidatorSettings,
)
from narrative_engine.core.enums import (
    AcceptanceLevel,
    ContentType,
    DifficultyTier,
    QualityLevel,
    StandardTier,
    SuggestionKind,
)
from narrative_engine.core.errors import GenerationError, ParseFailure, ValidationFailure
from narrative_engine.core.llm import (
    AnthropicProvider,
    BaseLLMProvider,
    GeminiProvider,
    GenerationOptions,
    LLMProvider,
    OpenAIProvider,
    create_provider_from_model,
)

__all__ = [
    "AnalyzerSettings",
    "GeneratorSettings",
    "ValidatorSettings",
    "AcceptanceLevel",
    "ContentType",
    "DifficultyTier",
    "QualityLevel",
    "StandardTier",
    "SuggestionKind",
    "GenerationError",
    "ParseFailure",
    "ValidationFailure",
    "LLMProvider",
    "BaseLLMProvider",
    "GenerationOptions",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "create_provider_from_model",
]
