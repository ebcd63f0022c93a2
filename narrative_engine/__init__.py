"""
Narrative Engine - staged generation and quality validation for interactive
episodic drama: beat sheets, episode scripts, storyboards and casting sheets.
"""

from narrative_engine.engine import EngineConfig, EngineResult, NarrativeEngine
from narrative_engine.core import (
    AcceptanceLevel,
    AnalyzerSettings,
    AnthropicProvider,
    ContentType,
    GeminiProvider,
    GenerationError,
    GenerationOptions,
    GeneratorSettings,
    LLMProvider,
    OpenAIProvider,
    QualityLevel,
    StandardTier,
    ValidatorSettings,
    create_provider_from_model,
)
from narrative_engine.generation import (
    BeatSheet,
    CastingSheet,
    CharacterBreakdown,
    ContextAnalyzer,
    EpisodeScript,
    GenerationContext,
    GenerationResult,
    SceneBreakdown,
    StagedGenerator,
    StoryDocument,
    Storyboard,
    StructuredResultParser,
    VibeSettings,
)
from narrative_engine.evaluation import (
    ABComparator,
    ABTestResult,
    AssessorRegistry,
    BenchmarkRegistry,
    ProfessionalStandardsRegistry,
    QualityValidator,
    ValidationHistory,
    ValidationResult,
)

__all__ = [
    # Main classes
    "NarrativeEngine",
    "EngineConfig",
    "EngineResult",
    # Core
    "ContentType",
    "StandardTier",
    "QualityLevel",
    "AcceptanceLevel",
    "GeneratorSettings",
    "AnalyzerSettings",
    "ValidatorSettings",
    "GenerationError",
    "GenerationOptions",
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "create_provider_from_model",
    # Generation
    "ContextAnalyzer",
    "StagedGenerator",
    "StructuredResultParser",
    "StoryDocument",
    "VibeSettings",
    "GenerationContext",
    "GenerationResult",
    "BeatSheet",
    "EpisodeScript",
    "SceneBreakdown",
    "Storyboard",
    "CharacterBreakdown",
    "CastingSheet",
    # Evaluation
    "QualityValidator",
    "ABComparator",
    "AssessorRegistry",
    "BenchmarkRegistry",
    "ProfessionalStandardsRegistry",
    "ValidationHistory",
    "ValidationResult",
    "ABTestResult",
]
