"""
Generation pipeline: context analysis, staged generation and result parsing.
"""

from narrative_engine.generation.context_analyzer import ContextAnalyzer
from narrative_engine.generation.generator import StagedGenerator
from narrative_engine.generation.models import (
    BeatSheet,
    CastingSheet,
    Character,
    CharacterBreakdown,
    EpisodeScript,
    GenerationContext,
    GenerationParameters,
    GenerationResult,
    SceneBreakdown,
    StoryDocument,
    Storyboard,
    VibeSettings,
)
from narrative_engine.generation.parser import ParseOutcome, StructuredResultParser
from narrative_engine.generation.registry import (
    CONTENT_REGISTRY,
    ContentDefinition,
    GenerationStage,
    get_content_definition,
)

__all__ = [
    "ContextAnalyzer",
    "StagedGenerator",
    "StructuredResultParser",
    "ParseOutcome",
    "GenerationStage",
    "ContentDefinition",
    "CONTENT_REGISTRY",
    "get_content_definition",
    "StoryDocument",
    "Character",
    "VibeSettings",
    "GenerationParameters",
    "GenerationContext",
    "GenerationResult",
    "BeatSheet",
    "EpisodeScript",
    "SceneBreakdown",
    "Storyboard",
    "CharacterBreakdown",
    "CastingSheet",
]
