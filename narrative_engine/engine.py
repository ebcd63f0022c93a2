"""
Narrative Engine - Main orchestrator.

Orchestrates the complete pipeline:
- Context analysis (via ContextAnalyzer)
- Staged generation (via StagedGenerator)
- Quality validation (via QualityValidator)
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from narrative_engine.core.config import AnalyzerSettings, GeneratorSettings, ValidatorSettings
from narrative_engine.core.enums import ContentType
from narrative_engine.core.llm import LLMProvider, create_provider_from_model
from narrative_engine.evaluation.ab_testing import ABComparator
from narrative_engine.evaluation.assessors import AssessorRegistry
from narrative_engine.evaluation.benchmarks import BenchmarkRegistry
from narrative_engine.evaluation.history import ValidationHistory
from narrative_engine.evaluation.models import ABTestResult, ValidationResult
from narrative_engine.evaluation.professional import ProfessionalStandardsRegistry
from narrative_engine.evaluation.validator import Artifact, QualityValidator
from narrative_engine.generation.context_analyzer import ContextAnalyzer
from narrative_engine.generation.generator import StagedGenerator
from narrative_engine.generation.models import (
    GenerationContext,
    GenerationResult,
    StoryDocument,
    VibeSettings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Explicitly constructed configuration passed into every pipeline component."""

    benchmarks: BenchmarkRegistry
    standards: ProfessionalStandardsRegistry
    assessors: AssessorRegistry
    generator: GeneratorSettings = field(default_factory=GeneratorSettings)
    analyzer: AnalyzerSettings = field(default_factory=AnalyzerSettings)
    validator: ValidatorSettings = field(default_factory=ValidatorSettings)

    @classmethod
    def default(
        cls,
        generator: Optional[GeneratorSettings] = None,
        analyzer: Optional[AnalyzerSettings] = None,
        validator: Optional[ValidatorSettings] = None,
    ) -> "EngineConfig":
        """Stock registries plus the given (or default) settings."""
        validator = validator or ValidatorSettings()
        return cls(
            benchmarks=BenchmarkRegistry.default(),
            standards=ProfessionalStandardsRegistry.default(),
            assessors=AssessorRegistry.default(validator.improvement_threshold),
            generator=generator or GeneratorSettings(),
            analyzer=analyzer or AnalyzerSettings(),
            validator=validator,
        )


@dataclass
class EngineResult:
    """Result of a complete engine run (Generation + optional Validation)."""

    generation: GenerationResult
    validation: Optional[ValidationResult] = None

    @property
    def payload(self) -> Any:
        """Convenience property to access the final stage payload."""
        return self.generation.payload

    @property
    def context(self) -> GenerationContext:
        return self.generation.context

    @property
    def overall_score(self) -> Optional[float]:
        """Overall validation score, None when validation was not run."""
        return self.validation.overall_score if self.validation else None

    @property
    def fallback_stages(self) -> Tuple[str, ...]:
        return self.generation.metadata.fallback_stages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation.to_dict(),
            "validation": self.validation.to_dict() if self.validation else None,
        }


class NarrativeEngine:
    """
    Narrative Engine orchestrating analysis, generation and validation.

    Pipeline:
    1. Analyze: derive tone, pacing, dialogue style and the stage goal
    2. Generate: run the content type's stages in order, with per-stage fallback
    3. Validate: (Optional) score dimensions, compare benchmarks, suggest improvements
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        model: Optional[str] = None,
        provider: Optional[LLMProvider] = None,
        api_key: Optional[str] = None,
        history: Optional[ValidationHistory] = None,
    ):
        """
        Initialize the Narrative Engine.

        Args:
            config: Engine configuration (defaults to EngineConfig.default())
            model: Model name string (e.g., "gpt-4.1", "gemini-2.5-pro").
                   Provider will be auto-detected. Mutually exclusive with provider.
            provider: LLM provider implementation. Mutually exclusive with model.
            api_key: Optional API key (used if model is provided)
            history: Validation history shared with other engines (a new one by default)

        Raises:
            ValueError: If both model and provider are provided, or neither is provided
        """
        if model and provider:
            raise ValueError("Cannot specify both 'model' and 'provider'. Use one or the other.")

        if not model and not provider:
            raise ValueError("Must specify either 'model' or 'provider'.")

        config = config or EngineConfig.default()
        if model:
            self.provider = create_provider_from_model(model, api_key)
            if model != config.generator.model:
                config = replace(config, generator=replace(config.generator, model=model))
        else:
            self.provider = provider

        self.config = config

        # Initialize pipeline components
        self.analyzer = ContextAnalyzer(self.provider, config.generator.model, config.analyzer)
        self.generator = StagedGenerator(self.provider, config.generator)
        self.validator = QualityValidator(
            assessors=config.assessors,
            benchmarks=config.benchmarks,
            standards=config.standards,
            settings=config.validator,
            history=history,
        )
        self.ab_comparator = ABComparator(self.validator)

    @property
    def history(self) -> ValidationHistory:
        return self.validator.history

    async def create(
        self,
        story: Union[StoryDocument, Dict[str, Any]],
        content_type: ContentType,
        episode_number: int = 1,
        previous_choice: Optional[str] = None,
        vibe: Optional[VibeSettings] = None,
        director_notes: str = "",
        validate: bool = True,
        benchmark_ids: Optional[Sequence[str]] = None,
    ) -> EngineResult:
        """
        Generate an artifact and optionally validate it.

        Args:
            story: StoryDocument or raw story bible dict
            content_type: Type of artifact to generate
            episode_number: 1-based episode index
            previous_choice: Branching option chosen in the previous episode
            vibe: Optional tone/pacing/dialogue sliders (0-100)
            director_notes: Free-text notes passed to every stage
            validate: If True, run the validation pipeline on the result
            benchmark_ids: Benchmarks for validation (default: all for content_type)

        Returns:
            EngineResult with generation and optional validation results

        Raises:
            ValueError: If content_type has no generation pipeline
        """
        if not isinstance(story, StoryDocument):
            story = StoryDocument.from_raw(story)

        context = await self.analyzer.analyze(
            story,
            content_type,
            episode_number=episode_number,
            previous_choice=previous_choice,
            vibe=vibe,
            director_notes=director_notes,
        )
        generation = await self.generator.generate(context)

        validation = None
        if validate:
            # validate() never raises, a degraded result still keeps the generation
            validation = await self.validator.validate(generation, benchmark_ids=benchmark_ids)
            if validation.metadata.fallback:
                logger.error("Validation fell back to a placeholder result for %s", content_type.value)

        return EngineResult(generation=generation, validation=validation)

    async def validate(
        self,
        artifact: Artifact,
        content_type: Optional[ContentType] = None,
        context: Optional[GenerationContext] = None,
        benchmark_ids: Optional[Sequence[str]] = None,
    ) -> ValidationResult:
        """Validate an existing artifact or GenerationResult."""
        return await self.validator.validate(artifact, content_type, context, benchmark_ids)

    async def compare_variants(
        self,
        original: Artifact,
        enhanced: Artifact,
        content_type: ContentType,
        context: Optional[GenerationContext] = None,
        benchmark_ids: Optional[Sequence[str]] = None,
    ) -> ABTestResult:
        """A/B compare an original and an enhanced artifact."""
        return await self.ab_comparator.compare(original, enhanced, content_type, context, benchmark_ids)
