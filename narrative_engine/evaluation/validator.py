"""
Quality Validator - the full validation pipeline.

Pipeline:
1. Resolve dimensions for the content type
2. Run assessors concurrently (scored / skipped / failed)
3. Weighted overall score over scored dimensions
4. Benchmark comparisons
5. Professional evaluation and industrial acceptance
6. Ranked improvement suggestions
7. Quality level classification
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from narrative_engine.core.config import ValidatorSettings
from narrative_engine.core.enums import AcceptanceLevel, ContentType, QualityLevel
from narrative_engine.evaluation.assessors import AssessorRegistry, run_assessment
from narrative_engine.evaluation.benchmarks import BenchmarkComparator, BenchmarkRegistry
from narrative_engine.evaluation.classification import classify_quality_level
from narrative_engine.evaluation.dimensions import CONTENT_DIMENSIONS, DimensionSpec
from narrative_engine.evaluation.history import ValidationHistory
from narrative_engine.evaluation.models import (
    BenchmarkComparison,
    DimensionScore,
    IndustrialAcceptance,
    ProfessionalFeedback,
    ValidationMetadata,
    ValidationResult,
)
from narrative_engine.evaluation.professional import (
    VERDICTS,
    ProfessionalEvaluator,
    ProfessionalStandardsRegistry,
)
from narrative_engine.evaluation.suggestions import ImprovementSuggestionGenerator, system_suggestion
from narrative_engine.generation.models import (
    GenerationContext,
    GenerationResult,
    payload_content_type,
)

logger = logging.getLogger(__name__)

Artifact = Union[BaseModel, GenerationResult]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QualityValidator:
    """
    Validates generated artifacts against dimensions, benchmarks and professional standards.

    validate() never raises: an unexpected failure anywhere in the pipeline
    produces the fatal fallback result instead.
    """

    def __init__(
        self,
        assessors: AssessorRegistry,
        benchmarks: BenchmarkRegistry,
        standards: ProfessionalStandardsRegistry,
        settings: Optional[ValidatorSettings] = None,
        history: Optional[ValidationHistory] = None,
        dimensions: Optional[Mapping[ContentType, Sequence[DimensionSpec]]] = None,
    ):
        """
        Initialize the validator.

        Args:
            assessors: Assessor lookup by assessor type key
            benchmarks: Read-only benchmark registry
            standards: Read-only professional standards registry
            settings: Thresholds (defaults to ValidatorSettings())
            history: Bounded history; created from settings.history_limit if omitted
            dimensions: Dimension table override (defaults to CONTENT_DIMENSIONS)
        """
        self.settings = settings or ValidatorSettings()
        self.assessors = assessors
        self.benchmarks = benchmarks
        self.dimensions = dimensions if dimensions is not None else CONTENT_DIMENSIONS
        self.history = history if history is not None else ValidationHistory(self.settings.history_limit)
        self.comparator = BenchmarkComparator(self.settings.default_benchmark_target)
        self.professional = ProfessionalEvaluator(standards)
        self.suggestion_generator = ImprovementSuggestionGenerator(self.settings)

    async def validate(
        self,
        artifact: Artifact,
        content_type: Optional[ContentType] = None,
        context: Optional[GenerationContext] = None,
        benchmark_ids: Optional[Sequence[str]] = None,
    ) -> ValidationResult:
        """
        Run the full validation pipeline.

        Args:
            artifact: Stage payload or a GenerationResult (its payload and context are used)
            content_type: Defaults to the payload's kind
            context: Generation context for character and genre checks
            benchmark_ids: Benchmarks to compare against (default: all for the content type)

        Returns:
            ValidationResult, or the fatal fallback result if the pipeline fails
        """
        started_at = _utcnow()
        started = time.perf_counter()
        resolved_type = content_type
        try:
            if isinstance(artifact, GenerationResult):
                context = context or artifact.context
                artifact = artifact.payload
            if resolved_type is None:
                resolved_type = payload_content_type(artifact)
            result = await self._run(artifact, resolved_type, context, benchmark_ids, started_at, started)
        except Exception as e:
            logger.error("Validation pipeline failed: %s", e, exc_info=True)
            result = self._fatal_fallback(resolved_type, e, started_at, started)

        if self.settings.record_history and not result.metadata.fallback:
            self.history.append(result)
        return result

    async def _run(
        self,
        artifact: BaseModel,
        content_type: ContentType,
        context: Optional[GenerationContext],
        benchmark_ids: Optional[Sequence[str]],
        started_at: datetime,
        started: float,
    ) -> ValidationResult:
        specs = self.dimensions.get(content_type)
        if not specs:
            raise ValueError(f"No quality dimensions configured for {content_type}")

        logger.info("Validation start: %s, %d dimensions", content_type.value, len(specs))
        outcomes = await asyncio.gather(
            *(run_assessment(self.assessors, artifact, spec, context) for spec in specs)
        )

        dimension_scores: Dict[str, DimensionScore] = {}
        skipped: List[str] = []
        failed: Dict[str, str] = {}
        assessors_used: List[str] = []
        for outcome in outcomes:
            if outcome.scored:
                dimension_scores[outcome.spec.name] = outcome.score
                if outcome.spec.assessor_type not in assessors_used:
                    assessors_used.append(outcome.spec.assessor_type)
            elif outcome.skipped:
                skipped.append(outcome.spec.name)
            else:
                failed[outcome.spec.name] = outcome.error or "unknown error"

        overall = self._overall_score(dimension_scores)

        comparisons, applied_ids, notes = self._compare_benchmarks(dimension_scores, content_type, benchmark_ids)

        feedback, acceptance = self.professional.evaluate(dimension_scores, content_type, overall)

        suggestions = self.suggestion_generator.suggest(dimension_scores, comparisons, context)
        for name in skipped:
            suggestions.append(
                system_suggestion(f"Register an assessor for dimension '{name}' so it can be scored", dimension=name)
            )
        for name, reason in failed.items():
            suggestions.append(system_suggestion(f"Fix the assessor for '{name}': {reason}", dimension=name))
        if not dimension_scores:
            notes.append("No dimension could be scored; overall score is 0.0")

        quality_level = classify_quality_level(overall, acceptance.level)
        finished_at = _utcnow()
        duration_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "Validation complete: %s overall=%.3f level=%s acceptance=%s (%d scored, %d skipped, %d failed) in %.0fms",
            content_type.value,
            overall,
            quality_level.value,
            acceptance.level.value,
            len(dimension_scores),
            len(skipped),
            len(failed),
            duration_ms,
        )

        return ValidationResult(
            content_type=content_type,
            overall_score=overall,
            dimension_scores=dimension_scores,
            benchmark_comparisons=tuple(comparisons),
            professional_feedback=feedback,
            industrial_acceptance=acceptance,
            suggestions=tuple(suggestions),
            quality_level=quality_level,
            metadata=ValidationMetadata(
                started_at=started_at,
                finished_at=finished_at,
                duration_ms=duration_ms,
                assessors_used=tuple(assessors_used),
                skipped_dimensions=tuple(skipped),
                failed_dimensions=failed,
                benchmark_ids=applied_ids,
                notes=tuple(notes),
            ),
        )

    def _overall_score(self, dimension_scores: Mapping[str, DimensionScore]) -> float:
        total_weight = sum(s.weight for s in dimension_scores.values())
        if total_weight <= 0:
            return 0.0
        overall = sum(s.score * s.weight for s in dimension_scores.values()) / total_weight
        return min(max(overall, 0.0), 1.0)

    def _compare_benchmarks(
        self,
        dimension_scores: Mapping[str, DimensionScore],
        content_type: ContentType,
        benchmark_ids: Optional[Sequence[str]],
    ) -> Tuple[List[BenchmarkComparison], Tuple[str, ...], List[str]]:
        notes = []
        if benchmark_ids is None:
            benchmarks = list(self.benchmarks.for_content_type(content_type))
        else:
            benchmarks = []
            for benchmark_id in benchmark_ids:
                benchmark = self.benchmarks.get(benchmark_id)
                if benchmark is None:
                    logger.warning("Unknown benchmark id '%s', skipping", benchmark_id)
                    notes.append(f"Unknown benchmark '{benchmark_id}' skipped")
                else:
                    benchmarks.append(benchmark)

        comparisons = [self.comparator.compare(dimension_scores, b) for b in benchmarks]
        return comparisons, tuple(b.id for b in benchmarks), notes

    def _fatal_fallback(
        self,
        content_type: Optional[ContentType],
        error: Exception,
        started_at: datetime,
        started: float,
    ) -> ValidationResult:
        score = self.settings.fatal_fallback_score
        suggestion = system_suggestion(
            "The quality validator failed and needs maintenance; this result is a neutral placeholder",
            current_score=score,
        )
        return ValidationResult(
            content_type=content_type or ContentType.EPISODE_SCRIPT,
            overall_score=score,
            professional_feedback=ProfessionalFeedback(
                standard_name="None",
                professional_score=score,
                summary="Validation did not complete.",
            ),
            industrial_acceptance=IndustrialAcceptance(
                level=AcceptanceLevel.UNACCEPTABLE,
                score=score,
                professional_standard=False,
                verdict=VERDICTS[AcceptanceLevel.UNACCEPTABLE],
            ),
            suggestions=(suggestion,),
            quality_level=QualityLevel.AMATEUR,
            metadata=ValidationMetadata(
                started_at=started_at,
                finished_at=_utcnow(),
                duration_ms=(time.perf_counter() - started) * 1000,
                notes=(f"Validation failed: {type(error).__name__}: {error}",),
                fallback=True,
            ),
        )
