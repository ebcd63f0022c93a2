"""
A/B Comparator - validates an original and an enhanced artifact side by side.

Significance is a fixed threshold on the absolute score difference, a
heuristic rather than a statistical test.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from narrative_engine.core.enums import ContentType
from narrative_engine.evaluation.models import ABTestResult, DimensionDelta
from narrative_engine.evaluation.validator import Artifact, QualityValidator
from narrative_engine.generation.models import GenerationContext

logger = logging.getLogger(__name__)

SIGNIFICANCE_METHOD = "fixed_threshold_heuristic"

# (significant, improved) -> recommendation
RECOMMENDATIONS: Dict[Tuple[bool, bool], str] = {
    (True, True): "Adopt the enhanced version: it is a clear improvement over the original.",
    (True, False): "Keep the original: the enhanced version scores clearly worse.",
    (False, True): "Marginal gain only: review both versions before adopting the enhanced one.",
    (False, False): "No meaningful improvement: keep the original or try a different enhancement.",
}


@dataclass(frozen=True)
class ScoreSummary:
    absolute_improvement: float
    percentage_improvement: float
    significant_improvement: bool
    preferred_version: str

    @property
    def improved(self) -> bool:
        return self.absolute_improvement > 0

    @property
    def recommendation(self) -> str:
        return RECOMMENDATIONS[(self.significant_improvement, self.improved)]


def summarize_scores(original_score: float, enhanced_score: float, threshold: float = 0.1) -> ScoreSummary:
    """
    Compare two overall scores.

    percentage_improvement is 0 when original_score is 0.
    """
    absolute = enhanced_score - original_score
    percentage = absolute / original_score if original_score != 0 else 0.0
    return ScoreSummary(
        absolute_improvement=absolute,
        percentage_improvement=percentage,
        significant_improvement=abs(absolute) > threshold,
        preferred_version="enhanced" if enhanced_score > original_score else "original",
    )


class ABComparator:
    """Runs two independent validation passes with identical benchmark sets."""

    def __init__(self, validator: QualityValidator):
        self.validator = validator

    async def compare(
        self,
        original: Artifact,
        enhanced: Artifact,
        content_type: ContentType,
        context: Optional[GenerationContext] = None,
        benchmark_ids: Optional[Sequence[str]] = None,
    ) -> ABTestResult:
        """
        Validate both variants concurrently and compute the comparative verdict.

        Args:
            original: Baseline artifact
            enhanced: Candidate artifact
            content_type: Content type shared by both variants
            context: Generation context shared by both passes
            benchmark_ids: Benchmarks used for both passes (default: all for content_type)

        Returns:
            ABTestResult
        """
        if benchmark_ids is None:
            benchmark_ids = [b.id for b in self.validator.benchmarks.for_content_type(content_type)]

        logger.info("A/B comparison start: %s", content_type.value)
        original_result, enhanced_result = await asyncio.gather(
            self.validator.validate(original, content_type, context, benchmark_ids),
            self.validator.validate(enhanced, content_type, context, benchmark_ids),
        )

        threshold = self.validator.settings.significance_threshold
        summary = summarize_scores(original_result.overall_score, enhanced_result.overall_score, threshold)

        original_professional = original_result.professional_feedback.professional_score
        enhanced_professional = enhanced_result.professional_feedback.professional_score
        if enhanced_professional > original_professional:
            professional_preference = "enhanced"
        elif enhanced_professional < original_professional:
            professional_preference = "original"
        else:
            professional_preference = "tie"

        deltas = tuple(
            DimensionDelta(
                dimension=name,
                original=score.score,
                enhanced=enhanced_result.dimension_scores[name].score,
                delta=enhanced_result.dimension_scores[name].score - score.score,
            )
            for name, score in original_result.dimension_scores.items()
            if name in enhanced_result.dimension_scores
        )

        logger.info(
            "A/B comparison complete: original=%.3f enhanced=%.3f delta=%+.3f significant=%s",
            original_result.overall_score,
            enhanced_result.overall_score,
            summary.absolute_improvement,
            summary.significant_improvement,
        )

        return ABTestResult(
            content_type=content_type,
            original_score=original_result.overall_score,
            enhanced_score=enhanced_result.overall_score,
            absolute_improvement=summary.absolute_improvement,
            percentage_improvement=summary.percentage_improvement,
            significant_improvement=summary.significant_improvement,
            significance_method=SIGNIFICANCE_METHOD,
            significance_threshold=threshold,
            preferred_version=summary.preferred_version,
            professional_preference=professional_preference,
            dimension_deltas=deltas,
            recommendation=summary.recommendation,
            original=original_result,
            enhanced=enhanced_result,
        )
