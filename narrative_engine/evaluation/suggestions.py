"""
Improvement Suggestion Generator.

Low dimension scores and large benchmark gaps become suggestions, merged in
discovery order and then stably sorted by descending expected impact.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from narrative_engine.core.config import ValidatorSettings
from narrative_engine.core.enums import DifficultyTier, SuggestionKind
from narrative_engine.evaluation.models import (
    BenchmarkComparison,
    DimensionScore,
    ImprovementSuggestion,
)
from narrative_engine.generation.models import GenerationContext

TIME_ESTIMATES: Dict[DifficultyTier, str] = {
    DifficultyTier.EASY: "15-30 minutes",
    DifficultyTier.MODERATE: "1-2 hours",
    DifficultyTier.HARD: "half a day",
    DifficultyTier.EXPERT: "1-2 days",
}

DIMENSION_RESOURCES: Dict[str, Tuple[str, ...]] = {
    "dialogue_quality": ("Dialogue polish pass", "Table read"),
    "narrative_structure": ("Structure review against the beat sheet", "Story editor notes"),
    "formatting_compliance": ("Format checklist",),
    "character_consistency": ("Series bible character profiles", "Continuity notes"),
    "genre_appropriateness": ("Genre reference episodes",),
    "structural_completeness": ("Beat sheet template",),
    "conflict_clarity": ("Antagonist and stakes breakdown",),
    "hook_strength": ("Cold open workshop", "Comparable pilot openings"),
    "shot_variety": ("Shot list reference", "Director consultation"),
    "visual_detail": ("Lookbook", "Location photos"),
    "scene_coverage": ("Coverage plan",),
    "role_coverage": ("Series bible character list",),
    "performance_guidance": ("Character voice notes", "Casting director review"),
}

DEFAULT_RESOURCES = ("Revision pass",)


def difficulty_for(impact: float) -> DifficultyTier:
    """Larger expected gains take more effort."""
    if impact < 0.1:
        return DifficultyTier.EASY
    if impact < 0.2:
        return DifficultyTier.MODERATE
    if impact < 0.35:
        return DifficultyTier.HARD
    return DifficultyTier.EXPERT


def system_suggestion(action: str, current_score: float = 0.0, dimension: Optional[str] = None) -> ImprovementSuggestion:
    """Operator-facing suggestion for pipeline problems rather than content problems."""
    return ImprovementSuggestion(
        kind=SuggestionKind.SYSTEM_IMPROVEMENT,
        dimension=dimension,
        current_score=current_score,
        target_score=current_score,
        expected_impact=0.0,
        difficulty=DifficultyTier.MODERATE,
        time_estimate=TIME_ESTIMATES[DifficultyTier.MODERATE],
        required_resources=("Engine maintainer",),
        action=action,
    )


class ImprovementSuggestionGenerator:
    """Turns weak dimensions and benchmark gaps into a ranked suggestion list."""

    def __init__(self, settings: Optional[ValidatorSettings] = None):
        self.settings = settings or ValidatorSettings()

    def suggest(
        self,
        dimension_scores: Union[Mapping[str, DimensionScore], Sequence[DimensionScore]],
        benchmark_comparisons: Iterable[BenchmarkComparison] = (),
        context: Optional[GenerationContext] = None,
    ) -> List[ImprovementSuggestion]:
        """
        Build suggestions sorted by non-increasing expected impact.

        Args:
            dimension_scores: Scores in dimension order (mapping or sequence)
            benchmark_comparisons: Comparisons to mine for gaps
            context: Generation context, used to name the series in action text

        Returns:
            Suggestions; ties keep discovery order (dimensions first)
        """
        scores = list(dimension_scores.values()) if isinstance(dimension_scores, Mapping) else list(dimension_scores)
        suggestions = []

        for score in scores:
            if score.score < self.settings.improvement_threshold:
                suggestions.append(self._for_dimension(score, context))

        for comparison in benchmark_comparisons:
            if comparison.gap > self.settings.benchmark_gap_threshold:
                suggestions.append(self._for_benchmark(comparison))

        # sorted() is stable, so equal impacts keep discovery order
        return sorted(suggestions, key=lambda s: -s.expected_impact)

    def _for_dimension(self, score: DimensionScore, context: Optional[GenerationContext]) -> ImprovementSuggestion:
        target = self.settings.improvement_target
        impact = round(target - score.score, 4)
        difficulty = difficulty_for(impact)
        label = score.dimension.replace("_", " ")
        if score.improvement_actions:
            action = "; ".join(score.improvement_actions)
        else:
            action = f"Raise {label} from {score.score:.2f} to {target:.2f}"
        if context is not None:
            action += f" ({context.story.series_title}, episode {context.episode_number})"
        return ImprovementSuggestion(
            kind=SuggestionKind.DIMENSION_IMPROVEMENT,
            dimension=score.dimension,
            current_score=score.score,
            target_score=target,
            expected_impact=impact,
            difficulty=difficulty,
            time_estimate=TIME_ESTIMATES[difficulty],
            required_resources=DIMENSION_RESOURCES.get(score.dimension, DEFAULT_RESOURCES),
            action=action,
        )

    def _for_benchmark(self, comparison: BenchmarkComparison) -> ImprovementSuggestion:
        impact = round(comparison.gap, 4)
        difficulty = difficulty_for(impact)
        weakest = min(comparison.metric_scores, key=lambda m: m.score) if comparison.metric_scores else None
        dimension = weakest.dimension if weakest else None
        if weakest:
            action = (
                f"Close the {impact:.2f} gap to {comparison.benchmark_name} "
                f"starting with {weakest.dimension.replace('_', ' ')} ({weakest.score:.2f})"
            )
        else:
            action = f"Close the {impact:.2f} gap to {comparison.benchmark_name}"
        return ImprovementSuggestion(
            kind=SuggestionKind.BENCHMARK_IMPROVEMENT,
            dimension=dimension,
            benchmark_id=comparison.benchmark_id,
            current_score=comparison.aggregate_score,
            target_score=comparison.target_score,
            expected_impact=impact,
            difficulty=difficulty,
            time_estimate=TIME_ESTIMATES[difficulty],
            required_resources=DIMENSION_RESOURCES.get(dimension, DEFAULT_RESOURCES) if dimension else DEFAULT_RESOURCES,
            action=action,
        )
