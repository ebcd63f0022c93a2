"""
Professional Benchmark Evaluator - curated industry standards, independent of
the generic tiered benchmarks.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from narrative_engine.core.enums import AcceptanceLevel, ContentType
from narrative_engine.evaluation.models import (
    CriterionResult,
    DimensionScore,
    IndustrialAcceptance,
    ProfessionalFeedback,
)

logger = logging.getLogger(__name__)

ACCEPTANCE_THRESHOLDS: Tuple[Tuple[float, AcceptanceLevel], ...] = (
    (0.90, AcceptanceLevel.EXCEPTIONAL),
    (0.80, AcceptanceLevel.PROFESSIONAL),
    (0.70, AcceptanceLevel.ACCEPTABLE),
    (0.55, AcceptanceLevel.MARGINAL),
)

VERDICTS: Dict[AcceptanceLevel, str] = {
    AcceptanceLevel.EXCEPTIONAL: "Ready for production; stands out against produced work.",
    AcceptanceLevel.PROFESSIONAL: "Meets professional standards; minor polish only.",
    AcceptanceLevel.ACCEPTABLE: "Usable with a focused revision pass.",
    AcceptanceLevel.MARGINAL: "Needs significant revision before it can be used.",
    AcceptanceLevel.UNACCEPTABLE: "Not usable in its current form.",
}


@dataclass(frozen=True)
class ProfessionalCriterion:
    name: str
    dimension: str
    weight: float
    threshold: float
    description: str = ""


@dataclass(frozen=True)
class ProfessionalStandard:
    """A curated industry standard for one content type."""

    id: str
    name: str
    content_type: ContentType
    criteria: Tuple[ProfessionalCriterion, ...]


DEFAULT_STANDARDS: Tuple[ProfessionalStandard, ...] = (
    ProfessionalStandard(
        id="broadcast_drama_writers_room",
        name="Broadcast Drama Writers' Room",
        content_type=ContentType.EPISODE_SCRIPT,
        criteria=(
            ProfessionalCriterion("Dialogue that plays", "dialogue_quality", 0.35, 0.80,
                                  "Lines an actor can say, with subtext"),
            ProfessionalCriterion("Structure that holds", "narrative_structure", 0.25, 0.75,
                                  "Escalation toward a real choice"),
            ProfessionalCriterion("Characters stay true", "character_consistency", 0.25, 0.75,
                                  "Consistent with the series bible"),
            ProfessionalCriterion("Submission-ready format", "formatting_compliance", 0.15, 0.85),
        ),
    ),
    ProfessionalStandard(
        id="showrunner_beat_review",
        name="Showrunner Beat Review",
        content_type=ContentType.BEAT_SHEET,
        criteria=(
            ProfessionalCriterion("Complete spine", "structural_completeness", 0.30, 0.80),
            ProfessionalCriterion("Clear opposition", "conflict_clarity", 0.30, 0.75),
            ProfessionalCriterion("Cold open and button", "hook_strength", 0.25, 0.75),
            ProfessionalCriterion("Right characters in focus", "character_consistency", 0.15, 0.70),
        ),
    ),
    ProfessionalStandard(
        id="feature_storyboard_department",
        name="Feature Storyboard Department",
        content_type=ContentType.STORYBOARD,
        criteria=(
            ProfessionalCriterion("Coverage", "scene_coverage", 0.30, 0.80),
            ProfessionalCriterion("Shot grammar", "shot_variety", 0.30, 0.75),
            ProfessionalCriterion("Readable frames", "visual_detail", 0.25, 0.75),
            ProfessionalCriterion("Board hygiene", "formatting_compliance", 0.15, 0.85),
        ),
    ),
    ProfessionalStandard(
        id="casting_director_breakdown",
        name="Casting Director Breakdown",
        content_type=ContentType.CASTING_SHEET,
        criteria=(
            ProfessionalCriterion("Every role accounted for", "role_coverage", 0.35, 0.85),
            ProfessionalCriterion("Direction for performers", "performance_guidance", 0.30, 0.75),
            ProfessionalCriterion("True to the characters", "character_consistency", 0.20, 0.75),
            ProfessionalCriterion("Breakdown format", "formatting_compliance", 0.15, 0.85),
        ),
    ),
)


def acceptance_level(score: float) -> AcceptanceLevel:
    """Map a score onto the ordered acceptance scale."""
    for threshold, level in ACCEPTANCE_THRESHOLDS:
        if score >= threshold:
            return level
    return AcceptanceLevel.UNACCEPTABLE


def industrial_acceptance(score: float) -> IndustrialAcceptance:
    level = acceptance_level(score)
    return IndustrialAcceptance(
        level=level,
        score=min(max(score, 0.0), 1.0),
        professional_standard=level >= AcceptanceLevel.PROFESSIONAL,
        verdict=VERDICTS[level],
    )


class ProfessionalStandardsRegistry:
    """Read-only collection of professional standards."""

    def __init__(self, standards: Iterable[ProfessionalStandard]):
        self._standards: Tuple[ProfessionalStandard, ...] = tuple(standards)

    def get(self, standard_id: str) -> Optional[ProfessionalStandard]:
        for standard in self._standards:
            if standard.id == standard_id:
                return standard
        return None

    def for_content_type(self, content_type: ContentType) -> Optional[ProfessionalStandard]:
        for standard in self._standards:
            if standard.content_type == content_type:
                return standard
        return None

    @classmethod
    def default(cls) -> "ProfessionalStandardsRegistry":
        return cls(DEFAULT_STANDARDS)


class ProfessionalEvaluator:
    """Scores dimension results against the curated standard for their content type."""

    def __init__(self, registry: ProfessionalStandardsRegistry):
        self.registry = registry

    def evaluate(
        self,
        dimension_scores: Mapping[str, DimensionScore],
        content_type: ContentType,
        overall_score: Optional[float] = None,
    ) -> Tuple[ProfessionalFeedback, IndustrialAcceptance]:
        """
        Evaluate against the professional standard for content_type.

        Args:
            dimension_scores: Scored dimensions keyed by name
            content_type: Content type of the artifact
            overall_score: Overall validation score, used when no standard applies
                or no criterion matched (weighted mean of the scores if omitted)

        Returns:
            (ProfessionalFeedback, IndustrialAcceptance)
        """
        if overall_score is None:
            total_weight = sum(s.weight for s in dimension_scores.values())
            overall_score = (
                sum(s.score * s.weight for s in dimension_scores.values()) / total_weight if total_weight else 0.0
            )

        standard = self.registry.for_content_type(content_type)
        if standard is None:
            logger.debug("No professional standard for %s", content_type.value)
            feedback = ProfessionalFeedback(
                standard_name="None",
                professional_score=overall_score,
                summary=f"No professional standard defined for {content_type.value}; "
                        "acceptance derived from the overall score.",
            )
            return feedback, industrial_acceptance(overall_score)

        results = []
        for criterion in standard.criteria:
            dimension_score = dimension_scores.get(criterion.dimension)
            if dimension_score is None:
                continue
            results.append(
                CriterionResult(
                    name=criterion.name,
                    dimension=criterion.dimension,
                    score=dimension_score.score,
                    threshold=criterion.threshold,
                    weight=criterion.weight,
                    met=dimension_score.score >= criterion.threshold,
                )
            )

        matched_weight = sum(r.weight for r in results)
        if matched_weight > 0:
            professional_score = sum(r.score * r.weight for r in results) / matched_weight
        else:
            professional_score = overall_score
        professional_score = min(max(professional_score, 0.0), 1.0)

        met = [r for r in results if r.met]
        strengths = tuple(f"{r.name}: {r.score:.2f} (needs {r.threshold:.2f})" for r in met)
        gaps = tuple(f"{r.name}: {r.score:.2f} (needs {r.threshold:.2f})" for r in results if not r.met)
        acceptance = industrial_acceptance(professional_score)

        feedback = ProfessionalFeedback(
            standard_id=standard.id,
            standard_name=standard.name,
            professional_score=professional_score,
            criteria=tuple(results),
            criteria_met=len(met),
            strengths=strengths,
            gaps=gaps,
            summary=f"{standard.name}: {len(met)}/{len(results)} criteria met. {acceptance.verdict}",
        )
        return feedback, acceptance
