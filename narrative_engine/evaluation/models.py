"""
Data models for the validation pipeline.

Benchmarks and metrics are loaded once into read-only registries; every
other record here is built fresh per validation call and never mutated.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from narrative_engine.core.enums import (
    AcceptanceLevel,
    ContentType,
    DifficultyTier,
    QualityLevel,
    StandardTier,
    SuggestionKind,
)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class QualityMetric(_Record):
    """One weighted dimension inside a benchmark."""

    dimension: str
    weight: float = Field(..., ge=0.0, le=1.0)
    target_score: float = Field(..., ge=0.0, le=1.0)
    industry_reference: float = Field(..., ge=0.0, le=1.0, description="Typical score of produced work")


class QualityBenchmark(_Record):
    """A named, weighted bundle of metrics representing one standard tier."""

    id: str
    name: str
    content_type: ContentType
    tier: StandardTier
    metrics: Tuple[QualityMetric, ...] = ()
    description: str = ""

    @property
    def weights(self) -> Dict[str, float]:
        return {metric.dimension: metric.weight for metric in self.metrics}


class DimensionScore(_Record):
    """Score for one quality dimension of one artifact."""

    dimension: str
    score: float = Field(..., ge=0.0, le=1.0)
    weight: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    feedback: str = ""
    improvement_actions: Tuple[str, ...] = ()
    assessor: str = ""


class MetricScore(_Record):
    dimension: str
    score: float
    weight: float
    target_score: float
    industry_reference: float


class BenchmarkComparison(_Record):
    """Outcome of comparing dimension scores against one benchmark."""

    benchmark_id: str
    benchmark_name: str
    tier: StandardTier
    aggregate_score: float = Field(..., ge=0.0, le=1.0)
    target_score: float
    metric_scores: Tuple[MetricScore, ...] = ()
    passed: bool
    gap: float = Field(..., ge=0.0)
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()


class ImprovementSuggestion(_Record):
    """One ranked, actionable improvement."""

    kind: SuggestionKind
    dimension: Optional[str] = None
    benchmark_id: Optional[str] = None
    current_score: float
    target_score: float
    expected_impact: float
    difficulty: DifficultyTier
    time_estimate: str
    required_resources: Tuple[str, ...] = ()
    action: str


class CriterionResult(_Record):
    name: str
    dimension: str
    score: float
    threshold: float
    weight: float
    met: bool


class ProfessionalFeedback(_Record):
    """How an artifact measures up against a curated industry standard."""

    standard_id: Optional[str] = None
    standard_name: str
    professional_score: float = Field(..., ge=0.0, le=1.0)
    criteria: Tuple[CriterionResult, ...] = ()
    criteria_met: int = 0
    strengths: Tuple[str, ...] = ()
    gaps: Tuple[str, ...] = ()
    summary: str


class IndustrialAcceptance(_Record):
    level: AcceptanceLevel
    score: float = Field(..., ge=0.0, le=1.0)
    professional_standard: bool
    verdict: str


def _validation_id() -> str:
    return uuid.uuid4().hex[:12]


class ValidationMetadata(_Record):
    validation_id: str = Field(default_factory=_validation_id)
    started_at: datetime
    finished_at: datetime
    duration_ms: float
    assessors_used: Tuple[str, ...] = ()
    skipped_dimensions: Tuple[str, ...] = ()
    failed_dimensions: Dict[str, str] = Field(default_factory=dict)
    benchmark_ids: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()
    fallback: bool = False


class ValidationResult(_Record):
    """Terminal aggregate of one validation call."""

    content_type: ContentType
    overall_score: float = Field(..., ge=0.0, le=1.0)
    dimension_scores: Dict[str, DimensionScore] = Field(default_factory=dict)
    benchmark_comparisons: Tuple[BenchmarkComparison, ...] = ()
    professional_feedback: ProfessionalFeedback
    industrial_acceptance: IndustrialAcceptance
    suggestions: Tuple[ImprovementSuggestion, ...] = ()
    quality_level: QualityLevel
    metadata: ValidationMetadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-serializable dictionary."""
        return self.model_dump(mode="json")


class DimensionDelta(_Record):
    dimension: str
    original: float
    enhanced: float
    delta: float


class ABTestResult(_Record):
    """Comparative verdict for an original and an enhanced artifact."""

    content_type: ContentType
    original_score: float
    enhanced_score: float
    absolute_improvement: float
    percentage_improvement: float
    significant_improvement: bool
    significance_method: str = "fixed_threshold_heuristic"
    significance_threshold: float
    preferred_version: Literal["original", "enhanced"]
    professional_preference: Literal["original", "enhanced", "tie"]
    dimension_deltas: Tuple[DimensionDelta, ...] = ()
    recommendation: str
    original: ValidationResult
    enhanced: ValidationResult

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
