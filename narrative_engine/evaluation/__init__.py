"""
Validation pipeline: dimension assessors, benchmarks, professional standards,
suggestions and A/B comparison.
"""

from narrative_engine.evaluation.ab_testing import ABComparator, summarize_scores
from narrative_engine.evaluation.assessors import (
    Assessor,
    AssessorRegistry,
    HeuristicAssessor,
    LLMJudgeAssessor,
)
from narrative_engine.evaluation.benchmarks import BenchmarkComparator, BenchmarkRegistry
from narrative_engine.evaluation.classification import classify_quality_level
from narrative_engine.evaluation.dimensions import CONTENT_DIMENSIONS, DimensionSpec, dimensions_for
from narrative_engine.evaluation.history import ValidationHistory
from narrative_engine.evaluation.models import (
    ABTestResult,
    BenchmarkComparison,
    DimensionScore,
    ImprovementSuggestion,
    QualityBenchmark,
    QualityMetric,
    ValidationResult,
)
from narrative_engine.evaluation.professional import (
    ProfessionalEvaluator,
    ProfessionalStandard,
    ProfessionalStandardsRegistry,
)
from narrative_engine.evaluation.suggestions import ImprovementSuggestionGenerator
from narrative_engine.evaluation.validator import QualityValidator

__all__ = [
    "QualityValidator",
    "ABComparator",
    "summarize_scores",
    "Assessor",
    "AssessorRegistry",
    "HeuristicAssessor",
    "LLMJudgeAssessor",
    "BenchmarkComparator",
    "BenchmarkRegistry",
    "ProfessionalEvaluator",
    "ProfessionalStandard",
    "ProfessionalStandardsRegistry",
    "ImprovementSuggestionGenerator",
    "ValidationHistory",
    "classify_quality_level",
    "CONTENT_DIMENSIONS",
    "DimensionSpec",
    "dimensions_for",
    "ABTestResult",
    "BenchmarkComparison",
    "DimensionScore",
    "ImprovementSuggestion",
    "QualityBenchmark",
    "QualityMetric",
    "ValidationResult",
]
