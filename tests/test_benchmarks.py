"""
Tests for benchmarks, professional standards and quality classification.
"""

import pytest

from narrative_engine.core.enums import AcceptanceLevel, ContentType, QualityLevel, StandardTier
from narrative_engine.evaluation.benchmarks import BenchmarkComparator, BenchmarkRegistry
from narrative_engine.evaluation.classification import classify_quality_level
from narrative_engine.evaluation.models import DimensionScore, QualityBenchmark, QualityMetric
from narrative_engine.evaluation.professional import (
    ProfessionalEvaluator,
    ProfessionalStandardsRegistry,
    acceptance_level,
)


def dim(name: str, score: float, weight: float = 0.5) -> DimensionScore:
    return DimensionScore(dimension=name, score=score, weight=weight, confidence=0.6)


def benchmark(*metrics, benchmark_id="custom", tier=StandardTier.PROFESSIONAL) -> QualityBenchmark:
    return QualityBenchmark(
        id=benchmark_id,
        name="Custom",
        content_type=ContentType.EPISODE_SCRIPT,
        tier=tier,
        metrics=tuple(QualityMetric(dimension=d, weight=w, target_score=t, industry_reference=0.85) for d, w, t in metrics),
    )


# ============================================================================
# Registry
# ============================================================================

class TestBenchmarkRegistry:

    def test_default_weights_are_valid(self):
        registry = BenchmarkRegistry.default()

        assert len(registry) == 16
        assert registry.validate_weights() == []

    def test_for_content_type_sorted_by_tier(self):
        tiers = [b.tier for b in BenchmarkRegistry.default().for_content_type(ContentType.EPISODE_SCRIPT)]

        assert tiers == [
            StandardTier.STUDENT,
            StandardTier.PROFESSIONAL,
            StandardTier.INDUSTRY,
            StandardTier.AWARD_WINNING,
        ]

    def test_filter_by_tier(self):
        found = BenchmarkRegistry.default().for_content_type(ContentType.STORYBOARD, tiers=[StandardTier.INDUSTRY])

        assert [b.id for b in found] == ["storyboard_industry"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            BenchmarkRegistry([benchmark(("a", 1.0, 0.8)), benchmark(("b", 1.0, 0.8))])

    def test_bad_weights_reported(self):
        registry = BenchmarkRegistry([benchmark(("a", 0.5, 0.8), ("b", 0.3, 0.8), benchmark_id="lopsided")])

        assert registry.validate_weights() == ["lopsided"]

    def test_read_only(self):
        registry = BenchmarkRegistry.default()

        with pytest.raises(TypeError):
            registry._benchmarks["new"] = None


# ============================================================================
# Comparator
# ============================================================================

class TestBenchmarkComparator:

    def test_gap_below_target(self):
        scores = {"dialogue_quality": dim("dialogue_quality", 0.8), "narrative_structure": dim("narrative_structure", 0.7)}
        comparison = BenchmarkComparator().compare(
            scores, benchmark(("dialogue_quality", 0.5, 0.8), ("narrative_structure", 0.5, 0.8))
        )

        assert comparison.aggregate_score == pytest.approx(0.75)
        assert comparison.gap == pytest.approx(0.05)
        assert comparison.passed is False
        assert len(comparison.strengths) == 1
        assert len(comparison.weaknesses) == 1

    def test_meeting_target_passes(self):
        scores = {"a": dim("a", 0.8), "b": dim("b", 0.8)}
        comparison = BenchmarkComparator().compare(scores, benchmark(("a", 0.5, 0.8), ("b", 0.5, 0.8)))

        assert comparison.gap == 0.0
        assert comparison.passed is True

    def test_unmatched_metrics_ignored(self):
        scores = {"a": dim("a", 0.9)}
        comparison = BenchmarkComparator().compare(scores, benchmark(("a", 0.3, 0.8), ("missing", 0.7, 0.8)))

        assert comparison.aggregate_score == pytest.approx(0.9)
        assert [m.dimension for m in comparison.metric_scores] == ["a"]

    def test_no_metrics_uses_default_target(self):
        comparison = BenchmarkComparator(default_target=0.7).compare({}, benchmark())

        assert comparison.target_score == 0.7
        assert comparison.aggregate_score == 0.0
        assert comparison.gap == pytest.approx(0.7)


# ============================================================================
# Professional standards
# ============================================================================

class TestProfessionalEvaluator:

    @pytest.mark.parametrize(
        "score,level",
        [
            (0.95, AcceptanceLevel.EXCEPTIONAL),
            (0.9, AcceptanceLevel.EXCEPTIONAL),
            (0.85, AcceptanceLevel.PROFESSIONAL),
            (0.7, AcceptanceLevel.ACCEPTABLE),
            (0.6, AcceptanceLevel.MARGINAL),
            (0.2, AcceptanceLevel.UNACCEPTABLE),
        ],
    )
    def test_acceptance_levels(self, score, level):
        assert acceptance_level(score) == level

    def test_episode_standard(self):
        scores = {
            "dialogue_quality": dim("dialogue_quality", 0.9, 0.3),
            "narrative_structure": dim("narrative_structure", 0.6, 0.25),
        }
        feedback, acceptance = ProfessionalEvaluator(ProfessionalStandardsRegistry.default()).evaluate(
            scores, ContentType.EPISODE_SCRIPT
        )

        # criterion weights 0.35 and 0.25
        assert feedback.professional_score == pytest.approx((0.9 * 0.35 + 0.6 * 0.25) / 0.6)
        assert feedback.standard_id == "broadcast_drama_writers_room"
        assert feedback.criteria_met == 1
        assert len(feedback.gaps) == 1
        assert acceptance.level == AcceptanceLevel.ACCEPTABLE
        assert acceptance.professional_standard is False

    def test_no_standard_uses_overall_score(self):
        feedback, acceptance = ProfessionalEvaluator(ProfessionalStandardsRegistry([])).evaluate(
            {}, ContentType.SCENE_BREAKDOWN, overall_score=0.72
        )

        assert feedback.standard_name == "None"
        assert feedback.professional_score == 0.72
        assert acceptance.level == AcceptanceLevel.ACCEPTABLE


# ============================================================================
# Classification
# ============================================================================

class TestClassification:

    def test_masterpiece_needs_exceptional_acceptance(self):
        assert classify_quality_level(0.97, AcceptanceLevel.EXCEPTIONAL) == QualityLevel.MASTERPIECE
        assert classify_quality_level(0.97, AcceptanceLevel.PROFESSIONAL) == QualityLevel.EXCEPTIONAL
        assert classify_quality_level(0.97, AcceptanceLevel.UNACCEPTABLE) == QualityLevel.PROFESSIONAL

    @pytest.mark.parametrize(
        "score,level",
        [(0.8, QualityLevel.PROFESSIONAL), (0.75, QualityLevel.PROFESSIONAL), (0.6, QualityLevel.COMPETENT),
         (0.59, QualityLevel.AMATEUR)],
    )
    def test_thresholds(self, score, level):
        assert classify_quality_level(score, AcceptanceLevel.ACCEPTABLE) == level

    @pytest.mark.parametrize("acceptance", list(AcceptanceLevel))
    def test_monotonic_in_score(self, acceptance):
        levels = [classify_quality_level(i / 100, acceptance) for i in range(101)]

        assert all(a <= b for a, b in zip(levels, levels[1:]))
