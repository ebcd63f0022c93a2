"""
Tests for A/B comparison of artifact variants.
"""

import pytest

from narrative_engine.core.enums import ContentType
from narrative_engine.evaluation.ab_testing import SIGNIFICANCE_METHOD, ABComparator, summarize_scores
from narrative_engine.evaluation.assessors import AssessorRegistry
from narrative_engine.evaluation.benchmarks import BenchmarkRegistry
from narrative_engine.evaluation.models import DimensionScore
from narrative_engine.evaluation.professional import ProfessionalStandardsRegistry
from narrative_engine.evaluation.validator import QualityValidator


class TitleKeyedAssessor:
    """Scores artifacts by title so two variants get known scores."""

    def __init__(self, scores):
        self.scores = scores

    async def assess(self, artifact, dimension, context=None):
        return DimensionScore(
            dimension=dimension.name, score=self.scores[artifact.title], weight=dimension.weight, confidence=1.0
        )


@pytest.fixture
def variants(episode):
    return episode, episode.model_copy(update={"title": "The Lighthouse (rewrite)"})


def make_comparator(scores) -> ABComparator:
    assessor = TitleKeyedAssessor(scores)
    keys = ("dialogue", "narrative_structure", "formatting", "character_consistency", "genre")
    validator = QualityValidator(
        assessors=AssessorRegistry({key: assessor for key in keys}),
        benchmarks=BenchmarkRegistry.default(),
        standards=ProfessionalStandardsRegistry.default(),
    )
    return ABComparator(validator)


class TestSummarizeScores:

    def test_significant_improvement(self):
        summary = summarize_scores(0.70, 0.82)

        assert summary.absolute_improvement == pytest.approx(0.12)
        assert summary.percentage_improvement == pytest.approx(0.12 / 0.70)
        assert summary.significant_improvement is True
        assert summary.preferred_version == "enhanced"
        assert summary.recommendation.startswith("Adopt")

    def test_marginal_improvement(self):
        summary = summarize_scores(0.70, 0.75)

        assert summary.significant_improvement is False
        assert summary.recommendation.startswith("Marginal")

    def test_regression(self):
        summary = summarize_scores(0.80, 0.60)

        assert summary.absolute_improvement == pytest.approx(-0.2)
        assert summary.preferred_version == "original"
        assert summary.recommendation.startswith("Keep the original")

    def test_zero_original(self):
        summary = summarize_scores(0.0, 0.4)

        assert summary.percentage_improvement == 0.0
        assert summary.significant_improvement is True

    def test_equal_scores_prefer_original(self):
        assert summarize_scores(0.7, 0.7).preferred_version == "original"


class TestABComparator:

    @pytest.mark.asyncio
    async def test_compare(self, variants):
        original, enhanced = variants
        comparator = make_comparator({original.title: 0.70, enhanced.title: 0.82})
        result = await comparator.compare(original, enhanced, ContentType.EPISODE_SCRIPT)

        assert result.original_score == pytest.approx(0.70)
        assert result.enhanced_score == pytest.approx(0.82)
        assert result.absolute_improvement == pytest.approx(0.12)
        assert result.percentage_improvement == pytest.approx(0.1714, abs=1e-4)
        assert result.significant_improvement is True
        assert result.significance_method == SIGNIFICANCE_METHOD
        assert result.preferred_version == "enhanced"
        assert result.professional_preference == "enhanced"
        assert all(delta.delta == pytest.approx(0.12) for delta in result.dimension_deltas)
        assert len(result.dimension_deltas) == 5

    @pytest.mark.asyncio
    async def test_same_benchmarks_for_both_passes(self, variants):
        original, enhanced = variants
        comparator = make_comparator({original.title: 0.7, enhanced.title: 0.7})
        result = await comparator.compare(original, enhanced, ContentType.EPISODE_SCRIPT)

        assert result.original.metadata.benchmark_ids == result.enhanced.metadata.benchmark_ids
        assert len(result.original.metadata.benchmark_ids) == 4
        assert result.professional_preference == "tie"

    @pytest.mark.asyncio
    async def test_explicit_benchmarks(self, variants):
        original, enhanced = variants
        comparator = make_comparator({original.title: 0.7, enhanced.title: 0.6})
        result = await comparator.compare(
            original, enhanced, ContentType.EPISODE_SCRIPT, benchmark_ids=["episode_script_industry"]
        )

        assert result.enhanced.metadata.benchmark_ids == ("episode_script_industry",)
        assert result.preferred_version == "original"
        assert result.professional_preference == "original"
