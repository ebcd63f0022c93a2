"""
Benchmark registry and comparator.

A benchmark is a weighted set of metrics for one standard tier. Only metrics
that have a matching dimension score take part in a comparison.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from narrative_engine.core.enums import ContentType, StandardTier
from narrative_engine.evaluation.dimensions import CONTENT_DIMENSIONS
from narrative_engine.evaluation.models import (
    BenchmarkComparison,
    DimensionScore,
    MetricScore,
    QualityBenchmark,
    QualityMetric,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET = 0.8

TIER_TARGETS: Dict[StandardTier, float] = {
    StandardTier.STUDENT: 0.60,
    StandardTier.PROFESSIONAL: 0.75,
    StandardTier.INDUSTRY: 0.85,
    StandardTier.AWARD_WINNING: 0.92,
}

# Score typical of produced, on-air work for every dimension
INDUSTRY_REFERENCE = 0.85

PRIMARY_CONTENT_TYPES = (
    ContentType.EPISODE_SCRIPT,
    ContentType.BEAT_SHEET,
    ContentType.STORYBOARD,
    ContentType.CASTING_SHEET,
)


class BenchmarkRegistry:
    """Read-only collection of benchmarks keyed by id."""

    def __init__(self, benchmarks: Iterable[QualityBenchmark]):
        by_id: Dict[str, QualityBenchmark] = {}
        for benchmark in benchmarks:
            if benchmark.id in by_id:
                raise ValueError(f"Duplicate benchmark id: {benchmark.id}")
            by_id[benchmark.id] = benchmark
        self._benchmarks = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._benchmarks)

    def get(self, benchmark_id: str) -> Optional[QualityBenchmark]:
        return self._benchmarks.get(benchmark_id)

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._benchmarks)

    def for_content_type(
        self,
        content_type: ContentType,
        tiers: Optional[Sequence[StandardTier]] = None,
    ) -> Tuple[QualityBenchmark, ...]:
        """Benchmarks for a content type, lowest tier first."""
        matches = [
            b for b in self._benchmarks.values()
            if b.content_type == content_type and (tiers is None or b.tier in tiers)
        ]
        return tuple(sorted(matches, key=lambda b: b.tier.rank))

    def validate_weights(self, tolerance: float = 1e-6) -> List[str]:
        """Ids of benchmarks whose metric weights do not sum to 1.0."""
        return [
            b.id for b in self._benchmarks.values()
            if abs(sum(m.weight for m in b.metrics) - 1.0) > tolerance
        ]

    @classmethod
    def default(cls) -> "BenchmarkRegistry":
        """Four tiers per primary content type, metric weights mirroring the dimensions."""
        benchmarks = []
        for content_type in PRIMARY_CONTENT_TYPES:
            label = content_type.value.replace("_", " ").title()
            for tier, target in TIER_TARGETS.items():
                benchmarks.append(
                    QualityBenchmark(
                        id=f"{content_type.value}_{tier.value}",
                        name=f"{tier.value.replace('_', ' ').title()} {label}",
                        content_type=content_type,
                        tier=tier,
                        metrics=tuple(
                            QualityMetric(
                                dimension=spec.name,
                                weight=spec.weight,
                                target_score=target,
                                industry_reference=INDUSTRY_REFERENCE,
                            )
                            for spec in CONTENT_DIMENSIONS[content_type]
                        ),
                        description=f"{label} work at {tier.value.replace('_', ' ')} level",
                    )
                )
        return cls(benchmarks)


class BenchmarkComparator:
    """Compares dimension scores against a benchmark."""

    def __init__(self, default_target: float = DEFAULT_TARGET):
        self.default_target = default_target

    def compare(
        self,
        dimension_scores: Mapping[str, DimensionScore],
        benchmark: QualityBenchmark,
    ) -> BenchmarkComparison:
        """
        Compare scores against one benchmark.

        Aggregate = sum(score * weight) / sum(weight) over matched metrics only;
        target is the first metric's target score. gap = max(0, target - aggregate)
        and the comparison passes exactly when the gap is zero.
        """
        target = benchmark.metrics[0].target_score if benchmark.metrics else self.default_target

        metric_scores = []
        for metric in benchmark.metrics:
            dimension_score = dimension_scores.get(metric.dimension)
            if dimension_score is None:
                continue
            metric_scores.append(
                MetricScore(
                    dimension=metric.dimension,
                    score=dimension_score.score,
                    weight=metric.weight,
                    target_score=metric.target_score,
                    industry_reference=metric.industry_reference,
                )
            )

        matched_weight = sum(m.weight for m in metric_scores)
        if matched_weight > 0:
            aggregate = sum(m.score * m.weight for m in metric_scores) / matched_weight
        else:
            aggregate = 0.0
            logger.debug("Benchmark %s: no metric matched a dimension score", benchmark.id)
        aggregate = min(max(aggregate, 0.0), 1.0)
        gap = max(0.0, round(target - aggregate, 9))

        strengths = []
        weaknesses = []
        for m in metric_scores:
            label = m.dimension.replace("_", " ")
            if m.score >= target:
                note = f"{label} at {m.score:.2f} meets the {target:.2f} target"
                if m.score > m.industry_reference:
                    note += f" and exceeds the industry reference ({m.industry_reference:.2f})"
                strengths.append(note)
            else:
                weaknesses.append(f"{label} at {m.score:.2f} is {target - m.score:.2f} below the {target:.2f} target")

        return BenchmarkComparison(
            benchmark_id=benchmark.id,
            benchmark_name=benchmark.name,
            tier=benchmark.tier,
            aggregate_score=aggregate,
            target_score=target,
            metric_scores=tuple(metric_scores),
            passed=gap == 0,
            gap=gap,
            strengths=tuple(strengths),
            weaknesses=tuple(weaknesses),
        )
