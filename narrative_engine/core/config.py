"""
Settings for the generation and validation pipelines.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeneratorSettings:
    """Bounds applied to every collaborator call made by the staged generator."""

    model: str = "gemini-2.5-pro"
    timeout_seconds: float = 120.0
    default_temperature: float = 0.85
    default_max_output_tokens: int = 4000
    min_response_chars: int = 50  # shorter replies count as a failed call

    def __post_init__(self):
        """Validate settings values."""
        if not self.model:
            raise ValueError("model must be a non-empty string")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if not 0.0 <= self.default_temperature <= 2.0:
            raise ValueError("default_temperature should be between 0.0 and 2.0")
        if self.default_max_output_tokens < 1:
            raise ValueError("default_max_output_tokens must be at least 1")
        if self.min_response_chars < 0:
            raise ValueError("min_response_chars cannot be negative")


@dataclass(frozen=True)
class AnalyzerSettings:
    """Options for the single goal-derivation call of the context analyzer."""

    temperature: float = 0.4
    max_output_tokens: int = 200
    timeout_seconds: float = 30.0
    max_goal_chars: int = 400

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature should be between 0.0 and 2.0")
        if self.max_output_tokens < 1:
            raise ValueError("max_output_tokens must be at least 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")


@dataclass(frozen=True)
class ValidatorSettings:
    """Thresholds used by the validation pipeline."""

    improvement_threshold: float = 0.8  # dimensions below this get a suggestion
    improvement_target: float = 0.9
    benchmark_gap_threshold: float = 0.1
    significance_threshold: float = 0.1  # A/B heuristic, not a statistical test
    default_benchmark_target: float = 0.8
    fatal_fallback_score: float = 0.6
    history_limit: int = 100
    record_history: bool = True

    def __post_init__(self):
        """Validate threshold values."""
        for name in (
            "improvement_threshold",
            "improvement_target",
            "benchmark_gap_threshold",
            "significance_threshold",
            "default_benchmark_target",
            "fatal_fallback_score",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0")
        if self.improvement_target < self.improvement_threshold:
            raise ValueError("improvement_target must not be below improvement_threshold")
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")
