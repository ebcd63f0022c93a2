"""
Enumerations shared by the generation and evaluation pipelines.
"""

from enum import Enum


class ContentType(str, Enum):
    """Artifact kinds the engine can generate and validate."""

    BEAT_SHEET = "beat_sheet"
    EPISODE_SCRIPT = "episode_script"
    STORYBOARD = "storyboard"
    CASTING_SHEET = "casting_sheet"
    # Intermediate stage outputs
    SCENE_BREAKDOWN = "scene_breakdown"
    CHARACTER_BREAKDOWN = "character_breakdown"


class _OrderedEnum(str, Enum):
    """String enum whose members compare by declaration order."""

    @property
    def rank(self) -> int:
        return type(self)._member_names_.index(self._name_)

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank


class StandardTier(_OrderedEnum):
    """Benchmark standard tiers, lowest first."""

    STUDENT = "student"
    PROFESSIONAL = "professional"
    INDUSTRY = "industry"
    AWARD_WINNING = "award_winning"


class QualityLevel(_OrderedEnum):
    """Final quality classification of a validated artifact, lowest first."""

    AMATEUR = "amateur"
    COMPETENT = "competent"
    PROFESSIONAL = "professional"
    EXCEPTIONAL = "exceptional"
    MASTERPIECE = "masterpiece"


class AcceptanceLevel(_OrderedEnum):
    """Industrial acceptance verdict, lowest first."""

    UNACCEPTABLE = "unacceptable"
    MARGINAL = "marginal"
    ACCEPTABLE = "acceptable"
    PROFESSIONAL = "professional"
    EXCEPTIONAL = "exceptional"


class SuggestionKind(str, Enum):
    """Origin of an improvement suggestion."""

    DIMENSION_IMPROVEMENT = "dimension_improvement"
    BENCHMARK_IMPROVEMENT = "benchmark_improvement"
    SYSTEM_IMPROVEMENT = "system_improvement"


class DifficultyTier(_OrderedEnum):
    """Effort needed to act on a suggestion, lowest first."""

    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    EXPERT = "expert"
