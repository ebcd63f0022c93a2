"""
Quality level classification.
"""

from narrative_engine.core.enums import AcceptanceLevel, QualityLevel


def classify_quality_level(overall_score: float, acceptance_level: AcceptanceLevel) -> QualityLevel:
    """
    Classify an artifact from its overall score and industrial acceptance.

    Pure function, monotonic in overall_score for a fixed acceptance level.
    """
    if overall_score >= 0.95 and acceptance_level == AcceptanceLevel.EXCEPTIONAL:
        return QualityLevel.MASTERPIECE
    if overall_score >= 0.85 and acceptance_level != AcceptanceLevel.UNACCEPTABLE:
        return QualityLevel.EXCEPTIONAL
    if overall_score >= 0.75:
        return QualityLevel.PROFESSIONAL
    if overall_score >= 0.6:
        return QualityLevel.COMPETENT
    return QualityLevel.AMATEUR
