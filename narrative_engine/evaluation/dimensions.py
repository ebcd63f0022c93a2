"""
Quality dimensions per content type.

Each content type maps to a fixed, ordered list of dimensions whose weights
sum to 1.0. The assessor_type key selects the scorer from the AssessorRegistry.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from narrative_engine.core.enums import ContentType


@dataclass(frozen=True)
class DimensionSpec:
    """One named, independently scored quality axis."""

    name: str
    weight: float
    assessor_type: str
    description: str = ""


FORMATTING = DimensionSpec(
    "formatting_compliance", 0.15, "formatting", "All required fields present and well formed"
)

CONTENT_DIMENSIONS: Dict[ContentType, Tuple[DimensionSpec, ...]] = {
    ContentType.EPISODE_SCRIPT: (
        DimensionSpec("dialogue_quality", 0.30, "dialogue", "Distinct voices, subtext, natural flow"),
        DimensionSpec("narrative_structure", 0.25, "narrative_structure", "Pacing, escalation, coherent choices"),
        FORMATTING,
        DimensionSpec(
            "character_consistency", 0.20, "character_consistency", "Characters behave as the story bible says"
        ),
        DimensionSpec("genre_appropriateness", 0.10, "genre", "Delivers the conventions of its genre"),
    ),
    ContentType.BEAT_SHEET: (
        DimensionSpec("structural_completeness", 0.30, "beat_structure", "Beats cover setup to resolution"),
        DimensionSpec("conflict_clarity", 0.25, "conflict", "Every beat carries a clear conflict"),
        DimensionSpec("character_consistency", 0.20, "character_consistency", "Beats centre the right characters"),
        DimensionSpec("hook_strength", 0.25, "hook", "Opening hook and cliffhanger pull the audience in"),
    ),
    ContentType.STORYBOARD: (
        DimensionSpec("shot_variety", 0.30, "shot_variety", "Range of shot types and camera movement"),
        DimensionSpec("visual_detail", 0.30, "visual_detail", "Frames describe what the camera sees"),
        DimensionSpec("scene_coverage", 0.25, "scene_coverage", "Every scene is covered by enough shots"),
        FORMATTING,
    ),
    ContentType.CASTING_SHEET: (
        DimensionSpec("role_coverage", 0.35, "role_coverage", "Every character is cast, with one clear lead"),
        DimensionSpec(
            "character_consistency", 0.25, "character_consistency", "Roles match the story bible characters"
        ),
        DimensionSpec("performance_guidance", 0.25, "performance_guidance", "Actionable notes for performers"),
        FORMATTING,
    ),
    ContentType.SCENE_BREAKDOWN: (
        DimensionSpec("formatting_compliance", 0.5, "formatting", "All required fields present and well formed"),
        DimensionSpec("character_consistency", 0.5, "character_consistency", "Scenes use the known characters"),
    ),
    ContentType.CHARACTER_BREAKDOWN: (
        DimensionSpec("formatting_compliance", 0.5, "formatting", "All required fields present and well formed"),
        DimensionSpec("character_consistency", 0.5, "character_consistency", "Roles match the known characters"),
    ),
}


def dimensions_for(content_type: ContentType) -> Tuple[DimensionSpec, ...]:
    """
    Dimensions for a content type.

    Raises:
        ValueError: If the content type has no dimensions
    """
    if content_type not in CONTENT_DIMENSIONS:
        raise ValueError(f"No quality dimensions defined for {content_type}")
    return CONTENT_DIMENSIONS[content_type]
