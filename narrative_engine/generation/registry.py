"""
Content Registry - Maps ContentType to its fixed pipeline of generation stages.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel

from narrative_engine.core.enums import ContentType
from narrative_engine.generation import fallbacks
from narrative_engine.generation.models import (
    BeatSheet,
    CastingSheet,
    CharacterBreakdown,
    EpisodeScript,
    GenerationContext,
    SceneBreakdown,
    Storyboard,
)

FallbackBuilder = Callable[[GenerationContext, Optional[BaseModel]], BaseModel]


@dataclass(frozen=True)
class GenerationStage:
    """One ordered step of a generation pipeline."""

    name: str
    system_prompt: str
    prompt_template: str
    output_schema: Type[BaseModel]
    fallback: FallbackBuilder
    temperature: Optional[float] = None  # None uses GeneratorSettings.default_temperature
    max_output_tokens: Optional[int] = None


@dataclass(frozen=True)
class ContentDefinition:
    """Definition of a content type: its stages, in execution order."""

    content_type: ContentType
    description: str
    stages: Tuple[GenerationStage, ...]


# Shared context block, formatted by the generator for every stage
STORY_CONTEXT_TEMPLATE = """SERIES: {series_title}
GENRE: {genre}
TONE: {tone}
PREMISE: {premise}
SETTING: {setting}
TARGET AUDIENCE: {target_audience}

CHARACTERS:
{characters}

PREVIOUS EPISODES:
{previous_episodes}

EPISODE NUMBER: {episode_number}
PREVIOUS CHOICE: {previous_choice}
EPISODE GOAL: {stage_goal}

CREATIVE DIRECTION:
- Tone: {tone_direction}
- Pacing: {pacing_direction}
- Dialogue: {dialogue_direction}

DIRECTOR NOTES: {director_notes}"""


# Beat sheet prompts
BEATS_SYSTEM = """You are a master story architect specializing in episode structure and narrative beats.

Your beat sheets are:
- FLEXIBLE: 3-6 beats based on narrative needs
- CINEMATIC: focused on visual storytelling and dramatic moments
- CHARACTER-DRIVEN: centered on character development and relationships
- COHERENT: continuous with the series and previous episodes

Output STRICT JSON ONLY - no markdown, no explanations."""

BEATS_USER_TEMPLATE = """{story_context}

Create the beat sheet for this episode. Return JSON with this shape:
{{
  "episodeNumber": {episode_number},
  "title": "...",
  "openingHook": "...",
  "beats": [
    {{"number": 1, "title": "...", "location": "...", "purpose": "...", "conflict": "...",
      "characterFocus": "...", "keyMoments": ["..."]}}
  ],
  "cliffhanger": "...",
  "theme": "..."
}}"""

# Episode prompts
EPISODE_SYSTEM = """You are an expert screenwriter for interactive episodic drama.

Expand the provided beat sheet into a complete episode:
- 2-5 scenes, each with vivid prose and natural dialogue that carries subtext
- Exactly 3 branching options at the end, one of them canonical
- Honour the creative direction and the director notes

Output STRICT JSON ONLY - no markdown, no explanations."""

EPISODE_USER_TEMPLATE = """{story_context}

BEAT SHEET:
{previous_payload}

Write the full episode. Return JSON with this shape:
{{
  "episodeNumber": {episode_number},
  "title": "...",
  "synopsis": "...",
  "scenes": [
    {{"sceneNumber": 1, "title": "...", "location": "...", "content": "...",
      "dialogue": [{{"character": "...", "line": "..."}}]}}
  ],
  "branchingOptions": [
    {{"id": 1, "text": "...", "description": "...", "isCanonical": true}}
  ],
  "episodeRundown": "..."
}}"""

# Storyboard prompts
SCENES_SYSTEM = """You are a script supervisor breaking an episode outline into shootable scenes.

List every scene with its location, a one-line summary and the characters present.
Output STRICT JSON ONLY - no markdown, no explanations."""

SCENES_USER_TEMPLATE = """{story_context}

BEAT SHEET:
{previous_payload}

Return JSON with this shape:
{{
  "scenes": [
    {{"sceneNumber": 1, "location": "...", "summary": "...", "characters": ["..."]}}
  ]
}}"""

STORYBOARD_SYSTEM = """You are a storyboard artist for episodic television.

For every scene plan 2-4 shots. Vary shot types (wide, medium, close-up, over-the-shoulder,
insert) and camera movement, and describe lighting, composition and key visual elements.
Output STRICT JSON ONLY - no markdown, no explanations."""

STORYBOARD_USER_TEMPLATE = """{story_context}

SCENE BREAKDOWN:
{previous_payload}

Return JSON with this shape:
{{
  "episodeNumber": {episode_number},
  "frames": [
    {{"sceneNumber": 1, "shotNumber": 1, "shotType": "...", "cameraMovement": "...",
      "description": "...", "visualElements": ["..."]}}
  ]
}}"""

# Casting prompts
CHARACTERS_SYSTEM = """You are a casting associate preparing a character breakdown.

List every speaking role the episode needs, starting with the series regulars.
Output STRICT JSON ONLY - no markdown, no explanations."""

CHARACTERS_USER_TEMPLATE = """{story_context}

Return JSON with this shape:
{{
  "roles": [
    {{"name": "...", "archetype": "...", "description": "..."}}
  ]
}}"""

CASTING_SYSTEM = """You are a casting director writing a casting sheet.

For every role give an age range, physical traits, performance notes that describe voice,
energy and emotional range, and two or three casting suggestions (actor types, not names).
Output STRICT JSON ONLY - no markdown, no explanations."""

CASTING_USER_TEMPLATE = """{story_context}

CHARACTER BREAKDOWN:
{previous_payload}

Return JSON with this shape:
{{
  "roles": [
    {{"characterName": "...", "ageRange": "...", "physicalTraits": "...",
      "performanceNotes": "...", "castingSuggestions": ["..."], "importance": "lead"}}
  ]
}}"""


DERIVE_BEATS = GenerationStage(
    name="derive_beats",
    system_prompt=BEATS_SYSTEM,
    prompt_template=BEATS_USER_TEMPLATE,
    output_schema=BeatSheet,
    fallback=fallbacks.fallback_beat_sheet,
    temperature=0.85,
    max_output_tokens=2000,
)

EXPAND_EPISODE = GenerationStage(
    name="expand_episode",
    system_prompt=EPISODE_SYSTEM,
    prompt_template=EPISODE_USER_TEMPLATE,
    output_schema=EpisodeScript,
    fallback=fallbacks.fallback_episode,
    temperature=0.9,
    max_output_tokens=8000,
)

BREAK_DOWN_SCENES = GenerationStage(
    name="break_down_scenes",
    system_prompt=SCENES_SYSTEM,
    prompt_template=SCENES_USER_TEMPLATE,
    output_schema=SceneBreakdown,
    fallback=fallbacks.fallback_scene_breakdown,
    temperature=0.7,
    max_output_tokens=3000,
)

COMPOSE_STORYBOARD = GenerationStage(
    name="compose_storyboard",
    system_prompt=STORYBOARD_SYSTEM,
    prompt_template=STORYBOARD_USER_TEMPLATE,
    output_schema=Storyboard,
    fallback=fallbacks.fallback_storyboard,
    temperature=0.8,
    max_output_tokens=4000,
)

BREAK_DOWN_CHARACTERS = GenerationStage(
    name="break_down_characters",
    system_prompt=CHARACTERS_SYSTEM,
    prompt_template=CHARACTERS_USER_TEMPLATE,
    output_schema=CharacterBreakdown,
    fallback=fallbacks.fallback_character_breakdown,
    temperature=0.6,
    max_output_tokens=2000,
)

COMPOSE_CASTING = GenerationStage(
    name="compose_casting",
    system_prompt=CASTING_SYSTEM,
    prompt_template=CASTING_USER_TEMPLATE,
    output_schema=CastingSheet,
    fallback=fallbacks.fallback_casting,
    temperature=0.7,
    max_output_tokens=3000,
)


# Registry mapping
CONTENT_REGISTRY: Dict[ContentType, ContentDefinition] = {
    ContentType.BEAT_SHEET: ContentDefinition(
        content_type=ContentType.BEAT_SHEET,
        description="Episode beat sheet",
        stages=(DERIVE_BEATS,),
    ),
    ContentType.EPISODE_SCRIPT: ContentDefinition(
        content_type=ContentType.EPISODE_SCRIPT,
        description="Full interactive episode expanded from a beat sheet",
        stages=(DERIVE_BEATS, EXPAND_EPISODE),
    ),
    ContentType.STORYBOARD: ContentDefinition(
        content_type=ContentType.STORYBOARD,
        description="Shot list built from a scene breakdown",
        stages=(DERIVE_BEATS, BREAK_DOWN_SCENES, COMPOSE_STORYBOARD),
    ),
    ContentType.CASTING_SHEET: ContentDefinition(
        content_type=ContentType.CASTING_SHEET,
        description="Casting requirements built from a character breakdown",
        stages=(BREAK_DOWN_CHARACTERS, COMPOSE_CASTING),
    ),
}


def get_content_definition(content_type: ContentType) -> ContentDefinition:
    """
    Get the content definition for a given content type.

    Args:
        content_type: The content type to look up

    Returns:
        ContentDefinition for the content type

    Raises:
        ValueError: If content type is not registered
    """
    if content_type not in CONTENT_REGISTRY:
        raise ValueError(
            f"Content type {content_type} is not registered. Available: {[ct.value for ct in CONTENT_REGISTRY]}"
        )
    return CONTENT_REGISTRY[content_type]
