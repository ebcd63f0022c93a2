"""
Data models for the generation pipeline.

Story input, the derived GenerationContext, one payload shape per stage
kind, and the GenerationResult handed back to callers.
"""

import json
import time
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from narrative_engine.core.enums import ContentType


class _Frozen(BaseModel):
    """Immutable model that also accepts camelCase keys from collaborator JSON."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# --- Story input ---

class Character(_Frozen):
    """A main character from the story bible."""

    name: str
    archetype: str = ""
    description: str = ""
    voice: str = ""


class PreviousEpisode(_Frozen):
    """Summary of an already generated episode."""

    episode_number: int
    title: str = ""
    synopsis: str = ""
    chosen_option: Optional[str] = None


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _as_text(value: Any, *nested_keys: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in nested_keys:
            if isinstance(value.get(key), str) and value[key]:
                return value[key]
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class StoryDocument(_Frozen):
    """
    Read-only story state supplied by the story context provider.

    The engine never mutates it; use from_raw to accept the loose story bible
    dictionaries the surrounding application stores.
    """

    series_title: str = "Untitled Series"
    genre: Tuple[str, ...] = ()
    tone: str = ""
    premise: str = ""
    main_characters: Tuple[Character, ...] = ()
    setting: str = ""
    target_audience: str = ""
    previous_episodes: Tuple[PreviousEpisode, ...] = ()

    @property
    def main_character(self) -> Optional[Character]:
        return self.main_characters[0] if self.main_characters else None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "StoryDocument":
        """
        Build a StoryDocument from a camelCase or snake_case story bible dict.

        Premise, setting and target audience may be strings or nested objects;
        genre may be a string (comma separated) or a list.
        """
        genre = _first(raw, "genre", "genres") or ()
        if isinstance(genre, str):
            genre = tuple(g.strip() for g in genre.split(",") if g.strip())
        else:
            genre = tuple(str(g) for g in genre)

        characters = []
        for entry in _first(raw, "mainCharacters", "main_characters", "characters") or ():
            if isinstance(entry, str):
                characters.append(Character(name=entry))
            elif isinstance(entry, dict):
                characters.append(
                    Character(
                        name=entry.get("name") or "Unnamed Character",
                        archetype=_as_text(_first(entry, "archetype", "premiseRole", "role")),
                        description=_as_text(entry.get("description")),
                        voice=_as_text(entry.get("voice")),
                    )
                )

        setting = _first(raw, "setting")
        if setting is None:
            world = _first(raw, "worldBuilding", "world_building")
            setting = world.get("setting") if isinstance(world, dict) else world

        episodes = []
        for index, entry in enumerate(_first(raw, "previousEpisodes", "previous_episodes") or (), 1):
            if isinstance(entry, dict):
                choice = _first(entry, "chosenOption", "chosen_option", "choice")
                episodes.append(
                    PreviousEpisode(
                        episode_number=_first(entry, "episodeNumber", "episode_number") or index,
                        title=_as_text(entry.get("title")),
                        synopsis=_as_text(_first(entry, "synopsis", "summary")),
                        chosen_option=_as_text(choice, "text") if choice is not None else None,
                    )
                )

        return cls(
            series_title=_as_text(_first(raw, "seriesTitle", "series_title", "title")) or "Untitled Series",
            genre=genre,
            tone=_as_text(raw.get("tone")),
            premise=_as_text(raw.get("premise"), "premiseStatement", "premise_statement", "theme"),
            main_characters=tuple(characters),
            setting=_as_text(setting),
            target_audience=_as_text(
                _first(raw, "targetAudience", "target_audience"), "primary", "primaryAudience"
            ),
            previous_episodes=tuple(episodes),
        )


class VibeSettings(_Frozen):
    """User supplied vibe sliders, each on a 0-100 scale."""

    tone: float = Field(50.0, ge=0.0, le=100.0, description="0 = dark/gritty, 100 = light/comedic")
    pacing: float = Field(50.0, ge=0.0, le=100.0, description="0 = slow burn, 100 = high octane")
    dialogue_style: float = Field(
        50.0, ge=0.0, le=100.0, description="0 = sparse/subtextual, 100 = snappy/expository"
    )


class GenerationParameters(_Frozen):
    """Bounded parameters derived by the context analyzer."""

    tone: float = Field(..., ge=0.0, le=100.0)
    pacing: float = Field(..., ge=0.0, le=100.0)
    dialogue_style: float = Field(..., ge=0.0, le=100.0)
    tone_direction: str
    pacing_direction: str
    dialogue_direction: str


class GenerationContext(_Frozen):
    """Immutable input for one generation request."""

    story: StoryDocument
    content_type: ContentType
    episode_number: int = Field(1, ge=1)
    previous_choice: Optional[str] = None
    previous_episode_summaries: Tuple[str, ...] = ()
    parameters: GenerationParameters
    stage_goal: str
    goal_from_fallback: bool = False
    director_notes: str = ""

    @property
    def main_character_name(self) -> str:
        character = self.story.main_character
        return character.name if character else "the protagonist"


# --- Stage payloads ---

class Beat(_Frozen):
    number: int
    title: str = ""
    location: str = ""
    purpose: str = ""
    conflict: str = ""
    character_focus: str = ""
    key_moments: Tuple[str, ...] = ()


class BeatSheet(_Frozen):
    """Structural outline of one episode."""

    kind: Literal["beat_sheet"] = "beat_sheet"
    episode_number: int = 1
    title: str
    opening_hook: str
    beats: Tuple[Beat, ...] = Field(..., min_length=1)
    cliffhanger: str
    theme: str = ""


class DialogueLine(_Frozen):
    character: str
    line: str


class Scene(_Frozen):
    scene_number: int
    title: str = ""
    location: str = ""
    content: str = ""
    dialogue: Tuple[DialogueLine, ...] = ()


class BranchingOption(_Frozen):
    id: int
    text: str
    description: str = ""
    is_canonical: bool = False


class EpisodeScript(_Frozen):
    """A full interactive episode with branching choices."""

    kind: Literal["episode_script"] = "episode_script"
    episode_number: int
    title: str
    synopsis: str = ""
    scenes: Tuple[Scene, ...] = Field(..., min_length=1)
    branching_options: Tuple[BranchingOption, ...] = Field(..., min_length=1)
    episode_rundown: str = ""


class SceneOutline(_Frozen):
    scene_number: int
    location: str = ""
    summary: str = ""
    characters: Tuple[str, ...] = ()


class SceneBreakdown(_Frozen):
    """Intermediate scene list feeding the storyboard stage."""

    kind: Literal["scene_breakdown"] = "scene_breakdown"
    scenes: Tuple[SceneOutline, ...] = Field(..., min_length=1)


class Frame(_Frozen):
    scene_number: int
    shot_number: int
    shot_type: str = ""
    camera_movement: str = ""
    description: str = ""
    visual_elements: Tuple[str, ...] = ()


class Storyboard(_Frozen):
    """Shot by shot visual plan for an episode."""

    kind: Literal["storyboard"] = "storyboard"
    episode_number: int
    frames: Tuple[Frame, ...] = Field(..., min_length=1)


class Role(_Frozen):
    name: str
    archetype: str = ""
    description: str = ""


class CharacterBreakdown(_Frozen):
    """Intermediate role list feeding the casting stage."""

    kind: Literal["character_breakdown"] = "character_breakdown"
    roles: Tuple[Role, ...] = Field(..., min_length=1)


class CastingRole(_Frozen):
    character_name: str
    age_range: str = ""
    physical_traits: str = ""
    performance_notes: str = ""
    casting_suggestions: Tuple[str, ...] = ()
    importance: str = "supporting"


class CastingSheet(_Frozen):
    """Casting requirements per role."""

    kind: Literal["casting_sheet"] = "casting_sheet"
    roles: Tuple[CastingRole, ...] = Field(..., min_length=1)


StagePayload = Annotated[
    Union[BeatSheet, EpisodeScript, SceneBreakdown, Storyboard, CharacterBreakdown, CastingSheet],
    Field(discriminator="kind"),
]

PAYLOAD_MODELS: Dict[ContentType, Type[BaseModel]] = {
    ContentType.BEAT_SHEET: BeatSheet,
    ContentType.EPISODE_SCRIPT: EpisodeScript,
    ContentType.SCENE_BREAKDOWN: SceneBreakdown,
    ContentType.STORYBOARD: Storyboard,
    ContentType.CHARACTER_BREAKDOWN: CharacterBreakdown,
    ContentType.CASTING_SHEET: CastingSheet,
}


def payload_content_type(payload: BaseModel) -> ContentType:
    """Content type tag of a stage payload."""
    return ContentType(payload.kind)


# --- Results ---

def _generation_id() -> str:
    return str(int(time.time())) + "_" + uuid.uuid4().hex[:8]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StageRecord(_Frozen):
    """What happened while running one stage."""

    name: str
    used_fallback: bool
    failure_reason: Optional[str] = None
    parse_strategy: Optional[str] = None
    repaired_fields: Tuple[str, ...] = ()
    duration_ms: float = 0.0


class GenerationMetadata(_Frozen):
    generation_id: str = Field(default_factory=_generation_id)
    created_at: datetime = Field(default_factory=_utcnow)
    model: str
    fallback_stages: Tuple[str, ...] = ()
    stages: Tuple[StageRecord, ...] = ()


class GenerationResult(_Frozen):
    """Result of a staged generation run. Owned by the caller once returned."""

    content_type: ContentType
    payload: StagePayload
    stage_payloads: Dict[str, StagePayload]
    metadata: GenerationMetadata
    context: GenerationContext

    @property
    def fallback_used(self) -> bool:
        return bool(self.metadata.fallback_stages)

    def used_fallback(self, stage_name: str) -> bool:
        """Whether the named stage was replaced by its deterministic default."""
        return stage_name in self.metadata.fallback_stages

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-serializable dictionary."""
        return self.model_dump(mode="json")
