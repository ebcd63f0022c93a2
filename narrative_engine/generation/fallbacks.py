"""
Deterministic default payloads substituted when a stage fails.

Every builder takes (context, previous_payload) and only reads from them, so
the same inputs always produce the same default.
"""

from typing import Optional, Tuple

from pydantic import BaseModel

from narrative_engine.generation.models import (
    Beat,
    BeatSheet,
    BranchingOption,
    CastingRole,
    CastingSheet,
    CharacterBreakdown,
    EpisodeScript,
    Frame,
    GenerationContext,
    Role,
    Scene,
    SceneBreakdown,
    SceneOutline,
    Storyboard,
)

DEFAULT_BRANCHING_OPTIONS: Tuple[BranchingOption, ...] = (
    BranchingOption(
        id=1,
        text="Continue the story",
        description="Follow the natural progression of events",
        is_canonical=True,
    ),
    BranchingOption(
        id=2,
        text="Explore alternative path",
        description="Take a different approach to the situation",
    ),
    BranchingOption(
        id=3,
        text="Focus on character development",
        description="Dive deeper into character relationships",
    ),
)


def _location(context: GenerationContext) -> str:
    return context.story.setting or "Primary location"


def fallback_beat_sheet(context: GenerationContext, previous: Optional[BaseModel] = None) -> BeatSheet:
    """Three-beat outline centred on the main character and the stage goal."""
    hero = context.main_character_name
    goal = context.stage_goal
    location = _location(context)
    beats = (
        Beat(
            number=1,
            title="Opening",
            location=location,
            purpose=f"Establish {hero}'s situation and the episode goal: {goal}",
            conflict="The status quo is disrupted",
            character_focus=hero,
            key_moments=(f"{hero} recognises what is at stake",),
        ),
        Beat(
            number=2,
            title="Rising Action",
            location=location,
            purpose=f"{hero} works toward the goal and meets resistance",
            conflict=f"Obstacles stand between {hero} and the goal",
            character_focus=hero,
            key_moments=(f"{hero} takes action", "The obstacle pushes back"),
        ),
        Beat(
            number=3,
            title="Resolution",
            location=location,
            purpose=f"{hero} confronts the central challenge and the episode resolves",
            conflict="The central conflict comes to a head",
            character_focus=hero,
            key_moments=(f"{hero} makes a decisive choice",),
        ),
    )
    return BeatSheet(
        episode_number=context.episode_number,
        title=f"Episode {context.episode_number}",
        opening_hook=f"{hero} is pulled into a new challenge: {goal}",
        beats=beats,
        cliffhanger=f"A new complication leaves {hero} facing a difficult choice.",
        theme=context.story.premise,
    )


def _beat_text(context: GenerationContext, previous: Optional[BaseModel]) -> str:
    if isinstance(previous, BeatSheet):
        return "\n".join(
            f"Beat {beat.number}: {beat.title} - {beat.purpose}".rstrip(" -") for beat in previous.beats
        )
    return context.stage_goal


def fallback_episode(context: GenerationContext, previous: Optional[BaseModel] = None) -> EpisodeScript:
    """One placeholder scene carrying the beat text plus the three default choices."""
    title = previous.title if isinstance(previous, BeatSheet) else f"Episode {context.episode_number}"
    rundown = "Episode assembled from the beat sheet without a full draft."
    if context.director_notes:
        rundown += f" Director notes: {context.director_notes}"
    return EpisodeScript(
        episode_number=context.episode_number,
        title=title,
        synopsis=context.stage_goal,
        scenes=(
            Scene(
                scene_number=1,
                title=title,
                location=_location(context),
                content=_beat_text(context, previous),
            ),
        ),
        branching_options=DEFAULT_BRANCHING_OPTIONS,
        episode_rundown=rundown,
    )


def fallback_scene_breakdown(context: GenerationContext, previous: Optional[BaseModel] = None) -> SceneBreakdown:
    """One scene per beat of the previous beat sheet, at least one scene."""
    if isinstance(previous, BeatSheet):
        scenes = tuple(
            SceneOutline(
                scene_number=index,
                location=beat.location or _location(context),
                summary=beat.purpose or beat.title,
                characters=(beat.character_focus,) if beat.character_focus else (),
            )
            for index, beat in enumerate(previous.beats, 1)
        )
    else:
        scenes = ()
    if not scenes:
        scenes = (
            SceneOutline(
                scene_number=1,
                location=_location(context),
                summary=context.stage_goal,
                characters=(context.main_character_name,),
            ),
        )
    return SceneBreakdown(scenes=scenes)


def fallback_storyboard(context: GenerationContext, previous: Optional[BaseModel] = None) -> Storyboard:
    """One wide establishing frame per scene."""
    breakdown = previous if isinstance(previous, SceneBreakdown) else fallback_scene_breakdown(context)
    frames = tuple(
        Frame(
            scene_number=scene.scene_number,
            shot_number=1,
            shot_type="Wide establishing shot",
            camera_movement="Static",
            description=f"Establish {scene.location}: {scene.summary}",
            visual_elements=(scene.location,) + scene.characters,
        )
        for scene in breakdown.scenes
    )
    return Storyboard(episode_number=context.episode_number, frames=frames)


def fallback_character_breakdown(
    context: GenerationContext, previous: Optional[BaseModel] = None
) -> CharacterBreakdown:
    """One role per known character, or a single protagonist."""
    roles = tuple(
        Role(name=c.name, archetype=c.archetype, description=c.description)
        for c in context.story.main_characters
    )
    if not roles:
        roles = (Role(name="Protagonist", archetype="Lead", description=context.stage_goal),)
    return CharacterBreakdown(roles=roles)


def fallback_casting(context: GenerationContext, previous: Optional[BaseModel] = None) -> CastingSheet:
    """One casting role per breakdown role; the first role is the lead."""
    breakdown = (
        previous if isinstance(previous, CharacterBreakdown) else fallback_character_breakdown(context)
    )
    roles = tuple(
        CastingRole(
            character_name=role.name,
            performance_notes=role.description or role.archetype,
            importance="lead" if index == 0 else "supporting",
        )
        for index, role in enumerate(breakdown.roles)
    )
    return CastingSheet(roles=roles)
