"""
Pytest configuration and fixtures for narrative engine tests.

This module provides:
- Network blocking fixture to prevent accidental API calls
- A scripted collaborator standing in for real LLM providers
- Common story, context and payload fixtures
"""

import asyncio
import json
import socket
from typing import Any, List, Optional, Tuple
from unittest.mock import patch

import pytest

from narrative_engine.core.enums import ContentType
from narrative_engine.core.llm import GenerationOptions
from narrative_engine.generation.context_analyzer import DIALOGUE_DIRECTIONS, PACING_DIRECTIONS, TONE_DIRECTIONS
from narrative_engine.generation.models import (
    Beat,
    BeatSheet,
    BranchingOption,
    CastingRole,
    CastingSheet,
    Character,
    DialogueLine,
    EpisodeScript,
    Frame,
    GenerationContext,
    GenerationParameters,
    Scene,
    StoryDocument,
    Storyboard,
)


class NetworkBlockedError(Exception):
    """Raised when a test attempts to make a network connection."""
    pass


def _block_socket_connect(*args, **kwargs):
    raise NetworkBlockedError(
        "Network access is blocked in unit tests. Use ScriptedProvider instead of a real collaborator."
    )


@pytest.fixture(autouse=True)
def block_network():
    """Automatically block all network connections in tests."""
    with patch.object(socket.socket, "connect", _block_socket_connect):
        with patch.object(socket, "create_connection", _block_socket_connect):
            yield


class ScriptedProvider:
    """
    Fake collaborator that replays queued replies in order.

    A queued exception is raised instead of returned, and a queued coroutine
    function is awaited with (prompt, options). Once the queue is empty the
    default reply is used.
    """

    def __init__(self, replies: Optional[List[Any]] = None, default: Any = None):
        self.replies = list(replies or [])
        self.default = default
        self.calls: List[Tuple[str, GenerationOptions]] = []

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        self.calls.append((prompt, options))
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return await reply(prompt, options)
        return reply

    @property
    def prompts(self) -> List[str]:
        return [prompt for prompt, _ in self.calls]


async def hang(prompt, options):
    """Reply that never arrives in time."""
    await asyncio.sleep(10)
    return "too late"


@pytest.fixture
def story() -> StoryDocument:
    return StoryDocument(
        series_title="Harbor Lights",
        genre=("Mystery", "Drama"),
        tone="Brooding",
        premise="A disgraced detective returns to her fishing town to find her missing brother",
        main_characters=(
            Character(name="Mara Quinn", archetype="Detective", description="Stubborn, guilt-ridden"),
            Character(name="Eli Quinn", archetype="Missing brother", description="Charming and reckless"),
        ),
        setting="Port Wren, a fog-bound fishing town",
        target_audience="Adults 25-45",
    )


@pytest.fixture
def parameters() -> GenerationParameters:
    return GenerationParameters(
        tone=30.0,
        pacing=50.0,
        dialogue_style=50.0,
        tone_direction=TONE_DIRECTIONS[1],
        pacing_direction=PACING_DIRECTIONS[2],
        dialogue_direction=DIALOGUE_DIRECTIONS[2],
    )


@pytest.fixture
def make_context(story, parameters):
    def _make(content_type: ContentType = ContentType.EPISODE_SCRIPT, **overrides) -> GenerationContext:
        fields = dict(
            story=story,
            content_type=content_type,
            episode_number=2,
            previous_choice="Search the lighthouse",
            parameters=parameters,
            stage_goal="Mara searches the lighthouse for Eli while the storm closes in.",
        )
        fields.update(overrides)
        return GenerationContext(**fields)

    return _make


@pytest.fixture
def context(make_context) -> GenerationContext:
    return make_context()


@pytest.fixture
def beat_sheet() -> BeatSheet:
    return BeatSheet(
        episode_number=2,
        title="The Lighthouse",
        opening_hook="Mara finds Eli's boat drifting empty, a secret map taped beneath the seat.",
        beats=(
            Beat(
                number=1,
                title="Empty Boat",
                location="Harbor",
                purpose="Mara's goal becomes urgent",
                conflict="The harbor master refuses to help",
                character_focus="Mara Quinn",
                key_moments=("Mara finds the map",),
            ),
            Beat(
                number=2,
                title="The Climb",
                location="Lighthouse",
                purpose="Tension builds as the storm hits",
                conflict="A stranger blocks the stairs",
                character_focus="Mara Quinn",
                key_moments=("Confrontation on the stairs",),
            ),
            Beat(
                number=3,
                title="The Lamp Room",
                location="Lamp room",
                purpose="Reveal Eli's hidden truth",
                conflict="Mara must choose between the law and her brother",
                character_focus="Eli Quinn",
                key_moments=("Eli's message is revealed",),
            ),
        ),
        cliffhanger="Eli's voice crackles over the radio: 'Don't trust the harbor master.' Then silence.",
        theme="Family loyalty against the truth",
    )


@pytest.fixture
def episode() -> EpisodeScript:
    return EpisodeScript(
        episode_number=2,
        title="The Lighthouse",
        synopsis="Mara follows Eli's map to the lighthouse.",
        scenes=(
            Scene(
                scene_number=1,
                title="Harbor",
                location="Port Wren harbor",
                content="Mara Quinn stands over the empty boat. Tension builds as the fog rolls in.",
                dialogue=(
                    DialogueLine(character="Mara Quinn", line="Where did you go, Eli... what were you hiding?"),
                    DialogueLine(character="Harbor Master", line="Some things in this town stay buried, detective."),
                ),
            ),
            Scene(
                scene_number=2,
                title="Lighthouse",
                location="Lighthouse stairs",
                content="Eli Quinn's message waits at the top. The confrontation escalates.",
                dialogue=(
                    DialogueLine(character="Eli Quinn", line="I never wanted you to find out like this, Mara."),
                ),
            ),
        ),
        branching_options=(
            BranchingOption(id=1, text="Trust Eli", is_canonical=True),
            BranchingOption(id=2, text="Call the police"),
            BranchingOption(id=3, text="Confront the harbor master"),
        ),
        episode_rundown="Mara learns Eli is alive but in danger.",
    )


@pytest.fixture
def storyboard() -> Storyboard:
    return Storyboard(
        episode_number=2,
        frames=(
            Frame(scene_number=1, shot_number=1, shot_type="Wide", camera_movement="Static",
                  description="Fog over the harbor", visual_elements=("boat",)),
            Frame(scene_number=1, shot_number=2, shot_type="Close-up", camera_movement="Push in",
                  description="Mara's face in lantern light", visual_elements=("lantern",)),
            Frame(scene_number=2, shot_number=1, shot_type="Low angle", camera_movement="Tilt",
                  description="The lighthouse looming", visual_elements=("lighthouse",)),
        ),
    )


@pytest.fixture
def casting_sheet() -> CastingSheet:
    return CastingSheet(
        roles=(
            CastingRole(character_name="Mara Quinn", age_range="35-45", physical_traits="Weathered",
                        performance_notes="Contained grief that breaks through in anger",
                        casting_suggestions=("Grounded dramatic lead",), importance="lead"),
            CastingRole(character_name="Eli Quinn", age_range="25-35", physical_traits="Wiry",
                        performance_notes="Charm masking fear", importance="supporting"),
        ),
    )


def as_json(payload) -> str:
    """Serialize a payload the way a collaborator would reply (camelCase keys)."""
    return json.dumps(payload.model_dump(mode="json", by_alias=True))
