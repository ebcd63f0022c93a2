"""
Tests for the context analyzer and story document loading.
"""

import pytest

from conftest import ScriptedProvider, hang
from narrative_engine.core.config import AnalyzerSettings
from narrative_engine.core.enums import ContentType
from narrative_engine.core.errors import GenerationError
from narrative_engine.generation.context_analyzer import (
    PACING_DIRECTIONS,
    TONE_DIRECTIONS,
    ContextAnalyzer,
    direction_for,
    heuristic_goal,
    heuristic_vibe,
)
from narrative_engine.generation.models import StoryDocument, VibeSettings

FAST = AnalyzerSettings(timeout_seconds=0.05)
GOAL = "Mara must reach the lighthouse before the harbor master destroys Eli's evidence."


class TestDirections:

    @pytest.mark.parametrize(
        "value,band",
        [(0, 0), (19.9, 0), (20, 1), (39, 1), (40, 2), (59, 2), (60, 3), (79, 3), (80, 4), (100, 4)],
    )
    def test_five_bands(self, value, band):
        assert direction_for(value, TONE_DIRECTIONS) == TONE_DIRECTIONS[band]

    def test_genre_heuristics(self):
        thriller = heuristic_vibe(StoryDocument(genre=("Thriller",)))
        comedy = heuristic_vibe(StoryDocument(genre=("Romantic Comedy",)))

        assert thriller.tone < 50 < thriller.pacing
        assert comedy.tone > 50
        assert heuristic_vibe(StoryDocument()) == VibeSettings()

    def test_heuristic_vibe_is_clamped(self):
        vibe = heuristic_vibe(StoryDocument(genre=("Horror", "Thriller", "Noir", "Crime")))

        assert vibe.tone == 0.0

    def test_heuristic_goal(self, story):
        assert heuristic_goal(story, "Follow the stranger.") == (
            "Mara Quinn deals with the consequences of choosing to follow the stranger."
        )
        assert heuristic_goal(StoryDocument(), None) == "The protagonist faces a challenge that tests who they are."


class TestContextAnalyzer:

    @pytest.mark.asyncio
    async def test_goal_from_collaborator(self, story):
        provider = ScriptedProvider([f'  "{GOAL}"\n'])
        context = await ContextAnalyzer(provider, "gemini-2.5-pro", FAST).analyze(
            story, ContentType.EPISODE_SCRIPT, episode_number=2, previous_choice="Search the lighthouse"
        )

        assert context.stage_goal == GOAL
        assert context.goal_from_fallback is False
        assert len(provider.calls) == 1
        assert provider.calls[0][1].model == "gemini-2.5-pro"
        assert "Search the lighthouse" in provider.prompts[0]

    @pytest.mark.asyncio
    async def test_vibe_sliders_map_to_directions(self, story):
        provider = ScriptedProvider([GOAL])
        context = await ContextAnalyzer(provider, "m", FAST).analyze(
            story, ContentType.BEAT_SHEET, vibe=VibeSettings(tone=10, pacing=90, dialogue_style=50)
        )

        assert context.parameters.tone == 10
        assert context.parameters.tone_direction == TONE_DIRECTIONS[0]
        assert context.parameters.pacing_direction == PACING_DIRECTIONS[4]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [hang, GenerationError("boom", GenerationError.TRANSPORT), ConnectionResetError("reset"), "", "x" * 500],
    )
    async def test_goal_falls_back(self, story, reply):
        provider = ScriptedProvider([reply])
        context = await ContextAnalyzer(provider, "m", FAST).analyze(story, ContentType.EPISODE_SCRIPT)

        assert context.goal_from_fallback is True
        assert context.stage_goal == heuristic_goal(story, None)

    @pytest.mark.asyncio
    async def test_story_is_not_mutated(self, story):
        before = story.model_dump()
        await ContextAnalyzer(ScriptedProvider([GOAL]), "m", FAST).analyze(story, ContentType.STORYBOARD)

        assert story.model_dump() == before

    @pytest.mark.asyncio
    async def test_previous_episode_summaries(self):
        story = StoryDocument.from_raw(
            {
                "title": "Harbor Lights",
                "previousEpisodes": [
                    {"episodeNumber": 1, "title": "Fog", "synopsis": "Mara comes home.", "chosenOption": {"text": "Stay"}},
                ],
            }
        )
        context = await ContextAnalyzer(ScriptedProvider([GOAL]), "m", FAST).analyze(story, ContentType.BEAT_SHEET)

        assert context.previous_episode_summaries == ("Episode 1: Fog - Mara comes home. (chosen: Stay)",)


class TestStoryDocument:

    def test_from_raw_camel_case(self):
        story = StoryDocument.from_raw(
            {
                "seriesTitle": "Harbor Lights",
                "genre": "Mystery, Drama",
                "premise": {"premiseStatement": "A detective comes home"},
                "mainCharacters": [{"name": "Mara Quinn", "premiseRole": "Detective"}, "Eli Quinn"],
                "worldBuilding": {"setting": "Port Wren"},
                "targetAudience": {"primary": "Adults"},
            }
        )

        assert story.series_title == "Harbor Lights"
        assert story.genre == ("Mystery", "Drama")
        assert story.premise == "A detective comes home"
        assert [c.name for c in story.main_characters] == ["Mara Quinn", "Eli Quinn"]
        assert story.main_character.archetype == "Detective"
        assert story.setting == "Port Wren"
        assert story.target_audience == "Adults"

    def test_from_raw_empty(self):
        story = StoryDocument.from_raw({})

        assert story.series_title == "Untitled Series"
        assert story.main_character is None
