"""
Tests for the NarrativeEngine facade.
"""

import pytest

from conftest import ScriptedProvider, as_json
from narrative_engine import EngineConfig, NarrativeEngine
from narrative_engine.core.config import GeneratorSettings, ValidatorSettings
from narrative_engine.core.enums import ContentType
from narrative_engine.core.llm import GeminiProvider
from narrative_engine.generation.models import BeatSheet, EpisodeScript

GOAL = "Mara must reach the lighthouse before the harbor master destroys Eli's evidence."


@pytest.fixture
def config():
    return EngineConfig.default(generator=GeneratorSettings(timeout_seconds=0.05))


class TestEngineInit:

    def test_requires_model_or_provider(self):
        with pytest.raises(ValueError, match="Must specify"):
            NarrativeEngine()

    def test_rejects_model_and_provider(self):
        with pytest.raises(ValueError, match="Cannot specify both"):
            NarrativeEngine(model="gpt-4.1", provider=ScriptedProvider())

    def test_model_selects_provider(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-gemini")
        engine = NarrativeEngine(model="gemini-2.5-flash")

        assert isinstance(engine.provider, GeminiProvider)
        assert engine.config.generator.model == "gemini-2.5-flash"
        assert engine.analyzer.model == "gemini-2.5-flash"

    def test_default_config(self):
        config = EngineConfig.default()

        assert len(config.benchmarks) == 16
        assert config.validator == ValidatorSettings()
        assert "dialogue" in config.assessors.keys()


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_and_validate(self, config, story, beat_sheet, episode):
        provider = ScriptedProvider([GOAL, as_json(beat_sheet), as_json(episode)])
        engine = NarrativeEngine(config, provider=provider)

        result = await engine.create(story, ContentType.EPISODE_SCRIPT, episode_number=2)

        assert isinstance(result.payload, EpisodeScript)
        assert result.context.stage_goal == GOAL
        assert result.fallback_stages == ()
        assert 0.0 <= result.overall_score <= 1.0
        assert result.validation.content_type == ContentType.EPISODE_SCRIPT
        assert len(engine.history) == 1
        assert len(provider.calls) == 3

    @pytest.mark.asyncio
    async def test_raw_story_dict(self, config, beat_sheet):
        provider = ScriptedProvider([GOAL, as_json(beat_sheet)])
        engine = NarrativeEngine(config, provider=provider)

        result = await engine.create(
            {"seriesTitle": "Harbor Lights", "genre": ["Mystery"], "mainCharacters": [{"name": "Mara Quinn"}]},
            ContentType.BEAT_SHEET,
            validate=False,
        )

        assert isinstance(result.payload, BeatSheet)
        assert result.validation is None
        assert result.overall_score is None
        assert "Harbor Lights" in provider.prompts[1]

    @pytest.mark.asyncio
    async def test_collaborator_down_still_produces_artifact(self, config, story):
        engine = NarrativeEngine(config, provider=ScriptedProvider(default=""))

        result = await engine.create(story, ContentType.STORYBOARD)

        assert result.context.goal_from_fallback is True
        assert result.fallback_stages == ("derive_beats", "break_down_scenes", "compose_storyboard")
        assert result.validation is not None

    @pytest.mark.asyncio
    async def test_connection_reset_still_produces_artifact(self, config, story):
        engine = NarrativeEngine(config, provider=ScriptedProvider(default=ConnectionResetError("reset")))

        result = await engine.create(story, ContentType.BEAT_SHEET)

        assert isinstance(result.payload, BeatSheet)
        assert result.context.goal_from_fallback is True
        assert result.fallback_stages == ("derive_beats",)

    @pytest.mark.asyncio
    async def test_validation_failure_keeps_generation(self, config, story, beat_sheet):
        engine = NarrativeEngine(config, provider=ScriptedProvider([GOAL, as_json(beat_sheet)]))
        engine.validator.dimensions = {}

        result = await engine.create(story, ContentType.BEAT_SHEET)

        assert result.payload.title == "The Lighthouse"
        assert result.validation.metadata.fallback is True
        assert result.overall_score == 0.6

    @pytest.mark.asyncio
    async def test_to_dict(self, config, story):
        engine = NarrativeEngine(config, provider=ScriptedProvider(default=""))
        data = (await engine.create(story, ContentType.CASTING_SHEET)).to_dict()

        assert data["generation"]["content_type"] == "casting_sheet"
        assert data["validation"]["content_type"] == "casting_sheet"


class TestValidateAndCompare:

    @pytest.mark.asyncio
    async def test_validate_existing_artifact(self, config, storyboard, context):
        engine = NarrativeEngine(config, provider=ScriptedProvider())
        result = await engine.validate(storyboard, context=context)

        assert result.content_type == ContentType.STORYBOARD
        assert set(result.dimension_scores) == {"shot_variety", "visual_detail", "scene_coverage", "formatting_compliance"}

    @pytest.mark.asyncio
    async def test_compare_variants(self, config, casting_sheet, context):
        engine = NarrativeEngine(config, provider=ScriptedProvider())
        thin = casting_sheet.model_copy(
            update={"roles": tuple(r.model_copy(update={"performance_notes": "", "age_range": ""})
                                   for r in casting_sheet.roles)}
        )

        result = await engine.compare_variants(thin, casting_sheet, ContentType.CASTING_SHEET, context)

        assert result.enhanced_score > result.original_score
        assert result.preferred_version == "enhanced"
        assert result.significance_method == "fixed_threshold_heuristic"
