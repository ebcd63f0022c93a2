"""
Tests for the structured result parser.
"""

import json

import pytest

from conftest import as_json
from narrative_engine.generation.fallbacks import fallback_beat_sheet
from narrative_engine.generation.models import BeatSheet, EpisodeScript
from narrative_engine.generation.parser import (
    STRATEGY_BRACE_SPAN,
    STRATEGY_DIRECT,
    STRATEGY_FALLBACK,
    STRATEGY_FENCED_BLOCK,
    StructuredResultParser,
)


@pytest.fixture
def parser():
    return StructuredResultParser()


@pytest.fixture
def default(context):
    calls = []

    def _factory():
        calls.append(1)
        return fallback_beat_sheet(context)

    _factory.calls = calls
    return _factory


class TestExtraction:
    """First successful strategy wins."""

    def test_direct_json(self, parser, default, beat_sheet):
        outcome = parser.parse(as_json(beat_sheet), BeatSheet, default)

        assert outcome.strategy == STRATEGY_DIRECT
        assert outcome.used_fallback is False
        assert outcome.payload == beat_sheet
        assert default.calls == []

    def test_fenced_block(self, parser, default, beat_sheet):
        raw = f"Here is the beat sheet:\n```json\n{as_json(beat_sheet)}\n```\nLet me know!"
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.strategy == STRATEGY_FENCED_BLOCK
        assert outcome.payload.title == "The Lighthouse"

    def test_brace_span(self, parser, default, beat_sheet):
        raw = f"Sure. {as_json(beat_sheet)} Hope that helps."
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.strategy == STRATEGY_BRACE_SPAN
        assert len(outcome.payload.beats) == 3

    def test_trailing_commas_are_tolerated(self, parser, default):
        raw = '{"title": "T", "openingHook": "H", "beats": [{"number": 1, "title": "B"},], "cliffhanger": "C",}'
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.used_fallback is False
        assert outcome.payload.beats[0].title == "B"

    def test_snake_case_keys_accepted(self, parser, default):
        raw = json.dumps(
            {"title": "T", "opening_hook": "H", "beats": [{"number": 1}], "cliffhanger": "C"}
        )
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.payload.opening_hook == "H"

    def test_kind_forced_to_expected_shape(self, parser, default, beat_sheet):
        data = beat_sheet.model_dump(mode="json", by_alias=True)
        data["kind"] = "storyboard"
        outcome = parser.parse(json.dumps(data), BeatSheet, default)

        assert outcome.used_fallback is False
        assert outcome.payload.kind == "beat_sheet"


class TestRepair:
    """Missing required fields are filled from the default payload."""

    def test_missing_cliffhanger_repaired(self, parser, default, context):
        raw = json.dumps({"title": "T", "openingHook": "H", "beats": [{"number": 1, "title": "B"}]})
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.used_fallback is False
        assert outcome.repaired_fields == ("cliffhanger",)
        assert outcome.payload.cliffhanger == fallback_beat_sheet(context).cliffhanger

    def test_empty_beats_repaired(self, parser, default):
        raw = json.dumps({"title": "T", "openingHook": "H", "beats": [], "cliffhanger": "C"})
        outcome = parser.parse(raw, BeatSheet, default)

        assert "beats" in outcome.repaired_fields
        assert len(outcome.payload.beats) == 3

    def test_default_built_once(self, parser, default):
        raw = json.dumps({"beats": [{"number": 1}]})
        parser.parse(raw, BeatSheet, default)

        assert len(default.calls) == 1


class TestFallback:
    """Unusable text yields the deterministic default, never an exception."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "I'm sorry, I can't help with that.", "[1, 2, 3]"])
    def test_unusable_text(self, parser, default, context, raw):
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.used_fallback is True
        assert outcome.strategy == STRATEGY_FALLBACK
        assert outcome.payload == fallback_beat_sheet(context)
        assert outcome.error

    def test_deeply_nested_reply(self, parser, default):
        raw = "[" * 200000 + "]" * 200000
        outcome = parser.parse(raw, BeatSheet, default)

        assert outcome.used_fallback is True
        assert outcome.strategy == STRATEGY_FALLBACK
        assert "nested too deeply" in outcome.error

    def test_wrong_types_fall_back(self, parser, context):
        raw = json.dumps({"episodeNumber": "two", "title": "T", "scenes": "none", "branchingOptions": 3})
        outcome = parser.parse(raw, EpisodeScript, lambda: None)

        assert outcome.used_fallback is True
        assert "validation failed" in outcome.error
