"""
Context Analyzer - turns a story document into a bounded GenerationContext.

Tone and pacing come from the caller's vibe settings or genre heuristics;
the stage goal comes from exactly one collaborator call, with a
deterministic goal when that call fails.
"""

import asyncio
import logging
from typing import Optional, Tuple

from narrative_engine.core.config import AnalyzerSettings
from narrative_engine.core.enums import ContentType
from narrative_engine.core.errors import GenerationError
from narrative_engine.core.llm import GenerationOptions, LLMProvider
from narrative_engine.generation.models import (
    GenerationContext,
    GenerationParameters,
    StoryDocument,
    VibeSettings,
)

logger = logging.getLogger(__name__)

TONE_DIRECTIONS = (
    "DARK/GRITTY: Emphasize shadows, moral ambiguity, harsh realities. Use muted descriptions, "
    "serious dialogue, and weighty consequences.",
    "DARK-LEANING: Thoughtful with serious undertones. Some humor but grounded in reality.",
    "BALANCED: Mix of serious moments with lighter beats. Natural humor emerges from character interactions.",
    "LIGHT-LEANING: Optimistic with occasional serious moments. Characters find hope and humor even in challenges.",
    "LIGHT/COMEDIC: Emphasis on humor, wit, and positive outlook. Quick banter, comedic timing, "
    "and characters who find levity in situations.",
)

PACING_DIRECTIONS = (
    "SLOW BURN: Extended character moments, contemplative pauses, detailed atmospheric descriptions. "
    "Let scenes breathe.",
    "DELIBERATE: Thoughtful pacing with purposeful scene development. Balance action with character moments.",
    "STEADY: Consistent forward momentum with varied scene lengths. Mix of quick and extended moments.",
    "ENERGETIC: Faster scene transitions, more dynamic action, snappy exchanges. Keep momentum building.",
    "HIGH OCTANE: Rapid scene changes, intense action, quick-fire dialogue. Maximum energy and excitement.",
)

DIALOGUE_DIRECTIONS = (
    "SPARSE/SUBTEXTUAL: Characters say less but mean more. Heavy use of subtext, meaningful silences, "
    "and actions that speak louder than words.",
    "THOUGHTFUL: Measured dialogue with deeper meaning. Characters choose words carefully. Subtext is important.",
    "NATURAL: Authentic conversational flow. Mix of direct and indirect communication based on character "
    "and situation.",
    "ARTICULATE: Characters express themselves clearly and directly. More exposition when needed, "
    "but still natural.",
    "SNAPPY/EXPOSITORY: Quick wit, rapid exchanges, characters who say exactly what they mean. "
    "Fast dialogue with clear information delivery.",
)

# (keyword, tone shift, pacing shift) applied once per matching genre
GENRE_ADJUSTMENTS: Tuple[Tuple[str, float, float], ...] = (
    ("horror", -30.0, 10.0),
    ("thriller", -20.0, 25.0),
    ("noir", -25.0, -10.0),
    ("crime", -15.0, 10.0),
    ("drama", -10.0, -15.0),
    ("mystery", -10.0, -5.0),
    ("action", 0.0, 30.0),
    ("adventure", 10.0, 20.0),
    ("romance", 15.0, -10.0),
    ("comedy", 30.0, 15.0),
)

GOAL_SYSTEM_PROMPT = """You are a showrunner planning the next episode of an interactive series.
Reply with ONE sentence stating the dramatic goal of the episode: who wants what, and what stands in the way.
No preamble, no quotes, no lists."""


def direction_for(value: float, directions: Tuple[str, ...]) -> str:
    """Map a 0-100 slider value onto its five-band direction string."""
    if value < 20:
        return directions[0]
    if value < 40:
        return directions[1]
    if value < 60:
        return directions[2]
    if value < 80:
        return directions[3]
    return directions[4]


def heuristic_vibe(story: StoryDocument) -> VibeSettings:
    """Derive tone and pacing from genre keywords when the caller gives no vibe."""
    tone = 50.0
    pacing = 50.0
    genres = " ".join(story.genre).lower()
    for keyword, tone_shift, pacing_shift in GENRE_ADJUSTMENTS:
        if keyword in genres:
            tone += tone_shift
            pacing += pacing_shift
    return VibeSettings(
        tone=max(0.0, min(100.0, tone)),
        pacing=max(0.0, min(100.0, pacing)),
        dialogue_style=50.0,
    )


def heuristic_goal(story: StoryDocument, previous_choice: Optional[str]) -> str:
    """Deterministic stage goal used when the collaborator cannot provide one."""
    hero = story.main_character.name if story.main_character else "The protagonist"
    if previous_choice:
        return f"{hero} deals with the consequences of choosing to {previous_choice.rstrip('.').lower()}."
    if story.premise:
        return f"{hero} takes the first decisive step in a story where {story.premise.rstrip('.')}."
    return f"{hero} faces a challenge that tests who they are."


class ContextAnalyzer:
    """Builds the immutable GenerationContext for one request."""

    def __init__(
        self,
        provider: LLMProvider,
        model: str,
        settings: Optional[AnalyzerSettings] = None,
    ):
        self.provider = provider
        self.model = model
        self.settings = settings or AnalyzerSettings()

    async def analyze(
        self,
        story: StoryDocument,
        content_type: ContentType,
        episode_number: int = 1,
        previous_choice: Optional[str] = None,
        vibe: Optional[VibeSettings] = None,
        director_notes: str = "",
    ) -> GenerationContext:
        """
        Convert story state into generation parameters and a stage goal.

        Args:
            story: Read-only story document
            content_type: Artifact to generate
            episode_number: 1-based episode index
            previous_choice: Branching option chosen at the end of the last episode
            vibe: Optional slider settings; genre heuristics are used when absent
            director_notes: Free-text notes passed through to every stage

        Returns:
            Frozen GenerationContext
        """
        if vibe is None:
            vibe = heuristic_vibe(story)
            logger.debug("No vibe supplied, derived tone=%.0f pacing=%.0f from genre", vibe.tone, vibe.pacing)

        parameters = GenerationParameters(
            tone=vibe.tone,
            pacing=vibe.pacing,
            dialogue_style=vibe.dialogue_style,
            tone_direction=direction_for(vibe.tone, TONE_DIRECTIONS),
            pacing_direction=direction_for(vibe.pacing, PACING_DIRECTIONS),
            dialogue_direction=direction_for(vibe.dialogue_style, DIALOGUE_DIRECTIONS),
        )

        summaries = tuple(
            f"Episode {ep.episode_number}: {ep.title}".rstrip(": ")
            + (f" - {ep.synopsis}" if ep.synopsis else "")
            + (f" (chosen: {ep.chosen_option})" if ep.chosen_option else "")
            for ep in story.previous_episodes
        )

        goal = await self._derive_goal(story, episode_number, previous_choice, summaries)
        goal_from_fallback = goal is None
        if goal is None:
            goal = heuristic_goal(story, previous_choice)
            logger.warning("Stage goal derivation failed, using heuristic goal: %s", goal)

        return GenerationContext(
            story=story,
            content_type=content_type,
            episode_number=episode_number,
            previous_choice=previous_choice,
            previous_episode_summaries=summaries,
            parameters=parameters,
            stage_goal=goal,
            goal_from_fallback=goal_from_fallback,
            director_notes=director_notes,
        )

    async def _derive_goal(
        self,
        story: StoryDocument,
        episode_number: int,
        previous_choice: Optional[str],
        summaries: Tuple[str, ...],
    ) -> Optional[str]:
        prompt = "\n".join(
            [
                f"Series: {story.series_title}",
                f"Genre: {', '.join(story.genre) or 'Unspecified'}",
                f"Premise: {story.premise or 'Unspecified'}",
                f"Main characters: {', '.join(c.name for c in story.main_characters) or 'Unspecified'}",
                f"Previous episodes: {' | '.join(summaries) or 'None'}",
                f"Previous choice: {previous_choice or 'None'}",
                f"What is the dramatic goal of episode {episode_number}?",
            ]
        )
        options = GenerationOptions(
            model=self.model,
            system_prompt=GOAL_SYSTEM_PROMPT,
            temperature=self.settings.temperature,
            max_output_tokens=self.settings.max_output_tokens,
        )
        try:
            text = await asyncio.wait_for(
                self.provider.generate(prompt, options),
                timeout=self.settings.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Stage goal call timed out after %.0fs", self.settings.timeout_seconds)
            return None
        except GenerationError as e:
            logger.warning("Stage goal call failed (%s): %s", e.reason, e)
            return None
        except OSError as e:
            logger.warning("Stage goal call failed (transport): %s", e)
            return None

        goal = " ".join((text or "").split()).strip("\"' ")
        if not goal or len(goal) > self.settings.max_goal_chars:
            return None
        return goal
