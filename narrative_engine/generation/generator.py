"""
Staged Generator - runs the ordered generation stages for one request.

Each stage builds its prompt from the context plus the previous stage's
payload, calls the collaborator once, and parses the reply. A failed call or
an unparseable reply is replaced by the stage's deterministic default; the
pipeline never aborts because of a single stage.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from narrative_engine.core.config import GeneratorSettings
from narrative_engine.core.errors import GenerationError
from narrative_engine.core.llm import GenerationOptions, LLMProvider
from narrative_engine.generation.models import (
    GenerationContext,
    GenerationMetadata,
    GenerationResult,
    StageRecord,
    payload_content_type,
)
from narrative_engine.generation.parser import StructuredResultParser
from narrative_engine.generation.registry import (
    STORY_CONTEXT_TEMPLATE,
    GenerationStage,
    get_content_definition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallOutcome:
    """Result of one collaborator call: text, or the reason it failed."""

    text: Optional[str]
    failure_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure_reason is None


@dataclass(frozen=True)
class StageOutcome:
    """Payload produced by a stage and the record of how it was obtained."""

    payload: BaseModel
    record: StageRecord


def prompt_fields(context: GenerationContext, previous: Optional[BaseModel] = None) -> Dict[str, Any]:
    """Template fields shared by every stage prompt."""
    story = context.story
    characters = "\n".join(
        f"- {c.name}" + (f" ({c.archetype})" if c.archetype else "") + (f": {c.description}" if c.description else "")
        for c in story.main_characters
    )
    params = context.parameters
    fields = {
        "series_title": story.series_title,
        "genre": ", ".join(story.genre) or "Unspecified",
        "tone": story.tone or "Unspecified",
        "premise": story.premise or "Unspecified",
        "setting": story.setting or "Unspecified",
        "target_audience": story.target_audience or "General",
        "characters": characters or "- (none listed)",
        "previous_episodes": "\n".join(context.previous_episode_summaries) or "None (this is the first episode)",
        "episode_number": context.episode_number,
        "previous_choice": context.previous_choice or "None",
        "stage_goal": context.stage_goal,
        "tone_direction": params.tone_direction,
        "pacing_direction": params.pacing_direction,
        "dialogue_direction": params.dialogue_direction,
        "director_notes": context.director_notes or "None",
    }
    fields["story_context"] = STORY_CONTEXT_TEMPLATE.format(**fields)
    fields["previous_payload"] = (
        previous.model_dump_json(indent=2, exclude={"kind"}) if previous is not None else "None"
    )
    return fields


class StagedGenerator:
    """
    Staged Generator implementing the sequential stage pipeline.

    Pipeline per stage:
    1. Prompt: template + context + previous payload
    2. Call: one bounded collaborator call, no retries
    3. Parse: structured result parser (direct, fenced block, brace span)
    4. Fallback: deterministic default when 2 or 3 fails
    """

    def __init__(
        self,
        provider: LLMProvider,
        settings: Optional[GeneratorSettings] = None,
        parser: Optional[StructuredResultParser] = None,
    ):
        """
        Initialize the Staged Generator.

        Args:
            provider: Generative collaborator
            settings: Model and call bounds (defaults to GeneratorSettings())
            parser: Structured result parser (a fresh one by default)
        """
        self.provider = provider
        self.settings = settings or GeneratorSettings()
        self.parser = parser or StructuredResultParser()

    async def generate(
        self,
        context: GenerationContext,
        stages: Optional[Sequence[GenerationStage]] = None,
    ) -> GenerationResult:
        """
        Run every stage in order and assemble the result.

        Args:
            context: Immutable generation context
            stages: Explicit stage list; defaults to the registry pipeline for
                context.content_type

        Returns:
            GenerationResult; metadata.fallback_stages names every stage that
            used its deterministic default

        Raises:
            ValueError: Unknown content type or an empty stage list
        """
        if stages is None:
            stages = get_content_definition(context.content_type).stages
        if not stages:
            raise ValueError("At least one generation stage is required.")

        logger.info(
            "Generation start: content_type=%s, episode=%d, stages=%s",
            context.content_type.value,
            context.episode_number,
            " -> ".join(stage.name for stage in stages),
        )

        previous: Optional[BaseModel] = None
        stage_payloads: Dict[str, BaseModel] = {}
        records: List[StageRecord] = []
        for index, stage in enumerate(stages, 1):
            outcome = await self._run_stage(stage, context, previous, index, len(stages))
            stage_payloads[stage.name] = outcome.payload
            records.append(outcome.record)
            previous = outcome.payload

        fallback_stages = tuple(record.name for record in records if record.used_fallback)
        logger.info(
            "Generation complete: %s, %d/%d stages used fallback%s",
            context.content_type.value,
            len(fallback_stages),
            len(records),
            f" ({', '.join(fallback_stages)})" if fallback_stages else "",
        )

        return GenerationResult(
            content_type=payload_content_type(previous),
            payload=previous,
            stage_payloads=stage_payloads,
            metadata=GenerationMetadata(
                model=self.settings.model,
                fallback_stages=fallback_stages,
                stages=tuple(records),
            ),
            context=context,
        )

    async def _run_stage(
        self,
        stage: GenerationStage,
        context: GenerationContext,
        previous: Optional[BaseModel],
        index: int,
        total: int,
    ) -> StageOutcome:
        started = time.perf_counter()
        prompt = stage.prompt_template.format(**prompt_fields(context, previous))
        logger.info("Stage %d/%d - %s: calling collaborator", index, total, stage.name)

        call = await self._call(prompt, stage)

        def default() -> BaseModel:
            return stage.fallback(context, previous)

        if call.ok:
            parsed = self.parser.parse(call.text, stage.output_schema, default)
            payload = parsed.payload
            used_fallback = parsed.used_fallback
            failure_reason = "parse_failure" if parsed.used_fallback else None
            strategy = parsed.strategy
            repaired = parsed.repaired_fields
        else:
            logger.warning(
                "Stage %d/%d - %s: collaborator failed (%s), using deterministic default",
                index,
                total,
                stage.name,
                call.failure_reason,
            )
            payload = default()
            used_fallback = True
            failure_reason = call.failure_reason
            strategy = None
            repaired = ()

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Stage %d/%d - %s: done in %.0fms (fallback=%s)",
            index,
            total,
            stage.name,
            duration_ms,
            used_fallback,
        )
        return StageOutcome(
            payload=payload,
            record=StageRecord(
                name=stage.name,
                used_fallback=used_fallback,
                failure_reason=failure_reason,
                parse_strategy=strategy,
                repaired_fields=repaired,
                duration_ms=duration_ms,
            ),
        )

    async def _call(self, prompt: str, stage: GenerationStage) -> CallOutcome:
        options = GenerationOptions(
            model=self.settings.model,
            system_prompt=stage.system_prompt,
            temperature=(
                stage.temperature if stage.temperature is not None else self.settings.default_temperature
            ),
            max_output_tokens=stage.max_output_tokens or self.settings.default_max_output_tokens,
        )
        try:
            text = await asyncio.wait_for(
                self.provider.generate(prompt, options),
                timeout=self.settings.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return CallOutcome(text=None, failure_reason=GenerationError.TIMEOUT)
        except GenerationError as e:
            return CallOutcome(text=None, failure_reason=e.reason)
        except OSError as e:
            logger.debug("Transport error during %s: %s", stage.name, e)
            return CallOutcome(text=None, failure_reason=GenerationError.TRANSPORT)

        if not text or len(text.strip()) < self.settings.min_response_chars:
            return CallOutcome(text=text, failure_reason=GenerationError.EMPTY_RESPONSE)
        return CallOutcome(text=text)
