"""
Structured Result Parser - extracts schema-shaped payloads from raw collaborator text.

Attempts, first success wins:
1. Direct JSON parse of the whole text
2. JSON inside a fenced code block, then the span from the first '{' to the last '}'
3. The caller's deterministic default (used_fallback=True)
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from narrative_engine.core.errors import ParseFailure
from narrative_engine.core.utils import preview

logger = logging.getLogger(__name__)

STRATEGY_DIRECT = "direct"
STRATEGY_FENCED_BLOCK = "fenced_block"
STRATEGY_BRACE_SPAN = "brace_span"
STRATEGY_FALLBACK = "fallback"

_FENCE_RE = re.compile(r"```[a-zA-Z]*[ \t]*\n?(.*?)```", re.DOTALL)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


@dataclass(frozen=True)
class ParseOutcome:
    """Result of one parse call. Never raised, always returned."""

    payload: BaseModel
    used_fallback: bool
    strategy: str
    repaired_fields: Tuple[str, ...] = ()
    error: Optional[str] = None


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except RecursionError as e:
        raise ParseFailure("JSON nested too deeply") from e
    except ValueError as e:
        cleaned = _TRAILING_COMMA_RE.sub(r"\1", text)
        if cleaned == text:
            raise ParseFailure(f"invalid JSON: {e}") from e
        try:
            return json.loads(cleaned)
        except (ValueError, RecursionError) as e2:
            raise ParseFailure(f"invalid JSON after cleanup: {e2}") from e2


def _candidates(raw_text: str) -> Iterator[Tuple[str, str]]:
    yield STRATEGY_DIRECT, raw_text.strip()
    for match in _FENCE_RE.finditer(raw_text):
        yield STRATEGY_FENCED_BLOCK, match.group(1).strip()
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start != -1 and end > start:
        yield STRATEGY_BRACE_SPAN, raw_text[start:end + 1]


def _is_missing(data: Dict[str, Any], name: str, alias: Optional[str]) -> bool:
    for key in (name, alias):
        if key and data.get(key) not in (None, [], ""):
            return False
    return True


class StructuredResultParser:
    """Deterministic multi-attempt parser shared by all stages and the LLM judge."""

    def parse(
        self,
        raw_text: Optional[str],
        expected_shape: Type[BaseModel],
        default_factory: Callable[[], BaseModel],
    ) -> ParseOutcome:
        """
        Parse raw text into an instance of expected_shape.

        Args:
            raw_text: Collaborator output (may be None or empty)
            expected_shape: Pydantic model the payload must validate against
            default_factory: Builds the deterministic default, called at most once

        Returns:
            ParseOutcome with the payload and how it was obtained
        """
        default_cache = []

        def default() -> BaseModel:
            if not default_cache:
                default_cache.append(default_factory())
            return default_cache[0]

        last_error = "empty response"
        if raw_text and raw_text.strip():
            for strategy, candidate in _candidates(raw_text):
                try:
                    data = _loads(candidate)
                    payload, repaired = self._coerce(data, expected_shape, default)
                except ParseFailure as e:
                    last_error = str(e)
                    logger.debug("Parse attempt %s failed for %s: %s", strategy, expected_shape.__name__, e)
                    continue
                if repaired:
                    logger.info(
                        "Parsed %s via %s, repaired missing fields: %s",
                        expected_shape.__name__,
                        strategy,
                        ", ".join(repaired),
                    )
                return ParseOutcome(payload=payload, used_fallback=False, strategy=strategy, repaired_fields=repaired)

        logger.warning(
            "Could not parse %s (%s), using deterministic default. Raw preview: %s",
            expected_shape.__name__,
            last_error,
            preview(raw_text or ""),
        )
        return ParseOutcome(payload=default(), used_fallback=True, strategy=STRATEGY_FALLBACK, error=last_error)

    def _coerce(
        self,
        data: Any,
        expected_shape: Type[BaseModel],
        default: Callable[[], BaseModel],
    ) -> Tuple[BaseModel, Tuple[str, ...]]:
        if not isinstance(data, dict):
            raise ParseFailure(f"expected a JSON object, got {type(data).__name__}")

        data = dict(data)
        fields = expected_shape.model_fields
        kind = fields.get("kind")
        if kind is not None:
            data.pop("kind", None)
            data["kind"] = kind.default

        repaired = []
        for name, field in fields.items():
            if not field.is_required() or not _is_missing(data, name, field.alias):
                continue
            if field.alias:
                data.pop(field.alias, None)
            data[name] = getattr(default(), name)
            repaired.append(name)

        try:
            payload = expected_shape.model_validate(data)
        except ValidationError as e:
            raise ParseFailure(f"{expected_shape.__name__} validation failed: {e.error_count()} errors") from e
        return payload, tuple(repaired)
