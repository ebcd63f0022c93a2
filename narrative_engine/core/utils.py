"""
Utility functions for the Narrative Engine.
"""

from typing import Any, Iterable, List

from pydantic import BaseModel


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def count_terms(text_lower: str, terms: Iterable[str]) -> int:
    """
    Count how many of the given terms occur in already-lowercased text.

    Each term counts once no matter how often it appears, so a single
    repeated word cannot inflate a keyword family score.
    """
    return sum(1 for term in terms if term in text_lower)


def preview(text: str, limit: int = 200) -> str:
    """Shorten text for log output."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def collect_strings(value: Any) -> List[str]:
    """Recursively collect every string found in a model, mapping or sequence."""
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        strings = []
        for item in value.values():
            strings.extend(collect_strings(item))
        return strings
    if isinstance(value, (list, tuple)):
        strings = []
        for item in value:
            strings.extend(collect_strings(item))
        return strings
    return []


def artifact_text(value: Any) -> str:
    """Flatten every string in an artifact into one text blob for keyword scans."""
    return "\n".join(s for s in collect_strings(value) if s)
