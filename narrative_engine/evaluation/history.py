"""
Bounded validation history.
"""

import statistics
import threading
from collections import deque
from typing import Deque, Dict, Optional, Tuple

from narrative_engine.core.enums import ContentType
from narrative_engine.evaluation.models import ValidationResult


class ValidationHistory:
    """Ring buffer of recent validation results per content type."""

    def __init__(self, limit: int = 100):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self._entries: Dict[ContentType, Deque[ValidationResult]] = {}
        self._lock = threading.Lock()

    def append(self, result: ValidationResult) -> None:
        """Record a result; the oldest entry for its content type drops out at the limit."""
        with self._lock:
            buffer = self._entries.get(result.content_type)
            if buffer is None:
                buffer = self._entries[result.content_type] = deque(maxlen=self.limit)
            buffer.append(result)

    def entries(self, content_type: ContentType) -> Tuple[ValidationResult, ...]:
        with self._lock:
            return tuple(self._entries.get(content_type, ()))

    def latest(self, content_type: ContentType) -> Optional[ValidationResult]:
        with self._lock:
            buffer = self._entries.get(content_type)
            return buffer[-1] if buffer else None

    def average_score(self, content_type: ContentType) -> Optional[float]:
        entries = self.entries(content_type)
        if not entries:
            return None
        return statistics.mean(entry.overall_score for entry in entries)

    def clear(self, content_type: Optional[ContentType] = None) -> None:
        with self._lock:
            if content_type is None:
                self._entries.clear()
            else:
                self._entries.pop(content_type, None)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(buffer) for buffer in self._entries.values())
