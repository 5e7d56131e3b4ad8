"""
Generation history tracking.

Every remote call made by SchemaService appends a GenerationRecord to a
GenerationHistory. The history is an ordinary object passed to the service,
so separate services (or tests) never share state.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class GenerationRecord:
    """
    One remote generation call, successful or not.

    Attributes:
        operation: Service operation name (e.g. "generate_schema")
        model: Model the request targeted
        attempts: Attempts made under the retry policy (>= 1)
        latency_ms: Wall time including retry waits
        success: Whether a usable result was produced
        error_kind: ErrorKind value (or exception class name) on failure
        timestamp: When the call finished (UTC)
    """

    operation: str
    model: str
    attempts: int
    latency_ms: int
    success: bool
    error_kind: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.latency_ms < 0:
            raise ValueError("latency_ms must be >= 0")


@dataclass(frozen=True)
class HistorySummary:
    total: int
    succeeded: int
    failed: int
    success_rate: float
    average_attempts: float
    retried: int


class GenerationHistory:
    """
    Bounded ring buffer of GenerationRecord.

    Once ``max_size`` records are held, each new record evicts the oldest.
    """

    def __init__(self, max_size: int = 1000):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._records: deque[GenerationRecord] = deque(maxlen=max_size)

    def record(self, record: GenerationRecord) -> None:
        self._records.append(record)

    def records(self, operation: Optional[str] = None) -> list[GenerationRecord]:
        """Oldest first, optionally filtered by operation."""
        if operation is None:
            return list(self._records)
        return [r for r in self._records if r.operation == operation]

    def clear(self) -> None:
        self._records.clear()

    def summary(self) -> HistorySummary:
        total = len(self._records)
        succeeded = sum(1 for r in self._records if r.success)
        retried = sum(1 for r in self._records if r.attempts > 1)
        attempts = sum(r.attempts for r in self._records)
        return HistorySummary(
            total=total,
            succeeded=succeeded,
            failed=total - succeeded,
            success_rate=succeeded / total if total else 0.0,
            average_attempts=attempts / total if total else 0.0,
            retried=retried,
        )

    def __len__(self) -> int:
        return len(self._records)
