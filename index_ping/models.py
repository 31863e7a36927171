# index_ping/models.py
"""
Data models shared by the normalizer, the batch submitter and the orchestrator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from index_ping.errors import ValidationError

__all__ = (
    "SubmissionMode",
    "NormalizedUrls",
    "BatchSubmitted",
    "BatchFailure",
    "BatchOutcome",
    "SubmissionResult",
)


class SubmissionMode(str, Enum):
    """Характер изменения контента, о котором сообщаем нотификатору."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @classmethod
    def parse(cls, value: Any) -> SubmissionMode:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(f"mode must be one of: {allowed}")


@dataclass(slots=True)
class NormalizedUrls:
    """Output of URL validation: accepted URLs in first-seen order plus rejects."""

    valid: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)
    duplicates: int = 0


@dataclass(frozen=True, slots=True)
class BatchSubmitted:
    batch_index: int
    count: int
    status: int


@dataclass(frozen=True, slots=True)
class BatchFailure:
    """Terminal outcome of a batch: HTTP status or ``NETWORK_ERROR`` plus a body/exception snippet."""

    batch_index: int
    status: Union[int, str]
    error_snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batchIndex": self.batch_index,
            "status": self.status,
            "errorSnippet": self.error_snippet,
        }


BatchOutcome = Union[BatchSubmitted, BatchFailure]


@dataclass(slots=True)
class SubmissionResult:
    """Итог одного запуска отправки: счётчики и список неуспешных батчей."""

    mode: SubmissionMode
    total_urls: int
    valid_urls: int
    invalid_urls: int
    submitted_count: int = 0
    submitted_batches: int = 0
    failed_batches: List[BatchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_batches

    def record(self, outcome: BatchOutcome) -> None:
        if isinstance(outcome, BatchSubmitted):
            self.submitted_count += outcome.count
            self.submitted_batches += 1
        else:
            self.failed_batches.append(outcome)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used on the wire."""
        return {
            "mode": self.mode.value,
            "totalUrls": self.total_urls,
            "validUrls": self.valid_urls,
            "invalidUrls": self.invalid_urls,
            "submittedCount": self.submitted_count,
            "submittedBatches": self.submitted_batches,
            "failedBatches": [f.to_dict() for f in self.failed_batches],
        }
