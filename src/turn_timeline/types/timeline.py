"""Timeline types derived from a chunk sequence."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class EntryKind(str, Enum):
    THINKING = "thinking"
    COMMAND = "command"
    FILE_CHANGE = "file-change"
    TEST = "test"
    FINAL = "final-message"
    ERROR = "error"


class EntryStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"


class TurnStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class TestsStatus(str, Enum):
    __test__ = False  # not a pytest class

    PASSED = "passed"
    FAILED = "failed"


@dataclass
class TimelineEntry:
    id: str
    kind: EntryKind
    status: EntryStatus
    title: str
    body: Optional[str] = None
    files: Optional[list[str]] = None
    source_chunk_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            "status": self.status.value,
            "title": self.title,
            "sourceChunkIds": list(self.source_chunk_ids),
        }
        if self.body is not None:
            data["body"] = self.body
        if self.files is not None:
            data["files"] = list(self.files)
        return data


@dataclass
class SummaryMeta:
    duration_ms: Optional[int] = None
    tests_status: Optional[TestsStatus] = None
    command_count: int = 0


@dataclass
class TurnSummary:
    status: TurnStatus
    meta: SummaryMeta = field(default_factory=SummaryMeta)
    bullets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "testsStatus": self.meta.tests_status.value if self.meta.tests_status else None,
            "commandCount": self.meta.command_count,
        }
        if self.meta.duration_ms is not None:
            meta["durationMs"] = self.meta.duration_ms
        return {
            "status": self.status.value,
            "meta": meta,
            "bullets": list(self.bullets),
        }


@dataclass
class AggregateResult:
    summary: TurnSummary
    timeline: list[TimelineEntry]

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "timeline": [entry.to_dict() for entry in self.timeline],
        }
