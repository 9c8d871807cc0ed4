"""File-change types produced by patch envelope extraction."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FileOp(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class OutputType(str, Enum):
    PATCH = "patch"
    TEXT = "text"


@dataclass
class FileChange:
    path: str
    op: FileOp
    patch: str
    added: int = 0
    removed: int = 0
    hunks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "op": self.op.value,
            "patch": self.patch,
            "added": self.added,
            "removed": self.removed,
            "hunks": self.hunks,
        }


@dataclass
class PatchSummary:
    title: str
    description: str = ""


@dataclass
class PatchParseResult:
    engine: str
    summary: PatchSummary
    raw_output: str
    output_type: OutputType = OutputType.TEXT
    changes: list[FileChange] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "engine": self.engine,
            "summary": {
                "title": self.summary.title,
                "description": self.summary.description,
            },
            "changes": [change.to_dict() for change in self.changes],
            "rawOutput": self.raw_output,
            "outputType": self.output_type.value,
        }
