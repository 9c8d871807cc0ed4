"""Type definitions for turn timelines."""

from turn_timeline.types.chunks import (
    Chunk,
    ChunkType,
    ThinkingChunk,
    RunChunk,
    EditChunk,
    LogChunk,
    ResultChunk,
    ErrorChunk,
    chunk_from_dict,
)
from turn_timeline.types.changes import (
    FileChange,
    FileOp,
    OutputType,
    PatchParseResult,
    PatchSummary,
)
from turn_timeline.types.timeline import (
    AggregateResult,
    EntryKind,
    EntryStatus,
    SummaryMeta,
    TestsStatus,
    TimelineEntry,
    TurnStatus,
    TurnSummary,
)
from turn_timeline.types.events import EventOutput, StreamParseResult

__all__ = [
    "Chunk",
    "ChunkType",
    "ThinkingChunk",
    "RunChunk",
    "EditChunk",
    "LogChunk",
    "ResultChunk",
    "ErrorChunk",
    "chunk_from_dict",
    "FileChange",
    "FileOp",
    "OutputType",
    "PatchParseResult",
    "PatchSummary",
    "AggregateResult",
    "EntryKind",
    "EntryStatus",
    "SummaryMeta",
    "TestsStatus",
    "TimelineEntry",
    "TurnStatus",
    "TurnSummary",
    "EventOutput",
    "StreamParseResult",
]
