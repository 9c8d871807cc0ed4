"""Chunk types: the normalized events adapters emit for one execution turn."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Union


class ChunkType(str, Enum):
    THINKING = "thinking"
    RUN = "run"
    EDIT = "edit"
    LOG = "log"
    RESULT = "result"
    ERROR = "error"


@dataclass(frozen=True, kw_only=True)
class _ChunkBase:
    """Fields every chunk carries. `seq` is the turn-local total order."""

    chunk_type: ClassVar[ChunkType]

    seq: int
    ts: int  # epoch milliseconds
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form with the wire keys the rendering layer expects."""
        data: dict[str, Any] = {"type": self.chunk_type.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[_WIRE_KEYS.get(f.name, f.name)] = value
        return data


@dataclass(frozen=True, kw_only=True)
class ThinkingChunk(_ChunkBase):
    chunk_type: ClassVar[ChunkType] = ChunkType.THINKING
    text: str


@dataclass(frozen=True, kw_only=True)
class RunChunk(_ChunkBase):
    chunk_type: ClassVar[ChunkType] = ChunkType.RUN
    cmd: str
    run_id: str | None = None


@dataclass(frozen=True, kw_only=True)
class EditChunk(_ChunkBase):
    chunk_type: ClassVar[ChunkType] = ChunkType.EDIT
    file: str


@dataclass(frozen=True, kw_only=True)
class LogChunk(_ChunkBase):
    chunk_type: ClassVar[ChunkType] = ChunkType.LOG
    text: str
    stream: str = "mixed"
    run_id: str | None = None


@dataclass(frozen=True, kw_only=True)
class ResultChunk(_ChunkBase):
    chunk_type: ClassVar[ChunkType] = ChunkType.RESULT
    result_summary: str | None = None
    text: str | None = None


@dataclass(frozen=True, kw_only=True)
class ErrorChunk(_ChunkBase):
    chunk_type: ClassVar[ChunkType] = ChunkType.ERROR
    text: str
    run_id: str | None = None


Chunk = Union[ThinkingChunk, RunChunk, EditChunk, LogChunk, ResultChunk, ErrorChunk]

CHUNK_CLASSES: dict[ChunkType, type] = {
    ChunkType.THINKING: ThinkingChunk,
    ChunkType.RUN: RunChunk,
    ChunkType.EDIT: EditChunk,
    ChunkType.LOG: LogChunk,
    ChunkType.RESULT: ResultChunk,
    ChunkType.ERROR: ErrorChunk,
}

_WIRE_KEYS = {
    "run_id": "runId",
    "result_summary": "resultSummary",
}
_FIELD_NAMES = {wire: name for name, wire in _WIRE_KEYS.items()}


def chunk_from_dict(raw: Any, default_seq: int = 0) -> Chunk | None:
    """Rebuild a chunk from its plain-data form.

    Returns None for anything that is not a recognizable chunk (unknown
    type, missing required fields, wrong field types). Never raises.
    `default_seq` is used when the dict carries no integer `seq`.
    """
    if not isinstance(raw, dict):
        return None
    try:
        chunk_type = ChunkType(raw.get("type"))
    except ValueError:
        return None

    cls = CHUNK_CLASSES[chunk_type]
    known = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in raw.items():
        name = _FIELD_NAMES.get(key, key)
        if name in known and value is not None:
            kwargs[name] = value

    seq = kwargs.get("seq")
    ts = kwargs.get("ts", 0)
    kwargs["seq"] = seq if isinstance(seq, int) and not isinstance(seq, bool) else default_seq
    kwargs["ts"] = ts if isinstance(ts, (int, float)) else 0
    for key in ("text", "cmd", "file", "stream", "result_summary"):
        if key in kwargs and not isinstance(kwargs[key], str):
            kwargs[key] = str(kwargs[key])
    for key in ("id", "run_id"):
        if key in kwargs and not isinstance(kwargs[key], str):
            kwargs[key] = str(kwargs[key])

    try:
        return cls(**kwargs)
    except TypeError:
        # Required variant field missing (e.g. a run without cmd)
        return None
