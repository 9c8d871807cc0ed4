"""Tests for turn_timeline.services.chunk_factory and chunk types."""

import dataclasses

import pytest

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.types.chunks import (
    ChunkType,
    EditChunk,
    ErrorChunk,
    LogChunk,
    ResultChunk,
    RunChunk,
    ThinkingChunk,
    chunk_from_dict,
)


# ---------------------------------------------------------------------------
# 1. Sequence numbers
# ---------------------------------------------------------------------------

def test_seq_strictly_increasing(factory):
    chunks = [factory.stamp(LogChunk, text=str(n)) for n in range(5)]
    assert [c.seq for c in chunks] == [1, 2, 3, 4, 5]
    assert factory.last_seq == 5


def test_factories_are_isolated():
    """Two turns never share a counter."""
    a = ChunkFactory()
    b = ChunkFactory()
    a.stamp(LogChunk, text="a1")
    a.stamp(LogChunk, text="a2")
    first_b = b.stamp(LogChunk, text="b1")
    assert first_b.seq == 1
    assert a.last_seq == 2


def test_timestamp_from_clock():
    ticks = iter([10, 20])
    f = ChunkFactory(clock=lambda: next(ticks))
    assert f.stamp(LogChunk, text="x").ts == 10
    assert f.stamp(LogChunk, text="y").ts == 20


def test_id_prefix():
    f = ChunkFactory(id_prefix="turn7", clock=lambda: 0)
    chunk = f.stamp(ThinkingChunk, text="hi")
    assert chunk.id == "turn7-1"
    explicit = f.stamp(ThinkingChunk, text="hi", id="custom")
    assert explicit.id == "custom"


def test_no_prefix_leaves_id_unset(factory):
    assert factory.stamp(EditChunk, file="a.py").id is None


# ---------------------------------------------------------------------------
# 2. Immutability and plain data
# ---------------------------------------------------------------------------

def test_chunks_are_immutable(factory):
    chunk = factory.stamp(RunChunk, cmd="ls")
    with pytest.raises(dataclasses.FrozenInstanceError):
        chunk.cmd = "rm -rf /"


def test_to_dict_uses_wire_keys(factory):
    run = factory.stamp(RunChunk, cmd="npm test", run_id="r1")
    assert run.to_dict() == {
        "type": "run",
        "seq": 1,
        "ts": 1_700_000_000_000,
        "cmd": "npm test",
        "runId": "r1",
    }
    result = factory.stamp(ResultChunk, result_summary="done", text="done")
    assert result.to_dict()["resultSummary"] == "done"


def test_to_dict_omits_none(factory):
    data = factory.stamp(ErrorChunk, text="boom").to_dict()
    assert "runId" not in data
    assert "id" not in data


def test_chunk_type_tags():
    assert RunChunk.chunk_type == ChunkType.RUN
    assert LogChunk.chunk_type == ChunkType.LOG


# ---------------------------------------------------------------------------
# 3. Rebuilding from plain data
# ---------------------------------------------------------------------------

def test_chunk_from_dict_restores_variant(factory):
    original = factory.stamp(LogChunk, text="out", stream="stdout", run_id="r1")
    restored = chunk_from_dict(original.to_dict())
    assert restored == original


@pytest.mark.parametrize("raw", [
    None,
    "run",
    {"type": "mystery", "text": "x"},
    {"type": "run"},
    {"type": "edit", "seq": 1},
    [],
])
def test_chunk_from_dict_rejects_unusable(raw):
    assert chunk_from_dict(raw) is None


def test_chunk_from_dict_coerces_field_types():
    chunk = chunk_from_dict({"type": "error", "text": 42, "runId": 7, "seq": "x"})
    assert chunk.text == "42"
    assert chunk.run_id == "7"
    assert chunk.seq == 0
