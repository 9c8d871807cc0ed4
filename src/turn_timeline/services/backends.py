"""Choose the adapter for a backend's raw output."""

import logging
from enum import Enum

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.services.stream_adapter import MAX_RESULT_LINES, StreamDialect, parse_stream_output
from turn_timeline.services.text_adapter import derive_chunks_from_text
from turn_timeline.types.events import StreamParseResult

logger = logging.getLogger(__name__)


class Backend(str, Enum):
    CODEX = "codex"
    CLAUDE = "claude"
    DROID = "droid"


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    STREAM_JSON = "stream-json"


# Structured (backend, format) pairs; everything else is console text
STRUCTURED_DIALECTS: dict[tuple[Backend, OutputFormat], StreamDialect] = {
    (Backend.CODEX, OutputFormat.JSON): StreamDialect.ITEM,
    (Backend.CLAUDE, OutputFormat.STREAM_JSON): StreamDialect.MESSAGE,
    (Backend.DROID, OutputFormat.STREAM_JSON): StreamDialect.STEP,
    (Backend.DROID, OutputFormat.JSON): StreamDialect.STEP,
}


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def dialect_for(backend, output_format) -> StreamDialect | None:
    """Structured dialect for a backend/format pair, or None for text."""
    key = (_coerce(Backend, backend), _coerce(OutputFormat, output_format))
    return STRUCTURED_DIALECTS.get(key)


def adapt_output(
    backend,
    output_format,
    stdout: str = "",
    stderr: str = "",
    factory: ChunkFactory | None = None,
    max_result_lines: int = MAX_RESULT_LINES,
    drop_filler: bool = True,
) -> StreamParseResult:
    """Turn one backend run's raw output into chunks.

    Unknown backends and formats fall back to the console text adapter.
    """
    factory = factory or ChunkFactory()
    dialect = dialect_for(backend, output_format)
    if dialect is not None:
        return parse_stream_output(stdout or "", dialect, factory, max_result_lines)

    logger.debug("Using text adapter for backend=%r format=%r", backend, output_format)
    chunks = derive_chunks_from_text(stdout or "", stderr or "", factory, drop_filler)
    return StreamParseResult(chunks=chunks, aggregated_text=(stdout or "").strip())
