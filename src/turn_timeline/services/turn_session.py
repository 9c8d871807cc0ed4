"""One execution turn: its chunk factory, chunk log, and cached timeline."""

import logging
import time
import uuid as uuid_mod
from typing import Iterable

from turn_timeline.services.backends import adapt_output
from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.services.config_manager import ConfigManager
from turn_timeline.services.stream_adapter import StreamDialect, adapt_records, parse_stream_output
from turn_timeline.services.text_adapter import derive_chunks_from_text
from turn_timeline.services.timeline_builder import build_timeline
from turn_timeline.types.chunks import Chunk, ChunkType, CHUNK_CLASSES
from turn_timeline.types.events import StreamParseResult
from turn_timeline.types.timeline import AggregateResult

logger = logging.getLogger(__name__)


class TurnSession:
    """Owns the append-only chunk sequence of a single turn.

    Each session gets its own ChunkFactory, so simultaneous turns never
    share sequence numbers. The timeline is recomputed on demand and
    memoised on (chunk count, identity of the last chunk), which is a
    valid key because the sequence only ever grows at the end.
    """

    def __init__(self, turn_id: str | None = None, config: ConfigManager | None = None):
        self.turn_id = turn_id or uuid_mod.uuid4().hex[:12]
        self.config = config or ConfigManager()
        self.factory = ChunkFactory(id_prefix=self.turn_id)
        self.started_at = time.monotonic()
        self.summary: str | None = None
        self._chunks: list[Chunk] = []
        self._aggregated: list[str] = []
        self._cache_key: tuple | None = None
        self._cache: AggregateResult | None = None

    @property
    def chunks(self) -> list[Chunk]:
        return list(self._chunks)

    @property
    def aggregated_text(self) -> str:
        return "\n".join(t for t in self._aggregated if t)

    def _max_result_lines(self) -> int:
        return self.config.get_int("stream/maxResultLines")

    def _extend(self, result: StreamParseResult) -> list[Chunk]:
        self._chunks.extend(result.chunks)
        if result.aggregated_text:
            self._aggregated.append(result.aggregated_text)
        if result.summary and not self.summary:
            self.summary = result.summary
        return result.chunks

    def feed_text(self, stdout: str = "", stderr: str = "") -> list[Chunk]:
        """Adapt a block of console output and append the chunks."""
        chunks = derive_chunks_from_text(
            stdout, stderr, self.factory,
            drop_filler=self.config.get_bool("text/dropFillerThinking"),
        )
        self._chunks.extend(chunks)
        return chunks

    def feed_records(self, records: Iterable, dialect: StreamDialect = StreamDialect.STEP) -> list[Chunk]:
        """Adapt already-decoded structured records and append the chunks."""
        return self._extend(adapt_records(records, dialect, self.factory, self._max_result_lines()))

    def feed_lines(self, text: str, dialect: StreamDialect = StreamDialect.STEP) -> list[Chunk]:
        """Decode JSON Lines output, adapt it, and append the chunks.

        Callers streaming stdout should pass complete lines only; a
        partial trailing line is dropped as malformed.
        """
        return self._extend(parse_stream_output(text, dialect, self.factory, self._max_result_lines()))

    def feed_output(self, backend, output_format, stdout: str = "", stderr: str = "") -> list[Chunk]:
        """Adapt a finished run's output using the backend's own adapter."""
        return self._extend(adapt_output(
            backend, output_format, stdout, stderr, self.factory,
            max_result_lines=self._max_result_lines(),
            drop_filler=self.config.get_bool("text/dropFillerThinking"),
        ))

    def append(self, chunk_type: ChunkType | str, **fields) -> Chunk:
        """Stamp and append a collaborator-supplied chunk (e.g. interruption)."""
        chunk = self.factory.stamp(CHUNK_CLASSES[ChunkType(chunk_type)], **fields)
        self._chunks.append(chunk)
        return chunk

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)

    def snapshot(self) -> dict:
        """Incremental plain-data view: {"chunks": [...]}."""
        return {"chunks": [chunk.to_dict() for chunk in self._chunks]}

    def timeline(self, duration_ms: int | None = None) -> AggregateResult:
        """Current timeline and summary, rebuilt only when chunks changed."""
        last = self._chunks[-1] if self._chunks else None
        bullet_max_chars = self.config.get_int("summary/bulletMaxChars")
        key = (len(self._chunks), id(last), duration_ms, bullet_max_chars)
        if self._cache is not None and key == self._cache_key:
            return self._cache

        timing = {"durationMs": duration_ms} if duration_ms is not None else None
        self._cache = build_timeline(
            self._chunks, timing,
            bullet_max_chars=bullet_max_chars,
        )
        self._cache_key = key
        logger.debug(
            "Turn %s: %d chunks -> %d entries",
            self.turn_id, len(self._chunks), len(self._cache.timeline),
        )
        return self._cache
