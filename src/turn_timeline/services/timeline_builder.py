"""Fold a chunk sequence into timeline entries and a turn summary.

`build_timeline` is the single aggregation used both while a turn is
streaming (called on every growing prefix) and once the turn is complete,
so the live timeline and the final timeline cannot diverge.
"""

import logging
import re
from typing import Any, Iterable, Mapping

from turn_timeline.types.chunks import (
    Chunk,
    EditChunk,
    ErrorChunk,
    LogChunk,
    ResultChunk,
    RunChunk,
    ThinkingChunk,
    chunk_from_dict,
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
from turn_timeline.utils.text_cleaning import clean_markdown, strip_file_count, truncate

logger = logging.getLogger(__name__)

BULLET_MAX_CHARS = 200

_TEST_COMMAND_RE = re.compile(
    r'(?:npm|pnpm|yarn|bun)\s+(?:run\s+)?test\b'
    r'|\bpytest\b'
    r'|python\d*\s+-m\s+(?:pytest|unittest)\b'
    r'|\bgo\s+test\b'
    r'|\bcargo\s+test\b'
    r'|\b(?:jest|vitest|mocha)\b',
    re.IGNORECASE,
)
_TESTS_FAILING_RE = re.compile(r'\b[1-9]\d*\s+(?:failing|failed)\b', re.IGNORECASE)
_TESTS_PASSING_RE = re.compile(r'\b\d+\s+(?:passing|passed)\b', re.IGNORECASE)

_CHUNK_CLASSES = (ThinkingChunk, RunChunk, EditChunk, LogChunk, ResultChunk, ErrorChunk)


def is_test_command(cmd: str) -> bool:
    return bool(cmd) and bool(_TEST_COMMAND_RE.search(cmd))


def build_timeline(
    chunks: Iterable,
    timing: Mapping[str, Any] | None = None,
    bullet_max_chars: int = BULLET_MAX_CHARS,
) -> AggregateResult:
    """Aggregate chunks into an ordered timeline plus a turn summary.

    Single forward scan. Runs absorb the logs (and their own linked
    error) that immediately follow them; edits absorb the edits that
    immediately follow them. The scan index always moves past an absorbed
    span, so no chunk feeds two entries.

    Accepts chunk objects or their plain-data dicts; anything
    unrecognizable is skipped. Never raises on input shape.
    """
    sequence = _normalize(chunks)
    builder = _TimelineBuilder(sequence)
    timeline = builder.build()
    summary = _summarize(timeline, timing, bullet_max_chars)
    return AggregateResult(summary=summary, timeline=timeline)


def _normalize(chunks) -> list[Chunk]:
    if chunks is None or isinstance(chunks, (str, bytes, dict)):
        return []
    try:
        items = list(chunks)
    except TypeError:
        return []

    result: list[Chunk] = []
    for position, item in enumerate(items, start=1):
        if isinstance(item, _CHUNK_CLASSES):
            result.append(item)
        elif isinstance(item, dict):
            # A dict without seq takes its position so source ids stay distinct
            chunk = chunk_from_dict(item, default_seq=position)
            if chunk is not None:
                result.append(chunk)
    return result


def source_id(chunk: Chunk) -> str:
    """Stable identity of a chunk: its id, else its sequence number."""
    return chunk.id if chunk.id else f"seq-{chunk.seq}"


def _entry_id(kind: EntryKind, source_ids: list[str]) -> str:
    return f"{kind.value}:{source_ids[0]}"


class _TimelineBuilder:
    """Internal scanner over one normalized chunk list."""

    def __init__(self, chunks: list[Chunk]):
        self._chunks = chunks
        self.entries: list[TimelineEntry] = []

    def build(self) -> list[TimelineEntry]:
        i = 0
        while i < len(self._chunks):
            chunk = self._chunks[i]
            if isinstance(chunk, RunChunk):
                i = self._absorb_run(i)
                continue
            if isinstance(chunk, EditChunk):
                i = self._absorb_edits(i)
                continue
            if isinstance(chunk, ThinkingChunk):
                self._add_thinking(chunk)
            elif isinstance(chunk, ResultChunk):
                self._add_final(chunk)
            elif isinstance(chunk, ErrorChunk):
                self._add_error(chunk)
            # Logs not claimed by a run carry no entry of their own
            i += 1
        return self.entries

    def _add_thinking(self, chunk: ThinkingChunk) -> None:
        body = clean_markdown(chunk.text or "")
        if not body:
            return
        ids = [source_id(chunk)]
        self.entries.append(TimelineEntry(
            id=_entry_id(EntryKind.THINKING, ids),
            kind=EntryKind.THINKING,
            status=EntryStatus.DONE,
            title="Thinking",
            body=body,
            source_chunk_ids=ids,
        ))

    def _absorb_run(self, start: int) -> int:
        run: RunChunk = self._chunks[start]
        link_id = run.run_id or run.id
        ids = [source_id(run)]
        logs: list[str] = []
        errors: list[str] = []

        j = start + 1
        while j < len(self._chunks):
            nxt = self._chunks[j]
            if isinstance(nxt, LogChunk):
                if nxt.text and nxt.text.strip():
                    logs.append(nxt.text)
            elif isinstance(nxt, ErrorChunk) and link_id and nxt.run_id == link_id:
                errors.append(nxt.text or "")
            else:
                break
            ids.append(source_id(nxt))
            j += 1

        kind = EntryKind.TEST if is_test_command(run.cmd) else EntryKind.COMMAND
        status = EntryStatus.FAILED if errors else EntryStatus.DONE
        title = (run.cmd or "").strip() or "Run command"

        if kind == EntryKind.TEST:
            if any(_TESTS_FAILING_RE.search(line) for line in logs):
                status = EntryStatus.FAILED
            if status == EntryStatus.FAILED:
                title = "Tests failed"
            elif any(_TESTS_PASSING_RE.search(line) for line in logs):
                title = "Tests passed"

        body_lines = [e for e in errors if e] + logs
        self.entries.append(TimelineEntry(
            id=_entry_id(kind, ids),
            kind=kind,
            status=status,
            title=title,
            body="\n".join(body_lines) or None,
            source_chunk_ids=ids,
        ))
        return j

    def _absorb_edits(self, start: int) -> int:
        ids: list[str] = []
        files: list[str] = []

        j = start
        while j < len(self._chunks) and isinstance(self._chunks[j], EditChunk):
            edit: EditChunk = self._chunks[j]
            ids.append(source_id(edit))
            path = (edit.file or "").strip()
            if path and path not in files:
                files.append(path)
            j += 1

        if not files:
            logger.debug("Edit span %s had no resolvable files; skipped", ids)
            return j

        title = f"Edited {files[0]}" if len(files) == 1 else f"Edited {len(files)} files"
        self.entries.append(TimelineEntry(
            id=_entry_id(EntryKind.FILE_CHANGE, ids),
            kind=EntryKind.FILE_CHANGE,
            status=EntryStatus.DONE,
            title=title,
            body="\n".join(files),
            files=files,
            source_chunk_ids=ids,
        ))
        return j

    def _add_final(self, chunk: ResultChunk) -> None:
        raw = chunk.result_summary or chunk.text or ""
        if not raw.strip():
            return
        ids = [source_id(chunk)]
        body = clean_markdown(strip_file_count(raw))
        self.entries.append(TimelineEntry(
            id=_entry_id(EntryKind.FINAL, ids),
            kind=EntryKind.FINAL,
            status=EntryStatus.DONE,
            title="Result",
            body=body or None,
            source_chunk_ids=ids,
        ))

    def _add_error(self, chunk: ErrorChunk) -> None:
        ids = [source_id(chunk)]
        self.entries.append(TimelineEntry(
            id=_entry_id(EntryKind.ERROR, ids),
            kind=EntryKind.ERROR,
            status=EntryStatus.FAILED,
            title="Error",
            body=chunk.text or None,
            source_chunk_ids=ids,
        ))


def _duration_from(timing) -> int | float | None:
    if not isinstance(timing, Mapping):
        return None
    for key in ("durationMs", "duration_ms"):
        value = timing.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


def _summarize(
    entries: list[TimelineEntry],
    timing,
    bullet_max_chars: int,
) -> TurnSummary:
    failed = any(
        e.status == EntryStatus.FAILED or e.kind == EntryKind.ERROR for e in entries
    )

    tests = [e for e in entries if e.kind == EntryKind.TEST]
    tests_status = None
    if tests:
        any_failed = any(e.status == EntryStatus.FAILED for e in tests)
        tests_status = TestsStatus.FAILED if any_failed else TestsStatus.PASSED

    summary = TurnSummary(
        status=TurnStatus.FAILED if failed else TurnStatus.SUCCESS,
        meta=SummaryMeta(
            duration_ms=_duration_from(timing),
            tests_status=tests_status,
            command_count=sum(1 for e in entries if e.kind in (EntryKind.COMMAND, EntryKind.TEST)),
        ),
    )

    finals = [e for e in entries if e.kind == EntryKind.FINAL and e.body]
    if finals:
        summary.bullets.append(truncate(finals[-1].body, bullet_max_chars))
    return summary
