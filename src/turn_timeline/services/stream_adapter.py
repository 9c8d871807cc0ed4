"""Translate structured backend event streams into chunks.

Three record dialects are understood:

- STEP: one record per processing step (system, message, tool_call,
  tool_result, completion, result, error).
- ITEM: item lifecycle records (item.started / item.completed carrying a
  typed `item`, plus turn.completed and error).
- MESSAGE: message records whose content is a list of typed blocks
  (assistant, message, result, error).

Every per-record translator is total: any record shape yields an
EventOutput, possibly empty.
"""

import logging
import re
from enum import Enum
from typing import Callable, Iterable

import orjson

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.services.item_stream import item_event_to_chunks
from turn_timeline.services.message_stream import message_event_to_chunks
from turn_timeline.types.chunks import EditChunk, ErrorChunk, LogChunk, ResultChunk, RunChunk, ThinkingChunk
from turn_timeline.types.events import EventOutput, StreamParseResult
from turn_timeline.utils.records import (
    as_dict,
    as_text,
    compact_json,
    error_message,
    first_string,
    optional_id,
)
from turn_timeline.utils.text_cleaning import split_lines

logger = logging.getLogger(__name__)

MAX_RESULT_LINES = 50

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024

SHELL_TOOLS = frozenset({"execute", "shell", "bash", "exec", "run_command", "run_shell_command"})
COMMAND_KEYS = ("command", "cmd", "script", "commandLine")
PATH_KEYS = ("file_path", "path", "file", "target", "targetFile", "target_file", "filename")
READ_PATH_KEYS = ("path", "file_path", "file")

_EDIT_TOOL_RE = re.compile(r'write|edit|replace|create|patch', re.IGNORECASE)
_READ_TOOL_RE = re.compile(r'read|view|cat', re.IGNORECASE)


class StreamDialect(str, Enum):
    STEP = "step"
    ITEM = "item"
    MESSAGE = "message"


def parse_event_lines(text: str) -> list[dict]:
    """Decode JSON Lines output into records.

    Blank, oversized, malformed and non-object lines are skipped; a
    truncated final line is expected while a stream is still running.
    """
    records: list[dict] = []
    for line_num, line in enumerate(split_lines(text), start=1):
        line = line.strip()
        if not line:
            continue
        if len(line) > MAX_LINE_SIZE:
            logger.debug("Line %d exceeds %dMB, skipping", line_num, MAX_LINE_SIZE // (1024 * 1024))
            continue
        try:
            raw = orjson.loads(line)
        except orjson.JSONDecodeError as e:
            logger.debug("Malformed JSON at line %d: %s", line_num, e)
            continue
        if isinstance(raw, dict):
            records.append(raw)
    return records


def step_event_to_chunks(
    event,
    factory: ChunkFactory,
    max_result_lines: int = MAX_RESULT_LINES,
) -> EventOutput:
    """Translate one STEP-dialect record."""
    output = EventOutput()
    if not isinstance(event, dict):
        return output

    event_type = event.get("type")

    # Init metadata and our own echoed prompt carry nothing to show
    if event_type == "system":
        return output
    if event_type == "message" and event.get("role") == "user":
        return output

    if event_type == "message" and event.get("role") == "assistant":
        text = first_string(event, ("text", "content"))
        if text:
            output.chunks.append(factory.stamp(ThinkingChunk, text=text))
        return output

    if event_type == "tool_call":
        _tool_call_to_chunks(event, factory, output)
        return output

    if event_type == "tool_result":
        run_id = optional_id(event.get("id"))
        value = as_text(event.get("value"))
        if event.get("isError") or event.get("is_error"):
            output.chunks.append(factory.stamp(
                ErrorChunk, text=value or "Tool execution failed", run_id=run_id,
            ))
            return output
        lines = [line for line in split_lines(value) if line.strip()]
        for line in lines[:max_result_lines]:
            output.chunks.append(factory.stamp(LogChunk, stream="stdout", text=line, run_id=run_id))
            output.aggregated_text.append(line)
        return output

    if event_type == "completion":
        final_text = as_text(event.get("finalText"))
        if final_text:
            output.summary = final_text
            output.chunks.append(factory.stamp(ResultChunk, result_summary=final_text, text=final_text))
        return output

    if event_type == "result":
        result_text = as_text(event.get("result"))
        if result_text:
            output.summary = result_text
            output.chunks.append(factory.stamp(ResultChunk, result_summary=result_text, text=result_text))
        if event.get("is_error") or event.get("isError"):
            output.chunks.append(factory.stamp(ErrorChunk, text=result_text or "Result error"))
        return output

    if event_type == "error":
        output.chunks.append(factory.stamp(ErrorChunk, text=error_message(event, "Backend error")))
        return output

    # Unknown record types survive only if they carry something readable
    fallback = first_string(event, ("text", "message", "value"))
    if fallback:
        label = event_type if isinstance(event_type, str) and event_type else "event"
        output.chunks.append(factory.stamp(LogChunk, text=f"[{label}] {fallback}"))
    else:
        logger.debug("Dropping record of unknown type %r", event_type)
    return output


def _tool_call_to_chunks(event: dict, factory: ChunkFactory, output: EventOutput) -> None:
    tool_label = first_string(event, ("toolName", "toolId", "name"))
    tool_name = tool_label.lower()
    params = event.get("parameters")
    if params is None:
        params = event.get("input")
    param_map = as_dict(params)

    if tool_name in SHELL_TOOLS:
        cmd = (
            first_string(param_map, COMMAND_KEYS)
            or first_string(event, COMMAND_KEYS)
            or compact_json(params if params is not None else {})
        )
        output.chunks.append(factory.stamp(RunChunk, cmd=cmd, run_id=optional_id(event.get("id"))))
        return

    if _EDIT_TOOL_RE.search(tool_name):
        file = first_string(param_map, PATH_KEYS) or first_string(event, PATH_KEYS)
        if file:
            output.chunks.append(factory.stamp(EditChunk, file=file))
        else:
            logger.debug("Edit tool %r without a resolvable path; dropped", tool_label)
        return

    if _READ_TOOL_RE.search(tool_name):
        file = first_string(param_map, READ_PATH_KEYS)
        output.chunks.append(factory.stamp(LogChunk, text=f"[Read] {file}".rstrip()))
        return

    label = tool_label or "TOOL"
    rendered = compact_json(params if params is not None else {})
    output.chunks.append(factory.stamp(LogChunk, text=f"[{label}] {rendered}"))


_TRANSLATORS: dict[StreamDialect, Callable[..., EventOutput]] = {
    StreamDialect.STEP: step_event_to_chunks,
    StreamDialect.ITEM: item_event_to_chunks,
    StreamDialect.MESSAGE: message_event_to_chunks,
}


def adapt_records(
    records: Iterable,
    dialect: StreamDialect = StreamDialect.STEP,
    factory: ChunkFactory | None = None,
    max_result_lines: int = MAX_RESULT_LINES,
) -> StreamParseResult:
    """Translate a sequence of already-decoded records into one result.

    The first record that yields a summary wins; later completions never
    overwrite it.
    """
    factory = factory or ChunkFactory()
    translate = _TRANSLATORS[StreamDialect(dialect)]
    result = StreamParseResult()
    aggregated: list[str] = []

    for record in records or ():
        if not isinstance(record, dict):
            continue
        if record.get("type") == "turn.completed" and isinstance(record.get("usage"), dict):
            result.usage = record["usage"]
        partial = translate(record, factory, max_result_lines=max_result_lines)
        if partial.summary and not result.summary:
            result.summary = partial.summary
        result.chunks.extend(partial.chunks)
        aggregated.extend(partial.aggregated_text)

    result.aggregated_text = "\n".join(aggregated)
    return result


def parse_stream_output(
    text: str,
    dialect: StreamDialect = StreamDialect.STEP,
    factory: ChunkFactory | None = None,
    max_result_lines: int = MAX_RESULT_LINES,
) -> StreamParseResult:
    """Decode JSON Lines stdout and translate it in one go."""
    return adapt_records(parse_event_lines(text), dialect, factory, max_result_lines)
