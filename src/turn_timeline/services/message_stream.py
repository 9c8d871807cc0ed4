"""MESSAGE-dialect records: messages carrying lists of typed content blocks."""

import logging
import re

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.types.chunks import EditChunk, ErrorChunk, LogChunk, ResultChunk, ThinkingChunk
from turn_timeline.types.events import EventOutput
from turn_timeline.utils.records import as_dict, as_text, compact_json, error_message, first_string

logger = logging.getLogger(__name__)

_EDIT_TOOL_RE = re.compile(r'edit|write|replace', re.IGNORECASE)
_BLOCK_PATH_KEYS = ("path", "file_path", "target", "file")


def message_event_to_chunks(event, factory: ChunkFactory, max_result_lines: int = 0) -> EventOutput:
    """Translate one MESSAGE-dialect record.

    Assistant records nest their blocks under `message.content`; bare
    message records carry them under `content`.
    """
    output = EventOutput()
    if not isinstance(event, dict):
        return output

    event_type = event.get("type")

    # Session init and tool results echoed back as user turns
    if event_type in ("system", "user"):
        return output

    if event_type == "assistant":
        content = as_dict(event.get("message")).get("content")
        if isinstance(content, list):
            for block in content:
                _block_to_chunks(block, factory, output)
            return output

    if event_type == "message" and isinstance(event.get("content"), list):
        for block in event["content"]:
            _block_to_chunks(block, factory, output)
        return output

    if event_type == "result":
        summary_text = first_string(event, ("summary", "result"))
        if summary_text:
            output.summary = summary_text
            output.chunks.append(factory.stamp(ResultChunk, result_summary=summary_text, text=summary_text))
        if event.get("error"):
            output.chunks.append(factory.stamp(ErrorChunk, text=error_message(event, "Result error")))
        return output

    if event_type == "error":
        output.chunks.append(factory.stamp(ErrorChunk, text=error_message(event, "Stream error")))
        return output

    label = event_type if isinstance(event_type, str) and event_type else "event"
    output.chunks.append(factory.stamp(LogChunk, text=f"[{label}] {compact_json(event)}"))
    return output


def _block_to_chunks(block, factory: ChunkFactory, output: EventOutput) -> None:
    if not isinstance(block, dict):
        return
    block_type = block.get("type")

    if block_type == "thinking":
        text = first_string(block, ("text", "thinking"))
        if text:
            output.chunks.append(factory.stamp(ThinkingChunk, text=text))
        return

    if block_type == "text":
        text = as_text(block.get("text"))
        if text:
            output.chunks.append(factory.stamp(LogChunk, text=text))
        return

    if block_type == "tool_use":
        name = as_text(block.get("name"))
        tool_input = as_dict(block.get("input"))
        if _EDIT_TOOL_RE.search(name):
            file = first_string(tool_input, _BLOCK_PATH_KEYS)
            if file:
                output.chunks.append(factory.stamp(EditChunk, file=file))
            else:
                logger.debug("Edit block %r without a resolvable path; dropped", name)
            return
        label = f"[{name}]" if name else "[TOOL]"
        output.chunks.append(factory.stamp(LogChunk, text=f"{label} {compact_json(tool_input)}"))
