"""ITEM-dialect records: item.started / item.completed lifecycle events."""

import logging

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.types.chunks import ErrorChunk, LogChunk, ResultChunk, RunChunk, ThinkingChunk
from turn_timeline.types.events import EventOutput
from turn_timeline.utils.noise_filter import is_noisy_log_line
from turn_timeline.utils.records import as_dict, as_text, error_message, optional_id
from turn_timeline.utils.text_cleaning import split_lines

logger = logging.getLogger(__name__)


def item_event_to_chunks(event, factory: ChunkFactory, max_result_lines: int = 0) -> EventOutput:
    """Translate one ITEM-dialect record.

    `max_result_lines` caps the log lines taken from one command's output;
    0 keeps them all.
    """
    output = EventOutput()
    if not isinstance(event, dict):
        return output

    event_type = event.get("type")
    item = as_dict(event.get("item"))
    item_type = item.get("type")

    if event_type == "item.completed" and item_type == "reasoning":
        text = as_text(item.get("text"))
        if text:
            output.chunks.append(factory.stamp(ThinkingChunk, text=text))
        return output

    if event_type == "item.started" and item_type == "command_execution":
        output.chunks.append(factory.stamp(
            RunChunk, cmd=as_text(item.get("command")), run_id=optional_id(item.get("id")),
        ))
        return output

    if event_type == "item.completed" and item_type == "command_execution":
        run_id = optional_id(item.get("id"))
        lines = [
            line.strip() for line in split_lines(as_text(item.get("aggregated_output")))
            if not is_noisy_log_line(line)
        ]
        if max_result_lines > 0:
            lines = lines[:max_result_lines]
        for line in lines:
            output.chunks.append(factory.stamp(LogChunk, stream="stdout", text=line, run_id=run_id))
            output.aggregated_text.append(line)

        exit_code = _exit_code(item.get("exit_code"))
        if exit_code:
            output.chunks.append(factory.stamp(
                ErrorChunk, text=f"Command failed with exit code {exit_code}", run_id=run_id,
            ))
        return output

    if event_type == "item.completed" and item_type == "agent_message":
        text = as_text(item.get("text"))
        if text:
            output.summary = text
            output.chunks.append(factory.stamp(ResultChunk, result_summary=text, text=text))
        return output

    if event_type == "error":
        output.chunks.append(factory.stamp(ErrorChunk, text=error_message(event, "Backend error")))
        return output

    logger.debug("Ignoring %r record (item type %r)", event_type, item_type)
    return output


def _exit_code(value) -> int:
    """Numeric exit code, or 0 when absent or unparseable."""
    if isinstance(value, bool) or value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
