"""Services for turn timelines."""

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.services.text_adapter import derive_chunks_from_text
from turn_timeline.services.stream_adapter import (
    StreamDialect,
    adapt_records,
    parse_event_lines,
    parse_stream_output,
)
from turn_timeline.services.patch_adapter import parse_patch_output
from turn_timeline.services.timeline_builder import build_timeline
from turn_timeline.services.backends import Backend, OutputFormat, adapt_output
from turn_timeline.services.config_manager import ConfigError, ConfigManager
from turn_timeline.services.turn_session import TurnSession

__all__ = [
    "ChunkFactory",
    "derive_chunks_from_text",
    "StreamDialect",
    "adapt_records",
    "parse_event_lines",
    "parse_stream_output",
    "parse_patch_output",
    "build_timeline",
    "Backend",
    "OutputFormat",
    "adapt_output",
    "ConfigError",
    "ConfigManager",
    "TurnSession",
]
