"""Output types shared by the structured-event adapters."""

from dataclasses import dataclass, field
from typing import Any, Optional

from turn_timeline.types.chunks import Chunk


@dataclass
class EventOutput:
    """What one structured record translates into."""
    chunks: list[Chunk] = field(default_factory=list)
    aggregated_text: list[str] = field(default_factory=list)
    summary: Optional[str] = None


@dataclass
class StreamParseResult:
    """Accumulated output of a whole structured stream."""
    chunks: list[Chunk] = field(default_factory=list)
    aggregated_text: str = ""
    summary: Optional[str] = None
    usage: Optional[dict] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunks": [chunk.to_dict() for chunk in self.chunks],
            "aggregatedText": self.aggregated_text,
            "summary": self.summary,
            "usage": self.usage,
        }
