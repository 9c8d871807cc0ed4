"""Per-turn chunk stamping.

A ChunkFactory owns the sequence counter for exactly one execution turn.
Create one per turn and pass it into every adapter call for that turn.
"""

import time
from typing import Callable

from turn_timeline.types.chunks import Chunk


def _now_ms() -> int:
    return int(time.time() * 1000)


class ChunkFactory:
    """Assigns `seq` (strictly increasing) and `ts` to new chunks."""

    def __init__(self, id_prefix: str | None = None, clock: Callable[[], int] = _now_ms):
        self._seq = 0
        self._id_prefix = id_prefix
        self._clock = clock

    @property
    def last_seq(self) -> int:
        return self._seq

    def stamp(self, chunk_cls: type, **fields) -> Chunk:
        """Build a chunk of `chunk_cls` with the next sequence number."""
        self._seq += 1
        if self._id_prefix and "id" not in fields:
            fields["id"] = f"{self._id_prefix}-{self._seq}"
        return chunk_cls(seq=self._seq, ts=self._clock(), **fields)
