"""Line-oriented state machine that derives chunks from raw console text."""

import logging
import re
from enum import Enum

from turn_timeline.services.chunk_factory import ChunkFactory
from turn_timeline.types.chunks import Chunk, EditChunk, LogChunk, RunChunk, ThinkingChunk
from turn_timeline.utils.noise_filter import is_noisy_line
from turn_timeline.utils.text_cleaning import split_lines

logger = logging.getLogger(__name__)

_THINKING_MARKER_RE = re.compile(r'^thinking$', re.IGNORECASE)
_EXEC_MARKER_RE = re.compile(r'^exec$', re.IGNORECASE)
_DIFF_HEADER_RE = re.compile(r'^diff --git a/(.+?) b/(.+)')
_SHELL_INVOCATION_RE = re.compile(r'^(?:ba|z)?sh\s+-l?c\s+', re.IGNORECASE)
_STATUS_LINE_RE = re.compile(
    r'^([MAD])\s+(\S*[./]\S*'
    r'|(?:Makefile|Dockerfile|Containerfile|Procfile|Gemfile|Rakefile|Jenkinsfile'
    r'|Vagrantfile|LICEN[CS]E|COPYING|README|CHANGELOG|NOTICE|AUTHORS|CODEOWNERS))$'
)
_EMPHASIS_RE = re.compile(r'^(\*\*|__|\*|_)(.+)\1$')

# Patch-tool chatter that never names a concrete file
_SWALLOWED_RE = re.compile(r'^(?:file update\b|apply_patch\(|\*\*\* (?:Begin|End) Patch)', re.IGNORECASE)

FILLER_THINKING = frozenset({"preparing final message summary"})


class _State(str, Enum):
    DEFAULT = "default"
    EXPECT_RUN = "expect_run"
    EXPECT_THINKING_BODY = "expect_thinking_body"


def derive_chunks_from_text(
    stdout: str = "",
    stderr: str = "",
    factory: ChunkFactory | None = None,
    drop_filler: bool = True,
) -> list[Chunk]:
    """Derive chunks from a backend's plain console output.

    stderr is read before stdout: progress markers usually reach stderr
    before buffered stdout is flushed.
    """
    text = f"{stderr or ''}\n{stdout or ''}"
    return _TextChunkDeriver(factory or ChunkFactory(), drop_filler).feed(text)


class _TextChunkDeriver:
    """Internal state machine for console text.

    Transitions:
    - marker line "thinking" -> EXPECT_THINKING_BODY
    - marker line "exec" -> EXPECT_RUN
    - EXPECT_THINKING_BODY + line -> Thinking (unless filler), back to DEFAULT
    - EXPECT_RUN + line -> Run, back to DEFAULT
    - diff header / shell invocation / status line -> Edit or Run in any state
    - everything else that is not noise -> Log
    """

    def __init__(self, factory: ChunkFactory, drop_filler: bool = True):
        self._factory = factory
        self._drop_filler = drop_filler
        self._state = _State.DEFAULT
        self.chunks: list[Chunk] = []

    def feed(self, text: str) -> list[Chunk]:
        for line in split_lines(text):
            self.process(line.strip())
        if self._state != _State.DEFAULT:
            logger.debug("Input ended while in state %s; marker dropped", self._state.value)
            self._state = _State.DEFAULT
        return self.chunks

    def process(self, line: str) -> None:
        """Process a single stripped line through the state machine."""
        if is_noisy_line(line):
            return

        if _THINKING_MARKER_RE.match(line):
            self._state = _State.EXPECT_THINKING_BODY
            return
        if _EXEC_MARKER_RE.match(line):
            self._state = _State.EXPECT_RUN
            return

        diff = _DIFF_HEADER_RE.match(line)
        if diff and diff.group(2).strip():
            self._emit(EditChunk, file=diff.group(2).strip())
            return

        if self._state == _State.EXPECT_THINKING_BODY:
            self._state = _State.DEFAULT
            self._emit_thinking(line)
            return

        if self._state == _State.EXPECT_RUN:
            self._state = _State.DEFAULT
            self._emit(RunChunk, cmd=line)
            return

        if _SHELL_INVOCATION_RE.match(line):
            self._emit(RunChunk, cmd=line)
            return

        if _SWALLOWED_RE.match(line):
            return

        status = _STATUS_LINE_RE.match(line)
        if status:
            self._emit(EditChunk, file=status.group(2))
            return

        self._emit(LogChunk, stream="mixed", text=line)

    def _emit_thinking(self, line: str) -> None:
        emphasis = _EMPHASIS_RE.match(line)
        title = emphasis.group(2).strip() if emphasis else line
        if not title:
            return
        if self._drop_filler and title.lower() in FILLER_THINKING:
            return
        self._emit(ThinkingChunk, text=title)

    def _emit(self, chunk_cls: type, **fields) -> None:
        self.chunks.append(self._factory.stamp(chunk_cls, **fields))
