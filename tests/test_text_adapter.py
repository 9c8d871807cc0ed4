"""Tests for turn_timeline.services.text_adapter."""

import pytest

from turn_timeline.services.text_adapter import derive_chunks_from_text
from turn_timeline.types.chunks import EditChunk, LogChunk, RunChunk, ThinkingChunk


def _shape(chunks):
    return [(type(c).__name__, getattr(c, "text", None) or getattr(c, "cmd", None) or getattr(c, "file", None))
            for c in chunks]


# ---------------------------------------------------------------------------
# 1. Markers
# ---------------------------------------------------------------------------

def test_thinking_then_exec(factory):
    chunks = derive_chunks_from_text("thinking\n**Investigating bug**\n\nexec\nls -la\n", factory=factory)
    assert _shape(chunks) == [
        ("ThinkingChunk", "Investigating bug"),
        ("RunChunk", "ls -la"),
    ]
    assert [c.seq for c in chunks] == [1, 2]


def test_thinking_without_emphasis(factory):
    chunks = derive_chunks_from_text("thinking\nReading the config\n", factory=factory)
    assert isinstance(chunks[0], ThinkingChunk)
    assert chunks[0].text == "Reading the config"


def test_filler_thinking_dropped(factory):
    chunks = derive_chunks_from_text("thinking\n**Preparing final message summary**\n", factory=factory)
    assert chunks == []


def test_filler_thinking_kept_when_disabled(factory):
    chunks = derive_chunks_from_text(
        "thinking\n**Preparing final message summary**\n", factory=factory, drop_filler=False,
    )
    assert _shape(chunks) == [("ThinkingChunk", "Preparing final message summary")]


def test_thinking_state_resets_after_one_line(factory):
    chunks = derive_chunks_from_text("thinking\nfirst\nsecond\n", factory=factory)
    assert isinstance(chunks[0], ThinkingChunk)
    assert isinstance(chunks[1], LogChunk)
    assert chunks[1].text == "second"


@pytest.mark.parametrize("text", ["thinking\n", "exec\n", "thinking", "exec\n\n\n"])
def test_unresolved_marker_produces_nothing(factory, text):
    assert derive_chunks_from_text(text, factory=factory) == []


# ---------------------------------------------------------------------------
# 2. Edits and runs detected in any state
# ---------------------------------------------------------------------------

def test_diff_header_emits_edit(factory):
    chunks = derive_chunks_from_text("diff --git a/src/old.js b/src/new.js\n", factory=factory)
    assert _shape(chunks) == [("EditChunk", "src/new.js")]


def test_diff_header_while_expecting_run(factory):
    """A diff header is an edit even right after an exec marker."""
    chunks = derive_chunks_from_text("exec\ndiff --git a/x.py b/x.py\nmake build\n", factory=factory)
    assert _shape(chunks) == [("EditChunk", "x.py"), ("RunChunk", "make build")]


def test_inline_shell_invocation(factory):
    chunks = derive_chunks_from_text("bash -lc 'npm test'\n", factory=factory)
    assert _shape(chunks) == [("RunChunk", "bash -lc 'npm test'")]


@pytest.mark.parametrize("line,path", [
    ("M src/app.js", "src/app.js"),
    ("A README.md", "README.md"),
    ("D old/legacy.py", "old/legacy.py"),
])
def test_status_code_lines(factory, line, path):
    chunks = derive_chunks_from_text(line, factory=factory)
    assert _shape(chunks) == [("EditChunk", path)]


def test_status_letter_in_prose_is_a_log(factory):
    chunks = derive_chunks_from_text("A quick summary of the fix\n", factory=factory)
    assert isinstance(chunks[0], LogChunk)


@pytest.mark.parametrize("line", [
    "file update:",
    "file update",
    "apply_patch(",
    "*** Begin Patch",
    "*** End Patch",
])
def test_patch_chatter_is_swallowed(factory, line):
    assert derive_chunks_from_text(line, factory=factory) == []


# ---------------------------------------------------------------------------
# 3. Logs, noise and ordering
# ---------------------------------------------------------------------------

def test_remaining_lines_become_mixed_logs(factory):
    chunks = derive_chunks_from_text("Compiled successfully\n", factory=factory)
    assert len(chunks) == 1
    assert isinstance(chunks[0], LogChunk)
    assert chunks[0].stream == "mixed"
    assert chunks[0].text == "Compiled successfully"


def test_stderr_comes_first(factory):
    chunks = derive_chunks_from_text(stdout="from stdout", stderr="from stderr", factory=factory)
    assert [c.text for c in chunks] == ["from stderr", "from stdout"]


def test_crlf_and_whitespace(factory):
    chunks = derive_chunks_from_text("  exec\r\n  ls  \r\n", factory=factory)
    assert _shape(chunks) == [("RunChunk", "ls")]


def test_console_transcript(factory, console_text):
    chunks = derive_chunks_from_text(console_text, factory=factory)
    assert _shape(chunks) == [
        ("LogChunk", "Make the CTA blue"),
        ("ThinkingChunk", "Locating CTA styles"),
        ("RunChunk", "bash -lc 'rg -n \"cta\" styles.css'"),
        ("LogChunk", "styles.css:40:.cta { background: red; }"),
        ("EditChunk", "styles.css"),
        ("EditChunk", "styles.css"),
        ("LogChunk", "Updated the CTA background to blue."),
    ]


def test_noise_never_logged(factory, console_text):
    texts = [c.text for c in derive_chunks_from_text(console_text, factory=factory) if isinstance(c, LogChunk)]
    for noisy in ("session id: 0199a1b2-c3d4", "OpenAI Codex v0.46.0 (research preview)", "{", "}"):
        assert noisy not in texts


def test_empty_input(factory):
    assert derive_chunks_from_text("", "", factory=factory) == []
    assert derive_chunks_from_text(None, None, factory=factory) == []


def test_default_factory():
    chunks = derive_chunks_from_text("exec\nls\n")
    assert isinstance(chunks[0], RunChunk)
    assert chunks[0].seq == 1


def test_edit_never_has_placeholder_name(factory):
    chunks = derive_chunks_from_text("file update:\napply_patch(\nM unknown\n", factory=factory)
    assert not any(isinstance(c, EditChunk) for c in chunks)


@pytest.mark.parametrize("line", ["[", "]", "},", "],", "});"])
def test_json_punctuation_lines_dropped(factory, line):
    assert derive_chunks_from_text(f"{line}\n", factory=factory) == []


@pytest.mark.parametrize("line,path", [
    ("M Makefile", "Makefile"),
    ("D LICENSE", "LICENSE"),
    ("A Dockerfile", "Dockerfile"),
])
def test_status_code_lines_extensionless_files(factory, line, path):
    chunks = derive_chunks_from_text(line, factory=factory)
    assert _shape(chunks) == [("EditChunk", path)]
