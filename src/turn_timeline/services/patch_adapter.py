"""Extract per-file change records from Begin/End Patch envelopes."""

import logging
import re

from turn_timeline.types.changes import FileChange, FileOp, OutputType, PatchParseResult, PatchSummary

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Proposed code changes"

_ENVELOPE_RE = re.compile(r'\*\*\* Begin Patch\s+(.*?)\*\*\* End Patch', re.DOTALL)
_FILE_SPLIT_RE = re.compile(r'\n(?=\*\*\* (?:Add|Update|Delete) File: )')
_FILE_HEADER_RE = re.compile(r'\*\*\* (Add|Update|Delete) File: (.+)')

_ADDED_RE = re.compile(r'^\+(?!\+)', re.MULTILINE)
_REMOVED_RE = re.compile(r'^-(?!-)', re.MULTILINE)
_HUNK_RE = re.compile(r'@@')


def count_patch_stats(text: str) -> tuple[int, int, int]:
    """Count (added, removed, hunks) in patch text.

    `+++` / `---` style headers are not counted as line changes.
    """
    if not text:
        return 0, 0, 0
    return (
        len(_ADDED_RE.findall(text)),
        len(_REMOVED_RE.findall(text)),
        len(_HUNK_RE.findall(text)),
    )


def extract_patch_blocks(text: str) -> list[str]:
    """Bodies of every envelope in source order (non-overlapping)."""
    if not isinstance(text, str):
        return []
    return _ENVELOPE_RE.findall(text)


def split_file_sections(block: str) -> list[FileChange]:
    """Split one envelope body into per-file changes.

    Every section is re-wrapped in its own envelope before counting so
    statistics never leak between files of the same envelope.
    """
    changes: list[FileChange] = []
    for section in _FILE_SPLIT_RE.split(block):
        section = section.rstrip("\n")
        if not section:
            continue
        head = _FILE_HEADER_RE.search(section)
        if not head:
            continue
        path = head.group(2).strip()
        if not path:
            continue
        patch = f"*** Begin Patch\n{section}\n*** End Patch"
        added, removed, hunks = count_patch_stats(patch)
        changes.append(FileChange(
            path=path,
            op=FileOp(head.group(1).lower()),
            patch=patch,
            added=added,
            removed=removed,
            hunks=hunks,
        ))
    return changes


def parse_patch_output(stdout: str = "", engine: str = "codex") -> PatchParseResult:
    """Parse free text that may hold patch envelopes.

    Without any envelope the result is plain text: no changes, and the
    trimmed input doubles as title and description.
    """
    raw = stdout if isinstance(stdout, str) else ""
    result = PatchParseResult(
        engine=engine,
        summary=PatchSummary(title=DEFAULT_TITLE),
        raw_output=raw,
    )

    full_text = raw.strip()
    if not full_text:
        return result

    result.summary.title = full_text
    result.summary.description = full_text

    blocks = extract_patch_blocks(raw)
    if not blocks:
        return result

    result.output_type = OutputType.PATCH
    for block in blocks:
        result.changes.extend(split_file_sections(block))
    logger.debug("Parsed %d envelope(s) into %d file change(s)", len(blocks), len(result.changes))
    return result
