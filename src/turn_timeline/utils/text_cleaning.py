"""Small text helpers for timeline titles and bodies."""

import re

_FILE_COUNT_RE = re.compile(r'Updated\s+\d+\s+files?\.?', re.IGNORECASE)
_BOLD_RE = re.compile(r'\*\*(.*?)\*\*')
_ITALIC_RE = re.compile(r'\*(.*?)\*')
_CODE_RE = re.compile(r'`(.*?)`')


def strip_file_count(text: str) -> str:
    """Remove the 'Updated N file(s).' boilerplate some backends append."""
    if not text:
        return ""
    return _FILE_COUNT_RE.sub("", text).strip()


def clean_markdown(text: str) -> str:
    """Strip inline bold, italic and code markers."""
    if not text:
        return ""
    result = _BOLD_RE.sub(r'\1', text)
    result = _ITALIC_RE.sub(r'\1', result)
    result = _CODE_RE.sub(r'\1', result)
    return result.strip()


def truncate(text: str, max_chars: int) -> str:
    """Cut text to at most max_chars, ending with an ellipsis when cut."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    if max_chars == 1:
        return "…"
    return text[:max_chars - 1] + "…"


def split_lines(value) -> list[str]:
    """Split text on CR/LF, trimming trailing whitespace from every line."""
    if not value:
        return []
    return [line.rstrip() for line in re.split(r'\r?\n', str(value))]
