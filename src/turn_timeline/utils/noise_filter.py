"""Detect boilerplate console lines that carry no turn content.

Patterns are anchored and specific. Letting some noise through as a log
line is acceptable; dropping real output is not.
"""

import re

# Environment banners and CLI preamble headers
_BANNER_PATTERNS = [
    re.compile(r'^nvm is not compatible with the "npm_config_prefix"', re.IGNORECASE),
    re.compile(r'^Run `unset npm_config_prefix`', re.IGNORECASE),
    re.compile(r'^OpenAI Codex v[0-9.]+', re.IGNORECASE),
    re.compile(r'^-{4,}$'),
    re.compile(r'^workdir:', re.IGNORECASE),
    re.compile(r'^model:', re.IGNORECASE),
    re.compile(r'^provider:', re.IGNORECASE),
    re.compile(r'^approval:', re.IGNORECASE),
    re.compile(r'^sandbox:', re.IGNORECASE),
    re.compile(r'^reasoning effort:', re.IGNORECASE),
    re.compile(r'^reasoning summaries:', re.IGNORECASE),
    re.compile(r'^session id:', re.IGNORECASE),
    re.compile(r'^GET /health\b', re.IGNORECASE),
]

# Lines that only appear in plain console transcripts
_CONSOLE_PATTERNS = [
    re.compile(r'^Reading prompt from stdin\.\.\.', re.IGNORECASE),
    re.compile(r'^tokens used$', re.IGNORECASE),
    re.compile(r'^Execute completed in \d+ms:', re.IGNORECASE),
    re.compile(r'^user$', re.IGNORECASE),
]

# Prompt scaffolding the host injects when building the backend prompt
_PROMPT_PATTERNS = [
    re.compile(r'^\[@(element|screenshot)\d+\]', re.IGNORECASE),
    re.compile(r'^#\s+User Intent\b'),
    re.compile(r'^#\s+Context Reference Map\b'),
    re.compile(r'^#\s+Detailed Element Context\b'),
    re.compile(r'^#\s+Instructions\b'),
    re.compile(r'^#\s+Selection Area\b'),
    re.compile(r'^##\s+Selected Elements\b'),
    re.compile(r'^##\s+Screenshots\b'),
    re.compile(r'^- Page:\s+', re.IGNORECASE),
    re.compile(r'^- Title:\s+', re.IGNORECASE),
    re.compile(r'^- Selection Mode:\s+', re.IGNORECASE),
    re.compile(r'^- \*\*@element[0-9]+\*\*', re.IGNORECASE),
    re.compile(r"^- The user's intent may reference tags like ", re.IGNORECASE),
    re.compile(r'^- Use the Reference Map above', re.IGNORECASE),
    re.compile(r'^- Apply changes ONLY to the referenced elements', re.IGNORECASE),
    re.compile(r'^- For WYSIWYG edits, apply the exact before→after changes shown', re.IGNORECASE),
    re.compile(r'^- Modify files directly; maintain code quality and accessibility', re.IGNORECASE),
    re.compile(r'^</?details>$', re.IGNORECASE),
    re.compile(r'^</?summary>'),
    re.compile(r'^HTML$'),
    re.compile(r'^Styles$'),
]

# Punctuation-only and JSON fragment lines
_FRAGMENT_PATTERNS = [
    re.compile(r'^[\[\]{}(),;:]+$'),
    re.compile(r'^"[^"]+":\s+'),
    re.compile(r'^[0-9,]+$'),
    re.compile(r'^```'),
]

_ALL_PATTERNS = _BANNER_PATTERNS + _CONSOLE_PATTERNS + _PROMPT_PATTERNS + _FRAGMENT_PATTERNS


def is_noisy_line(line) -> bool:
    """Return True when a console line is known boilerplate (or empty)."""
    if line is None:
        return True
    text = str(line).strip()
    if not text:
        return True
    return any(pattern.search(text) for pattern in _ALL_PATTERNS)


def is_noisy_log_line(line) -> bool:
    """Narrower check for command output captured by structured streams.

    Only environment banners and preamble headers are dropped; prompt
    scaffolding and JSON-looking lines can be legitimate program output.
    """
    if line is None:
        return True
    text = str(line).strip()
    if not text:
        return True
    return any(pattern.search(text) for pattern in _BANNER_PATTERNS)
