"""Defensive accessors for loosely-shaped structured event records."""

import orjson


def first_string(mapping, keys) -> str:
    """Return the first non-empty value among `keys`, as a string."""
    if not isinstance(mapping, dict):
        return ""
    for key in keys:
        value = mapping.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return ""


def as_text(value) -> str:
    """Render a record field as text; containers become compact JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return compact_json(value)
    return str(value)


def compact_json(value) -> str:
    """Compact single-line JSON rendering of tool parameters and records."""
    try:
        return orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS).decode()
    except orjson.JSONEncodeError:
        return str(value)


def as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def optional_id(value) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(value)
    return None


def error_message(event: dict, default: str) -> str:
    """Pull a readable message out of an error record."""
    error = event.get("error")
    if isinstance(error, dict):
        nested = first_string(error, ("message",))
        if nested:
            return nested
    return first_string(event, ("message", "error")) or default
