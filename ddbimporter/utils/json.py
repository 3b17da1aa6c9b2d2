"""JSON helpers for TEXT columns.

Documents keep their `data` and `flags` as JSON objects; settings keep any
JSON scalar. Both readers tolerate rows written by hand or by older builds.
"""

import json
from typing import Any


def parse_json_field(raw: str | dict | None) -> dict[str, Any] | None:
    """Parse a JSON string or dict, returning None on failure or empty.

    For document data and flags columns.
    Returns None for: None, empty string, empty dict, invalid JSON, non-dict JSON.
    """
    if raw is None:
        return None
    if isinstance(raw, dict):
        return raw if raw else None
    if isinstance(raw, str):
        if not raw:
            return None
        try:
            parsed = json.loads(raw)
            if isinstance(parsed, dict) and parsed:
                return parsed
        except (ValueError, TypeError):
            pass
    return None


def parse_json_value(raw: str | None, default: Any = None) -> Any:
    """Decode a stored JSON value, falling back to `default`.

    Unlike parse_json_field, scalars (strings, booleans, numbers) are valid.
    Returns `default` for: None, empty string, invalid JSON.
    """
    if raw is None or raw == "":
        return default
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return default


def dump_json_field(value: dict[str, Any] | None) -> str:
    """Serialize a dict column. None and empty dicts become '{}'."""
    return json.dumps(value or {}, sort_keys=True)
