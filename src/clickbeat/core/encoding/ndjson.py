"""NDJSON helpers for producer input and JSONEachRow output."""

import json
from collections.abc import Iterable, Mapping
from typing import Any


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def loads(text: str | bytes) -> Any:
    """Decode JSON text, rejecting NaN and Infinity literals.

    Raises:
        ValueError: If the text is not standard JSON (json.JSONDecodeError
            is a ValueError subclass).
        RecursionError: If the text nests deeper than the interpreter allows.
    """
    return json.loads(text, parse_constant=_reject_constant)


def decode_object(text: str | bytes) -> dict[str, Any] | None:
    """Decode one JSON object.

    Returns:
        The object, or None if the text is not valid JSON or decodes to
        something other than an object.
    """
    try:
        value = loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def dumps(obj: Any) -> str:
    """Encode a value as compact JSON.

    Raises:
        TypeError: If the value holds a non-JSON type.
        ValueError: If the value holds NaN or an infinite float.
        RecursionError: If the value nests deeper than the interpreter allows.
    """
    return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=(",", ":"))


def encode_rows(rows: Iterable[Mapping[str, Any]]) -> str:
    """Encode rows to newline-delimited JSON.

    Args:
        rows: Column mappings, one per record.

    Returns:
        One JSON object per line, joined with ``\\n`` and without a
        trailing newline. Empty string if there are no rows.
    """
    return "\n".join(dumps(row) for row in rows)
