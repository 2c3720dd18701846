"""Decoding of whole request bodies for the JSON entry points."""

from typing import Any

from clickbeat.core.encoding.ndjson import loads
from clickbeat.core.errors import EventShapeError
from clickbeat.core.models import CanonicalEvent
from clickbeat.core.normalize import bind_canonical, normalize_event


def _decode(body: bytes) -> Any:
    try:
        return loads(body)
    except (ValueError, RecursionError) as error:
        raise EventShapeError(f"invalid JSON: {error}") from error


def decode_logstash(body: bytes) -> list[CanonicalEvent]:
    """Decode a Logstash HTTP output body.

    The body is either an array of objects or a single object; both are
    normalized permissively.

    Raises:
        EventShapeError: If the body is not JSON, or is neither an array of
            objects nor an object.
    """
    value = _decode(body)
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise EventShapeError("array elements must be JSON objects")
        return [normalize_event(item) for item in value]
    if isinstance(value, dict):
        return [normalize_event(value)]
    kind = type(value).__name__
    raise EventShapeError(f"expected a JSON array or object, got {kind}")


def decode_event_array(body: bytes) -> list[CanonicalEvent]:
    """Decode a strict array of canonical-shaped events.

    Raises:
        EventShapeError: If the body is not a JSON array or any element does
            not have the canonical shape.
    """
    value = _decode(body)
    if not isinstance(value, list):
        raise EventShapeError(f"expected a JSON array, got {type(value).__name__}")
    return [bind_canonical(item) for item in value]


def decode_single_event(body: bytes) -> CanonicalEvent:
    """Decode exactly one canonical-shaped event.

    Raises:
        EventShapeError: If the body is not a canonical-shaped JSON object.
    """
    return bind_canonical(_decode(body))
