"""Conversion of loosely-typed JSON objects into canonical events.

Two entry points share the CanonicalEvent output:

- ``normalize_event`` is permissive. Mistyped known keys are kept in
  ``extra`` and never fail the conversion.
- ``bind_canonical`` is strict and is used where the request body must
  already have the canonical shape. Mistyped keys raise EventShapeError.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from clickbeat.core.errors import EventShapeError
from clickbeat.core.models import CanonicalEvent
from clickbeat.core.timestamps import format_rfc3339, resolve_timestamp

TIMESTAMP_KEY = "@timestamp"
MESSAGE_KEY = "message"

# Sub-objects recognized by the permissive normalizer. ``fields`` is only
# bound by the strict path; here it is kept in ``extra``.
SUB_OBJECT_KEYS = ("container", "host", "docker", "agent", "log")

# Serialization order for event_to_dict.
_ALL_SUB_OBJECTS = ("fields", *SUB_OBJECT_KEYS)


def normalize_event(obj: dict[str, Any]) -> CanonicalEvent:
    """Convert a generic JSON object into a CanonicalEvent.

    Args:
        obj: Decoded JSON object from a producer.

    Returns:
        The canonical event. The input mapping is not modified.
    """
    message = obj.get(MESSAGE_KEY)
    sub_objects: dict[str, dict[str, Any]] = {}
    extra: dict[str, Any] = {}

    for key, value in obj.items():
        if key in (TIMESTAMP_KEY, MESSAGE_KEY):
            continue
        if key in SUB_OBJECT_KEYS and isinstance(value, dict):
            sub_objects[key] = value
        else:
            extra[key] = value

    return CanonicalEvent(
        timestamp=resolve_timestamp(obj.get(TIMESTAMP_KEY)),
        message=message if isinstance(message, str) else "",
        extra=extra,
        **sub_objects,
    )


class _CanonicalShape(BaseModel):
    """Strict request shape of a canonical event."""

    model_config = ConfigDict(extra="allow")

    timestamp: Any = Field(default=None, alias=TIMESTAMP_KEY)
    message: StrictStr | None = None
    fields_: dict[str, Any] | None = Field(default=None, alias="fields")
    container: dict[str, Any] | None = None
    host: dict[str, Any] | None = None
    docker: dict[str, Any] | None = None
    agent: dict[str, Any] | None = None
    log: dict[str, Any] | None = None


def bind_canonical(obj: Any) -> CanonicalEvent:
    """Bind an object that must already have the canonical event shape.

    ``message`` must be a string or null and every sub-object must be an
    object or null. Unknown keys are kept in ``extra``.

    Args:
        obj: Decoded JSON value.

    Returns:
        The canonical event.

    Raises:
        EventShapeError: If the value is not an object or a key has the
            wrong type.
    """
    if not isinstance(obj, dict):
        raise EventShapeError(f"expected a JSON object, got {type(obj).__name__}")
    try:
        shape = _CanonicalShape.model_validate(obj)
    except ValidationError as error:
        raise EventShapeError(str(error)) from error
    return CanonicalEvent(
        timestamp=resolve_timestamp(shape.timestamp),
        message=shape.message or "",
        fields=shape.fields_ or {},
        container=shape.container or {},
        host=shape.host or {},
        docker=shape.docker or {},
        agent=shape.agent or {},
        log=shape.log or {},
        extra=dict(shape.model_extra or {}),
    )


def event_to_dict(event: CanonicalEvent) -> dict[str, Any]:
    """Serialize a CanonicalEvent back to its generic JSON form.

    Empty sub-objects are omitted and ``extra`` keys are merged at the top
    level, so ``normalize_event(event_to_dict(e)) == e`` for events produced
    by ``normalize_event``.
    """
    result: dict[str, Any] = {
        TIMESTAMP_KEY: format_rfc3339(event.timestamp),
        MESSAGE_KEY: event.message,
    }
    for key in _ALL_SUB_OBJECTS:
        value = getattr(event, key)
        if value:
            result[key] = value
    for key, value in event.extra.items():
        result.setdefault(key, value)
    return result
