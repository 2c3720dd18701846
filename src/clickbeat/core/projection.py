"""Projection of canonical events onto the flat storage row."""

from typing import Any

from clickbeat.core.encoding.ndjson import dumps
from clickbeat.core.models import CanonicalEvent, ProjectedRecord
from clickbeat.core.normalize import event_to_dict
from clickbeat.core.timestamps import format_column


def _string(mapping: dict[str, Any], key: str) -> str | None:
    value = mapping.get(key)
    return value if isinstance(value, str) else None


def _object(mapping: dict[str, Any], key: str) -> dict[str, Any]:
    value = mapping.get(key)
    return value if isinstance(value, dict) else {}


def project_event(event: CanonicalEvent) -> ProjectedRecord:
    """Build the storage row for an event.

    Scalar columns are filled only from string values at their known
    locations; anything else leaves the column out of the row.

    Raises:
        TypeError: If the event holds a value that is not JSON-serializable.
        ValueError: If the event holds NaN or an infinite float.
        RecursionError: If the event nests deeper than the encoder allows.
    """
    container = _string(event.container, "name")
    if container is None:
        container = _string(event.container, "id")
    docker_container = _object(event.docker, "container")
    log_file = _object(event.log, "file")
    return ProjectedRecord(
        timestamp=format_column(event.timestamp),
        message=event.message,
        raw_json=dumps(event_to_dict(event)),
        container=container,
        host_name=_string(event.host, "name"),
        docker_container_id=_string(docker_container, "id"),
        docker_container_name=_string(docker_container, "name"),
        agent_name=_string(event.agent, "name"),
        agent_version=_string(event.agent, "version"),
        log_file_path=_string(log_file, "path"),
    )
