"""Core domain models for shipped log events."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CanonicalEvent:
    """A normalized log event.

    Attributes:
        timestamp: Resolved, timezone-aware instant of the event.
        message: The log line. Empty when the producer sent none.
        fields: Custom fields block (Beats ``fields``).
        container: Container metadata.
        host: Host metadata.
        docker: Docker metadata.
        agent: Shipping agent metadata.
        log: Log source metadata (e.g. ``log.file.path``).
        extra: Every other top-level key, preserved as received.
    """

    timestamp: datetime
    message: str = ""
    fields: dict[str, Any] = field(default_factory=dict)
    container: dict[str, Any] = field(default_factory=dict)
    host: dict[str, Any] = field(default_factory=dict)
    docker: dict[str, Any] = field(default_factory=dict)
    agent: dict[str, Any] = field(default_factory=dict)
    log: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectedRecord:
    """A flattened row ready for a JSONEachRow insert.

    Optional columns are ``None`` when the source value is missing and are
    left out of the encoded row.

    Attributes:
        timestamp: Event time formatted as ``YYYY-MM-DD HH:MM:SS`` (UTC).
        message: The log line.
        raw_json: The whole event serialized as JSON.
    """

    timestamp: str
    message: str
    raw_json: str
    container: str | None = None
    host_name: str | None = None
    docker_container_id: str | None = None
    docker_container_name: str | None = None
    agent_name: str | None = None
    agent_version: str | None = None
    log_file_path: str | None = None

    def to_row(self) -> dict[str, str]:
        """Return the sparse column mapping for this record."""
        row = {"timestamp": self.timestamp, "message": self.message}
        for column in _OPTIONAL_COLUMNS:
            value = getattr(self, column)
            if value is not None:
                row[column] = value
        row["raw_json"] = self.raw_json
        return row


_OPTIONAL_COLUMNS = (
    "container",
    "host_name",
    "docker_container_id",
    "docker_container_name",
    "agent_name",
    "agent_version",
    "log_file_path",
)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of writing one batch to a sink.

    Attributes:
        ok: True when the whole batch was accepted.
        reason: Failure description, None on success.
        written: Number of records sent to the store.
    """

    ok: bool
    reason: str | None = None
    written: int = 0

    @classmethod
    def success(cls, written: int = 0) -> "WriteResult":
        return cls(ok=True, written=written)

    @classmethod
    def failure(cls, reason: str) -> "WriteResult":
        return cls(ok=False, reason=reason)
