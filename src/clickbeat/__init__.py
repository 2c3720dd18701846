"""clickbeat - ship Beats and Logstash log events into ClickHouse.

Accepts events in Elasticsearch bulk, Logstash HTTP and plain JSON shapes,
normalizes them into one canonical event and inserts batches through the
ClickHouse HTTP interface.
"""

from clickbeat.adapters.frameworks.fastapi import create_ingest_router
from clickbeat.adapters.producers import IngestPump
from clickbeat.adapters.storage import ClickHouseBatchWriter, InMemoryEventSink
from clickbeat.app import create_app
from clickbeat.core.bulk import parse_bulk
from clickbeat.core.config import AppConfig, ClickHouseConfig, load_config
from clickbeat.core.errors import ClickbeatError, ConfigError, EventShapeError
from clickbeat.core.models import CanonicalEvent, ProjectedRecord, WriteResult
from clickbeat.core.normalize import bind_canonical, event_to_dict, normalize_event
from clickbeat.core.ports import EventSinkPort, ProducerPort
from clickbeat.core.projection import project_event
from clickbeat.core.timestamps import resolve_timestamp

__all__ = [
    "AppConfig",
    "CanonicalEvent",
    "ClickHouseBatchWriter",
    "ClickHouseConfig",
    "ClickbeatError",
    "ConfigError",
    "EventShapeError",
    "EventSinkPort",
    "InMemoryEventSink",
    "IngestPump",
    "ProducerPort",
    "ProjectedRecord",
    "WriteResult",
    "bind_canonical",
    "create_app",
    "create_ingest_router",
    "event_to_dict",
    "load_config",
    "normalize_event",
    "parse_bulk",
    "project_event",
    "resolve_timestamp",
]
