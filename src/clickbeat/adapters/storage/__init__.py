"""Storage adapters implementing EventSinkPort."""

from clickbeat.adapters.storage.clickhouse import ClickHouseBatchWriter
from clickbeat.adapters.storage.in_memory import InMemoryEventSink

__all__ = [
    "ClickHouseBatchWriter",
    "InMemoryEventSink",
]
