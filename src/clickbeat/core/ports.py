"""Port interfaces for sinks and producers.

These protocols define the contracts that adapters must implement.
The core pipeline depends only on these interfaces, not concrete
implementations.
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from clickbeat.core.models import CanonicalEvent, WriteResult


@runtime_checkable
class EventSinkPort(Protocol):
    """Port for writing batches of canonical events.

    Adapters implementing this protocol persist a whole batch at once.
    Examples: ClickHouseBatchWriter, InMemoryEventSink.
    """

    def write(self, events: Sequence[CanonicalEvent]) -> WriteResult:
        """Write a batch of events.

        Args:
            events: Events in the order they were parsed.

        Returns:
            WriteResult describing the outcome for the whole batch.
        """
        ...


@runtime_checkable
class ProducerPort(Protocol):
    """Port for non-HTTP log sources.

    A producer is polled from its own thread; every call returns the JSON
    objects that arrived since the previous call.
    Examples: FileTailProducer, TCPLineProducer, KafkaSource, RedisSource.
    """

    name: str

    def poll(self) -> list[dict[str, Any]]:
        """Return the next batch of generic JSON objects (may be empty)."""
        ...

    def close(self) -> None:
        """Release any resources held by the producer."""
        ...
