"""In-memory event sink."""

import threading
from collections.abc import Sequence

from clickbeat.core.models import CanonicalEvent, WriteResult


class InMemoryEventSink:
    """In-memory implementation of EventSinkPort.

    Keeps every written batch in a list. Suitable for testing and for
    running the service without a store.
    """

    def __init__(self) -> None:
        self._batches: list[list[CanonicalEvent]] = []
        self._lock = threading.Lock()

    def write(self, events: Sequence[CanonicalEvent]) -> WriteResult:
        """Record a batch. Empty batches are not recorded."""
        if not events:
            return WriteResult.success(0)
        with self._lock:
            self._batches.append(list(events))
        return WriteResult.success(len(events))

    @property
    def batches(self) -> list[list[CanonicalEvent]]:
        """Batches written so far, oldest first."""
        with self._lock:
            return [list(batch) for batch in self._batches]

    @property
    def events(self) -> list[CanonicalEvent]:
        """All written events in write order."""
        return [event for batch in self.batches for event in batch]

    def clear(self) -> None:
        with self._lock:
            self._batches.clear()
