"""Thread-based pump that drains producers into an event sink."""

import logging
import queue
import threading
from collections.abc import Sequence
from typing import Any

from clickbeat.core.normalize import normalize_event
from clickbeat.core.ports import EventSinkPort, ProducerPort

logger = logging.getLogger(__name__)

_STOP = object()


class IngestPump:
    """Runs each producer on its own thread and writes what they deliver.

    Producer threads put non-empty batches on one shared queue. A single
    writer thread normalizes every object and writes the batch through the
    sink, the same path the HTTP endpoints use. Failed writes are logged and
    the batch is discarded.

    Args:
        sink: Sink receiving normalized batches.
        producers: Sources to poll.
        poll_interval: Seconds a producer thread waits after an empty poll.
    """

    def __init__(
        self,
        sink: EventSinkPort,
        producers: Sequence[ProducerPort],
        poll_interval: float = 1.0,
    ) -> None:
        self._sink = sink
        self._producers = list(producers)
        self._poll_interval = poll_interval
        self._batches: queue.Queue[Any] = queue.Queue()
        self._stopping = threading.Event()
        self._threads: list[threading.Thread] = []
        self._writer: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._writer is not None

    def start(self) -> None:
        """Start the writer thread and one thread per producer."""
        if self._writer is not None:
            return
        self._stopping.clear()
        self._writer = threading.Thread(
            target=self._drain, name="ingest-writer", daemon=True
        )
        self._writer.start()
        for producer in self._producers:
            thread = threading.Thread(
                target=self._run_producer,
                args=(producer,),
                name=f"producer-{producer.name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
            logger.info("started %s producer", producer.name)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop polling, flush queued batches and close the producers."""
        if self._writer is None:
            return
        self._stopping.set()
        for thread in self._threads:
            thread.join(timeout)
        self._batches.put(_STOP)
        self._writer.join(timeout)
        for producer in self._producers:
            try:
                producer.close()
            except Exception:
                logger.exception("error closing %s producer", producer.name)
        self._threads.clear()
        self._writer = None

    def _run_producer(self, producer: ProducerPort) -> None:
        while not self._stopping.is_set():
            try:
                batch = producer.poll()
            except Exception:
                logger.exception("%s producer poll failed", producer.name)
                batch = []
            if batch:
                self._batches.put((producer.name, batch))
            else:
                self._stopping.wait(self._poll_interval)

    def _drain(self) -> None:
        while True:
            item = self._batches.get()
            if item is _STOP:
                return
            name, batch = item
            try:
                self.write_batch(name, batch)
            except Exception:
                logger.exception(
                    "write of %d objects from %s producer raised", len(batch), name
                )

    def write_batch(self, name: str, batch: list[dict[str, Any]]) -> None:
        """Normalize and write one producer batch."""
        events = [normalize_event(obj) for obj in batch]
        result = self._sink.write(events)
        if not result.ok:
            logger.error(
                "write of %d events from %s producer failed: %s",
                len(events),
                name,
                result.reason,
            )
