"""Shared test fixtures for all test modules."""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import httpx
import pytest

from clickbeat.adapters.storage.clickhouse import ClickHouseBatchWriter
from clickbeat.adapters.storage.in_memory import InMemoryEventSink
from clickbeat.core.config import ClickHouseConfig


@pytest.fixture
def sink() -> InMemoryEventSink:
    """Provide an empty in-memory sink."""
    return InMemoryEventSink()


# === ClickHouse Fixtures ===


@dataclass
class StoreRecorder:
    """Records requests sent to a mocked ClickHouse server."""

    status_code: int = 200
    body: str = ""
    error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    @property
    def payload_lines(self) -> list[str]:
        """Lines of the last request body."""
        return self.requests[-1].content.decode("utf-8").split("\n")


@pytest.fixture
def store() -> StoreRecorder:
    """Provide a recorder that answers like a healthy ClickHouse."""
    return StoreRecorder()


@pytest.fixture
def clickhouse_writer(
    store: StoreRecorder,
) -> Iterator[Callable[..., ClickHouseBatchWriter]]:
    """Factory fixture for writers backed by the store recorder.

    Usage:
        def test_something(clickhouse_writer, store):
            writer = clickhouse_writer(user="default", password="secret")
            writer.write(events)
            assert store.requests
    """
    writers: list[ClickHouseBatchWriter] = []

    def _writer(**overrides: object) -> ClickHouseBatchWriter:
        config = ClickHouseConfig(**overrides)
        client = httpx.Client(transport=httpx.MockTransport(store.handle))
        writer = ClickHouseBatchWriter(config, client=client)
        writers.append(writer)
        return writer

    yield _writer
    for writer in writers:
        writer.close()


# === ASGI Test Fixtures ===


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_app(sink=sink, producers=[])
            async with asgi_test_client(app) as client:
                response = await client.post("/_bulk", content=body)
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
