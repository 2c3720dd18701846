"""Tests for the Kafka and Redis sources with fake clients."""

from collections import deque
from dataclasses import dataclass
from typing import Any

import pytest

from clickbeat.adapters.producers import build_producers
from clickbeat.adapters.producers.queues import KafkaSource, RedisSource
from clickbeat.core.config import (
    FileInputConfig,
    InputsConfig,
    KafkaInputConfig,
    RedisInputConfig,
    TCPInputConfig,
)
from clickbeat.core.ports import ProducerPort


@dataclass
class FakeRecord:
    value: Any
    offset: int = 0


class FakeKafkaConsumer:
    def __init__(self, batches: list[dict[str, list[FakeRecord]]]) -> None:
        self._batches = deque(batches)
        self.closed = False
        self.calls: list[dict[str, int]] = []

    def poll(self, timeout_ms: int, max_records: int) -> dict[str, list[FakeRecord]]:
        self.calls.append({"timeout_ms": timeout_ms, "max_records": max_records})
        return self._batches.popleft() if self._batches else {}

    def close(self) -> None:
        self.closed = True


class FakePubSub:
    def __init__(self, messages: list[Any]) -> None:
        self._messages = deque(messages)
        self.subscribed: list[str] = []
        self.closed = False

    def subscribe(self, channel: str) -> None:
        self.subscribed.append(channel)

    def get_message(self, timeout: float) -> dict[str, Any] | None:
        if not self._messages:
            return None
        return {"type": "message", "data": self._messages.popleft()}

    def close(self) -> None:
        self.closed = True


class FakeRedis:
    def __init__(
        self, items: list[Any] | None = None, messages: list[Any] | None = None
    ) -> None:
        self.lists: dict[str, deque] = {"logs": deque(items or [])}
        self.pubsub_client = FakePubSub(messages or [])
        self.closed = False

    def lpop(self, key: str) -> Any:
        items = self.lists.get(key)
        return items.popleft() if items else None

    def pubsub(self, ignore_subscribe_messages: bool = False) -> FakePubSub:
        return self.pubsub_client

    def close(self) -> None:
        self.closed = True


class TestKafkaSource:
    """Tests for KafkaSource."""

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_satisfies_producer_port(self) -> None:
        assert isinstance(KafkaSource(FakeKafkaConsumer([])), ProducerPort)

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_poll_decodes_record_values(self) -> None:
        consumer = FakeKafkaConsumer(
            [
                {
                    "logs-0": [
                        FakeRecord(b'{"message":"a"}'),
                        FakeRecord(b"broken", 1),
                    ],
                    "logs-1": [FakeRecord('{"message":"b"}', 2)],
                }
            ]
        )
        source = KafkaSource(consumer, timeout_ms=50, batch_size=10)

        assert source.poll() == [{"message": "a"}, {"message": "b"}]
        assert source.poll() == []
        assert consumer.calls[0] == {"timeout_ms": 50, "max_records": 10}

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_close_closes_consumer(self) -> None:
        consumer = FakeKafkaConsumer([])

        KafkaSource(consumer).close()

        assert consumer.closed


class TestRedisSource:
    """Tests for RedisSource."""

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_list_mode_pops_up_to_batch_size(self) -> None:
        items = [b'{"message":"a"}', b"[1]", b'{"message":"b"}', b'{"message":"c"}']
        client = FakeRedis(items=items)
        source = RedisSource(client, "logs", mode="list", batch_size=3)

        assert source.poll() == [{"message": "a"}, {"message": "b"}]
        assert source.poll() == [{"message": "c"}]
        assert source.poll() == []

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_pubsub_mode_reads_channel(self) -> None:
        messages = [b'{"message":"a"}', "not json", b'{"message":"b"}']
        client = FakeRedis(messages=messages)
        source = RedisSource(client, "events", mode="pubsub")

        assert client.pubsub_client.subscribed == ["events"]
        assert source.poll() == [{"message": "a"}, {"message": "b"}]

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_close_releases_connections(self) -> None:
        client = FakeRedis()
        source = RedisSource(client, "events", mode="pubsub")

        source.close()

        assert client.pubsub_client.closed
        assert client.closed


class TestBuildProducers:
    """Tests for producer construction from configuration."""

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_nothing_enabled(self) -> None:
        assert build_producers(InputsConfig()) == []

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_incomplete_inputs_are_skipped(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        inputs = InputsConfig(
            kafka=KafkaInputConfig(enabled=True),
            redis=RedisInputConfig(enabled=True, address="redis:6379"),
            file=FileInputConfig(enabled=True),
            tcp=TCPInputConfig(enabled=True),
        )

        with caplog.at_level("WARNING", logger="clickbeat"):
            producers = build_producers(inputs)

        assert producers == []
        assert len(caplog.records) == 4

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_file_input_is_built(self) -> None:
        inputs = InputsConfig(
            file=FileInputConfig(enabled=True, paths=("/tmp/a.log",), follow=True)
        )

        (producer,) = build_producers(inputs)

        assert producer.name == "file"

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_failing_client_construction_is_skipped(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        def unreachable(cls, config):
            raise RuntimeError("Unable to bootstrap from [('127.0.0.1', 1)]")

        monkeypatch.setattr(KafkaSource, "from_config", classmethod(unreachable))
        inputs = InputsConfig(
            kafka=KafkaInputConfig(
                enabled=True, brokers=("127.0.0.1:1",), topics=("t",)
            ),
            file=FileInputConfig(enabled=True, paths=("/tmp/a.log",)),
        )

        with caplog.at_level("WARNING", logger="clickbeat"):
            producers = build_producers(inputs)

        assert [p.name for p in producers] == ["file"]
        assert "cannot start Kafka input" in caplog.text

    @pytest.mark.producers
    @pytest.mark.tier(0)
    def test_malformed_redis_address_is_skipped(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        inputs = InputsConfig(
            redis=RedisInputConfig(enabled=True, address="redis:abc", key="logs")
        )

        with caplog.at_level("WARNING", logger="clickbeat"):
            producers = build_producers(inputs)

        assert producers == []
        assert "Redis input" in caplog.text
