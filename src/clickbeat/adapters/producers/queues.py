"""Message queue and key/value store sources.

Both sources wrap a client object instead of owning a protocol
implementation. ``KafkaSource`` expects the kafka-python ``KafkaConsumer``
interface and ``RedisSource`` the redis-py ``Redis`` interface; the
``from_config`` constructors build those clients and need the optional
``kafka`` / ``redis`` extras installed.
"""

import logging
from typing import Any

from clickbeat.core.config import KafkaInputConfig, RedisInputConfig
from clickbeat.core.encoding.ndjson import decode_object

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


def _decode_value(value: Any) -> dict[str, Any] | None:
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, str)):
        return decode_object(value)
    return None


class KafkaSource:
    """Consumes JSON objects from Kafka topics.

    Args:
        consumer: A subscribed consumer with kafka-python's
            ``poll(timeout_ms, max_records)`` and ``close()``.
        timeout_ms: How long one poll may wait for records.
        batch_size: Maximum records per poll.
    """

    name = "kafka"

    def __init__(
        self,
        consumer: Any,
        timeout_ms: int = 1000,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._consumer = consumer
        self._timeout_ms = timeout_ms
        self._batch_size = batch_size

    @classmethod
    def from_config(cls, config: KafkaInputConfig) -> "KafkaSource":
        """Build a source with a kafka-python consumer.

        Raises:
            ImportError: If kafka-python is not installed.
        """
        from kafka import KafkaConsumer

        consumer = KafkaConsumer(
            *config.topics,
            bootstrap_servers=list(config.brokers),
            group_id=config.group_id or None,
            enable_auto_commit=config.auto_commit,
        )
        return cls(consumer)

    def poll(self) -> list[dict[str, Any]]:
        """Return decoded objects from the next fetched records."""
        fetched = self._consumer.poll(
            timeout_ms=self._timeout_ms, max_records=self._batch_size
        )
        batch: list[dict[str, Any]] = []
        for records in fetched.values():
            for record in records:
                obj = _decode_value(record.value)
                if obj is None:
                    logger.debug(
                        "dropping malformed Kafka record at offset %s", record.offset
                    )
                    continue
                batch.append(obj)
        return batch

    def close(self) -> None:
        self._consumer.close()


class RedisSource:
    """Reads JSON objects from a Redis list or pub/sub channel.

    Args:
        client: A redis-py compatible client.
        key: List key (``list`` mode) or channel (``pubsub`` mode).
        mode: ``list`` pops items with LPOP; ``pubsub`` subscribes to the
            channel.
        batch_size: Maximum items per poll.
        timeout: Seconds one pub/sub read may wait.
    """

    name = "redis"

    def __init__(
        self,
        client: Any,
        key: str,
        mode: str = "list",
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: float = 1.0,
    ) -> None:
        self._client = client
        self._key = key
        self._mode = mode
        self._batch_size = batch_size
        self._timeout = timeout
        self._pubsub = None
        if mode == "pubsub":
            self._pubsub = client.pubsub(ignore_subscribe_messages=True)
            self._pubsub.subscribe(key)

    @classmethod
    def from_config(cls, config: RedisInputConfig) -> "RedisSource":
        """Build a source with a redis-py client.

        Raises:
            ImportError: If redis-py is not installed.
        """
        import redis

        host, _, port = config.address.partition(":")
        client = redis.Redis(
            host=host or "localhost",
            port=int(port or 6379),
            password=config.password or None,
        )
        return cls(client, config.key, config.mode)

    def _next_raw(self) -> Any:
        if self._pubsub is None:
            return self._client.lpop(self._key)
        message = self._pubsub.get_message(timeout=self._timeout)
        return None if message is None else message.get("data")

    def poll(self) -> list[dict[str, Any]]:
        """Return up to ``batch_size`` decoded objects."""
        batch: list[dict[str, Any]] = []
        for _ in range(self._batch_size):
            raw = self._next_raw()
            if raw is None:
                break
            obj = _decode_value(raw)
            if obj is None:
                logger.debug("dropping malformed Redis item from %s", self._key)
                continue
            batch.append(obj)
        return batch

    def close(self) -> None:
        if self._pubsub is not None:
            self._pubsub.close()
        self._client.close()
